"""Double-booking detection for assignments and attendance.

Ranges are half-open: a shift ending at 12:00 does not collide with one that
starts at 12:00. A range without times ("All Day") covers the whole day. A
reversed range (start >= end) is treated as empty and never collides; the
editor reports it separately as an ``inverted_range`` warning.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Optional

from ..core.exceptions import ConflictError
from ..shifts.model import Shift
from ..shifts.repository import ShiftRepository
from ..timeclock.model import TimeEntry
from ..timeclock.repository import TimeEntryRepository

_logger = logging.getLogger(__name__)

_DAY_MINUTES = 24 * 60
_FAR_FUTURE = datetime(9999, 12, 31)


class ConflictMode(str, Enum):
    BLOCK = "block"
    WARN = "warn"


@dataclass(frozen=True)
class TimeRange:
    date: date
    start: Optional[time] = None
    end: Optional[time] = None

    @property
    def is_all_day(self) -> bool:
        return self.start is None or self.end is None

    def minutes(self) -> tuple[int, int]:
        if self.is_all_day:
            return 0, _DAY_MINUTES
        return self.start.hour * 60 + self.start.minute, self.end.hour * 60 + self.end.minute

    @property
    def is_empty(self) -> bool:
        start, end = self.minutes()
        return start >= end

    @classmethod
    def of_shift(cls, shift: Shift) -> "TimeRange":
        return cls(date=shift.date, start=shift.start_time, end=shift.end_time)


def overlaps(a: TimeRange, b: TimeRange) -> bool:
    if a.date != b.date:
        return False
    if a.is_empty or b.is_empty:
        return False
    a_start, a_end = a.minutes()
    b_start, b_end = b.minutes()
    return a_start < b_end and b_start < a_end


def _entry_overlaps(entry: TimeEntry, clock_in: datetime, clock_out: Optional[datetime]) -> bool:
    # An open interval (no clock_out) extends indefinitely.
    if entry.clock_out is not None and entry.clock_out <= clock_in:
        return False
    if clock_out is not None and clock_out <= entry.clock_in:
        return False
    return True


class ConflictDetector:
    def __init__(self, shifts: ShiftRepository, time_entries: Optional[TimeEntryRepository] = None):
        self._shifts = shifts
        self._time_entries = time_entries

    def has_conflict(
        self,
        company_id: int,
        employee_id: int,
        day: date,
        start: Optional[time],
        end: Optional[time],
        exclude_shift_id: Optional[int] = None,
    ) -> Optional[Shift]:
        """First shift the employee already works on ``day`` that overlaps the candidate range."""
        candidate = TimeRange(date=day, start=start, end=end)
        for shift in self._shifts.list_employee_shifts(company_id, employee_id=employee_id, day=day):
            if exclude_shift_id is not None and shift.shift_id == exclude_shift_id:
                continue
            if overlaps(candidate, TimeRange.of_shift(shift)):
                return shift
        return None

    def guard(
        self,
        company_id: int,
        employee_id: int,
        day: date,
        start: Optional[time],
        end: Optional[time],
        *,
        mode: ConflictMode,
        exclude_shift_id: Optional[int] = None,
    ) -> Optional[Shift]:
        """BLOCK raises ConflictError on a hit; WARN returns the conflicting shift for the caller to surface."""
        clash = self.has_conflict(company_id, employee_id, day, start, end, exclude_shift_id=exclude_shift_id)
        if clash is not None and mode == ConflictMode.BLOCK:
            _logger.debug("employee %s already works shift %s on %s", employee_id, clash.shift_id, day)
            raise ConflictError(
                f"Employee {employee_id} already works '{clash.title}' ({clash.time_label}) on {day.isoformat()}"
            )
        return clash

    def find_time_entry_overlap(
        self,
        company_id: int,
        employee_id: int,
        clock_in: datetime,
        clock_out: Optional[datetime] = None,
        exclude_entry_id: Optional[int] = None,
    ) -> Optional[TimeEntry]:
        if self._time_entries is None:
            return None
        window_end = clock_out or _FAR_FUTURE
        candidates = self._time_entries.list_for_employee_between(
            company_id, employee_id=employee_id, start=clock_in, end=window_end
        )
        for entry in candidates:
            if exclude_entry_id is not None and entry.entry_id == exclude_entry_id:
                continue
            if _entry_overlaps(entry, clock_in, clock_out):
                return entry
        return None
