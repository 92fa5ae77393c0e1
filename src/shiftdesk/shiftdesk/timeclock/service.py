from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from ..common.datetime_utils import now_local
from ..conflicts.detector import ConflictDetector
from ..core.enums import TimeEntryStatus
from ..core.events import EntityChange, EventBus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..shifts.repository import ShiftRepository
from .model import TimeEntry
from .repository import TimeEntryRepository

_logger = logging.getLogger(__name__)


class TimeClockService:
    """Portal clock-in/out plus administrative correction and review."""

    def __init__(
        self,
        time_entries: TimeEntryRepository,
        employees: EmployeeRepository,
        shifts: ShiftRepository,
        conflicts: ConflictDetector,
        events: Optional[EventBus] = None,
    ):
        self._entries = time_entries
        self._employees = employees
        self._shifts = shifts
        self._conflicts = conflicts
        self._events = events

    def _emit(self, company_id: int, action: str, entry_id: int) -> None:
        if self._events is not None:
            self._events.publish(
                EntityChange(company_id=company_id, entity="time_entries", action=action, entity_id=entry_id)
            )

    def _get_entry(self, company_id: int, entry_id: int) -> TimeEntry:
        entry = self._entries.get_by_id(company_id, int(entry_id))
        if not entry:
            raise NotFoundError("Time entry not found")
        return entry

    def clock_in(
        self,
        company_id: int,
        employee_id: int,
        shift_id: Optional[int] = None,
        *,
        now: Optional[datetime] = None,
    ) -> TimeEntry:
        company_id = int(company_id)
        now = (now or now_local()).replace(second=0, microsecond=0)

        employee = self._employees.get_by_id(company_id, int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        if not employee.is_active:
            raise ValidationError(f"{employee.full_name} is inactive")

        if self._entries.get_open_for_employee(company_id, employee.employee_id):
            raise ConflictError("Already clocked in; clock out first")

        if shift_id is not None and not self._shifts.get_by_id(company_id, int(shift_id)):
            raise NotFoundError("Shift not found")

        clash = self._conflicts.find_time_entry_overlap(company_id, employee.employee_id, now)
        if clash is not None:
            raise ConflictError(f"Overlaps an existing time entry starting {clash.clock_in:%Y-%m-%d %H:%M}")

        entry_id = self._entries.create_entry(
            company_id=company_id,
            employee_id=employee.employee_id,
            shift_id=int(shift_id) if shift_id is not None else None,
            clock_in=now,
            clock_out=None,
            status=TimeEntryStatus.PENDING,
        )
        _logger.info("employee %s clocked in at %s (entry %s)", employee.employee_id, now, entry_id)
        self._emit(company_id, "clock_in", entry_id)
        return self._get_entry(company_id, entry_id)

    def clock_out(self, company_id: int, employee_id: int, *, now: Optional[datetime] = None) -> TimeEntry:
        company_id = int(company_id)
        now = (now or now_local()).replace(second=0, microsecond=0)

        entry = self._entries.get_open_for_employee(company_id, int(employee_id))
        if not entry:
            raise ValidationError("Not clocked in")
        if now < entry.clock_in:
            raise ValidationError("Clock-out cannot be before clock-in")

        if not self._entries.close_entry(company_id, entry.entry_id, clock_out=now):
            raise ConflictError("Time entry was already closed")
        _logger.info("employee %s clocked out at %s (entry %s)", employee_id, now, entry.entry_id)
        self._emit(company_id, "clock_out", entry.entry_id)
        return self._get_entry(company_id, entry.entry_id)

    def correct_entry(
        self,
        company_id: int,
        entry_id: int,
        *,
        clock_in: datetime,
        clock_out: datetime,
        break_minutes: int = 0,
        notes: Optional[str] = None,
    ) -> TimeEntry:
        company_id = int(company_id)
        entry = self._get_entry(company_id, entry_id)
        if clock_out is None:
            raise ValidationError("A corrected entry needs a clock-out")
        if clock_out < clock_in:
            raise ValidationError("Clock-out cannot be before clock-in")
        if int(break_minutes or 0) < 0:
            raise ValidationError("Break minutes cannot be negative")

        clash = self._conflicts.find_time_entry_overlap(
            company_id, entry.employee_id, clock_in, clock_out, exclude_entry_id=entry.entry_id
        )
        if clash is not None:
            raise ConflictError(f"Overlaps time entry {clash.entry_id}")

        ok = self._entries.admin_update_entry(
            company_id,
            entry.entry_id,
            clock_in=clock_in,
            clock_out=clock_out,
            break_minutes=int(break_minutes or 0),
            notes=notes if notes is not None else entry.notes,
        )
        if not ok:
            raise ValidationError("Time entry could not be updated")
        self._emit(company_id, "corrected", entry.entry_id)
        return self._get_entry(company_id, entry.entry_id)

    def review_entry(self, company_id: int, entry_id: int, status: TimeEntryStatus) -> TimeEntry:
        company_id = int(company_id)
        status = TimeEntryStatus(status)
        if status == TimeEntryStatus.PENDING:
            raise ValidationError("Review must approve or reject")
        entry = self._get_entry(company_id, entry_id)
        if entry.is_open:
            raise ValidationError("Open time entries cannot be reviewed")

        self._entries.set_status(company_id, entry.entry_id, status=status)
        self._emit(company_id, "reviewed", entry.entry_id)
        return self._get_entry(company_id, entry.entry_id)

    def list_for_employee(
        self, company_id: int, employee_id: int, *, start: datetime, end: datetime
    ) -> List[TimeEntry]:
        return list(
            self._entries.list_for_employee_between(int(company_id), employee_id=int(employee_id), start=start, end=end)
        )
