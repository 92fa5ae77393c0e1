from __future__ import annotations

from datetime import date, datetime, time

import pytest

from src.shiftdesk.shiftdesk.conflicts.detector import ConflictDetector, ConflictMode, TimeRange, overlaps
from src.shiftdesk.shiftdesk.core.enums import AssignmentStatus, TimeEntryStatus
from src.shiftdesk.shiftdesk.core.exceptions import ConflictError
from src.shiftdesk.shiftdesk.shifts.model import ShiftDraft

DAY = date(2026, 2, 2)


def _shift(store, start: time, end: time, employee_id: int, status=AssignmentStatus.ACCEPTED) -> int:
    shift_id = store.shifts.create_shift(
        company_id=1, draft=ShiftDraft(title="Morning", date=DAY, start_time=start, end_time=end)
    )
    store.shifts.create_assignment(company_id=1, shift_id=shift_id, employee_id=employee_id, status=status)
    return shift_id


def test_adjacent_ranges_do_not_overlap():
    a = TimeRange(DAY, time(8), time(12))
    b = TimeRange(DAY, time(12), time(16))
    assert not overlaps(a, b)
    assert overlaps(a, TimeRange(DAY, time(11, 59), time(13)))


def test_all_day_covers_the_whole_day():
    all_day = TimeRange(DAY)
    assert all_day.is_all_day
    assert overlaps(all_day, TimeRange(DAY, time(0), time(0, 1)))
    assert overlaps(all_day, TimeRange(DAY, time(23), time(23, 59)))


def test_reversed_range_never_overlaps():
    reversed_range = TimeRange(DAY, time(16), time(8))
    assert reversed_range.is_empty
    assert not overlaps(reversed_range, TimeRange(DAY, time(0), time(23, 59)))


def test_other_days_never_overlap():
    assert not overlaps(TimeRange(DAY, time(8), time(12)), TimeRange(date(2026, 2, 3), time(8), time(12)))


def test_has_conflict_finds_overlapping_assignment(store):
    shift_id = _shift(store, time(8), time(12), employee_id=7)
    detector = ConflictDetector(store.shifts)

    clash = detector.has_conflict(1, 7, DAY, time(10), time(14))
    assert clash is not None and clash.shift_id == shift_id
    assert detector.has_conflict(1, 7, DAY, time(12), time(14)) is None
    assert detector.has_conflict(1, 7, DAY, time(10), time(14), exclude_shift_id=shift_id) is None
    assert detector.has_conflict(1, 8, DAY, time(10), time(14)) is None


def test_rejected_assignments_are_ignored(store):
    _shift(store, time(8), time(12), employee_id=7, status=AssignmentStatus.REJECTED)
    assert ConflictDetector(store.shifts).has_conflict(1, 7, DAY, time(9), time(10)) is None


def test_guard_blocks_or_warns(store):
    shift_id = _shift(store, time(8), time(12), employee_id=7)
    detector = ConflictDetector(store.shifts)

    with pytest.raises(ConflictError):
        detector.guard(1, 7, DAY, time(9), time(10), mode=ConflictMode.BLOCK)

    clash = detector.guard(1, 7, DAY, time(9), time(10), mode=ConflictMode.WARN)
    assert clash.shift_id == shift_id


def test_time_entry_overlap_treats_open_entries_as_unbounded(store):
    store.time_entries.create_entry(
        company_id=1,
        employee_id=7,
        clock_in=datetime(2026, 2, 2, 8, 0),
        clock_out=None,
        status=TimeEntryStatus.PENDING,
    )
    detector = ConflictDetector(store.shifts, store.time_entries)

    assert detector.find_time_entry_overlap(1, 7, datetime(2026, 2, 3, 9, 0)) is not None
    assert detector.find_time_entry_overlap(1, 7, datetime(2026, 2, 2, 6, 0), datetime(2026, 2, 2, 8, 0)) is None


def test_time_entry_overlap_respects_closed_bounds(store):
    entry_id = store.time_entries.create_entry(
        company_id=1,
        employee_id=7,
        clock_in=datetime(2026, 2, 2, 8, 0),
        clock_out=datetime(2026, 2, 2, 12, 0),
        status=TimeEntryStatus.APPROVED,
    )
    detector = ConflictDetector(store.shifts, store.time_entries)

    assert detector.find_time_entry_overlap(1, 7, datetime(2026, 2, 2, 12, 0), datetime(2026, 2, 2, 14, 0)) is None
    hit = detector.find_time_entry_overlap(1, 7, datetime(2026, 2, 2, 11, 0), datetime(2026, 2, 2, 13, 0))
    assert hit.entry_id == entry_id
    assert (
        detector.find_time_entry_overlap(
            1, 7, datetime(2026, 2, 2, 11, 0), datetime(2026, 2, 2, 13, 0), exclude_entry_id=entry_id
        )
        is None
    )
