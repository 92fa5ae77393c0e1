from __future__ import annotations

from datetime import date, datetime, time

import pytest

from src.shiftdesk.shiftdesk.core.enums import AssignmentStatus, TicketKind, TicketStatus, TimeEntryStatus
from src.shiftdesk.shiftdesk.core.exceptions import ValidationError
from src.shiftdesk.shiftdesk.coverage.service import CoverageService, coverage_percent
from src.shiftdesk.shiftdesk.shifts.model import ShiftDraft

DAY = date(2026, 2, 18)


def _shift(store, title: str = "Packing", start: time = time(8), end: time = time(16)) -> int:
    return store.shifts.create_shift(
        company_id=1, draft=ShiftDraft(title=title, date=DAY, start_time=start, end_time=end)
    )


def _assign(store, shift_id: int, employee_id: int, status=AssignmentStatus.ACCEPTED) -> None:
    store.shifts.create_assignment(company_id=1, shift_id=shift_id, employee_id=employee_id, status=status)


def _clock(store, shift_id, employee_id: int, hour: int = 8, status=TimeEntryStatus.APPROVED) -> None:
    store.time_entries.create_entry(
        company_id=1,
        employee_id=employee_id,
        shift_id=shift_id,
        clock_in=datetime(2026, 2, 18, hour, 0),
        clock_out=datetime(2026, 2, 18, hour + 8, 0),
        status=status,
    )


def test_coverage_percent():
    assert coverage_percent(0, 0) == 100
    assert coverage_percent(0, 3) == 100
    assert coverage_percent(3, 1) == 33
    assert coverage_percent(2, 5) == 100


def test_assigned_employee_without_entry_is_missing_and_ticketed(store, container):
    ana = store.employees.add("Ana", "Lopez")
    shift_id = _shift(store)
    _assign(store, shift_id, ana)

    summary = container.coverage_service.analyze(1, DAY, DAY)

    (item,) = summary.items
    assert item.coverage_percent == 0
    assert [e.employee_id for e in item.missing_employees] == [ana]
    assert item.missing_employees[0].name == "Ana Lopez"
    assert summary.tickets_created == 1
    (ticket,) = store.tickets.rows.values()
    assert ticket.kind == TicketKind.MISSING_ATTENDANCE
    assert ticket.shift_id == shift_id
    assert summary.uncovered == 1
    assert CoverageService.shift_status(shift_id, summary) == "uncovered"


def test_rerun_does_not_duplicate_tickets(store, container):
    ana = store.employees.add("Ana", "Lopez")
    _assign(store, _shift(store), ana)

    container.coverage_service.analyze(1, DAY, DAY)
    again = container.coverage_service.analyze(1, DAY, DAY)

    assert again.tickets_created == 0
    assert len(store.tickets.rows) == 1


def test_shift_classes_partition_the_range(store, container):
    ana = store.employees.add("Ana", "Lopez")
    bob = store.employees.add("Bob", "Stone")
    cy = store.employees.add("Cy", "Young")

    covered = _shift(store, "Covered")
    _assign(store, covered, ana)
    _clock(store, covered, ana)

    partial = _shift(store, "Partial", time(17), time(23))
    _assign(store, partial, bob)
    _assign(store, partial, cy)
    _clock(store, partial, bob, hour=14)

    empty = _shift(store, "No one planned", time(6), time(7))

    summary = container.coverage_service.analyze(1, DAY, DAY, create_tickets=False)

    assert summary.total_shifts == 3
    assert summary.fully_covered + summary.partially_covered + summary.uncovered == summary.total_shifts
    assert CoverageService.shift_status(covered, summary) == "covered"
    assert CoverageService.shift_status(partial, summary) == "partial"
    assert CoverageService.shift_status(empty, summary) == "covered"
    assert CoverageService.shift_status(999, summary) is None
    assert summary.overall_percent == 67
    assert summary.tickets_created == 0
    assert store.tickets.rows == {}


def test_clock_ins_without_assignment_are_extra(store, container):
    ana = store.employees.add("Ana", "Lopez")
    bob = store.employees.add("Bob", "Stone")
    shift_id = _shift(store)
    _assign(store, shift_id, ana)
    _clock(store, shift_id, ana)
    _clock(store, shift_id, bob)

    summary = container.coverage_service.analyze(1, DAY, DAY)

    (item,) = summary.items
    assert item.coverage_percent == 100
    assert [(e.employee_id, e.hours) for e in item.extra_employees] == [(bob, 8.0)]
    assert summary.tickets_created == 0


@pytest.mark.parametrize("settings", [{"TICKET_UNASSIGNED_ATTENDANCE": True}])
def test_unassigned_attendance_tickets_when_enabled(store, container):
    bob = store.employees.add("Bob", "Stone")
    shift_id = _shift(store)
    _clock(store, shift_id, bob)

    summary = container.coverage_service.analyze(1, DAY, DAY)

    assert summary.tickets_created == 1
    (ticket,) = store.tickets.rows.values()
    assert ticket.kind == TicketKind.UNASSIGNED_ATTENDANCE
    assert ticket.employee_id == bob


def test_rejected_assignments_and_entries_do_not_count(store, container):
    ana = store.employees.add("Ana", "Lopez")
    bob = store.employees.add("Bob", "Stone")
    shift_id = _shift(store)
    _assign(store, shift_id, ana, status=AssignmentStatus.REJECTED)
    _assign(store, shift_id, bob)
    _clock(store, shift_id, bob, status=TimeEntryStatus.REJECTED)

    summary = container.coverage_service.analyze(1, DAY, DAY, create_tickets=False)

    (item,) = summary.items
    assert [e.employee_id for e in item.assigned_employees] == [bob]
    assert item.clocked_employees == []
    assert item.coverage_percent == 0


def test_reversed_window_is_rejected(container):
    with pytest.raises(ValidationError):
        container.coverage_service.analyze(1, date(2026, 2, 2), date(2026, 2, 1))


def test_empty_range_is_fully_covered(container):
    summary = container.coverage_service.analyze(1, DAY, DAY)
    assert summary.total_shifts == 0
    assert summary.overall_percent == 100


def test_list_tickets_by_range_and_status(store, container):
    ana = store.employees.add("Ana", "Lopez")
    bob = store.employees.add("Bob", "Stone")
    shift_id = _shift(store)
    _assign(store, shift_id, ana)
    _assign(store, shift_id, bob)
    container.coverage_service.analyze(1, DAY, DAY)
    first, _ = store.tickets.rows
    store.tickets.set_status(1, first, status=TicketStatus.RESOLVED)

    tickets = container.coverage_service.list_tickets(1, DAY, DAY)
    assert sorted(t.employee_id for t in tickets) == [ana, bob]
    (resolved,) = container.coverage_service.list_tickets(1, DAY, DAY, status=TicketStatus.RESOLVED)
    assert resolved.ticket_id == first
    assert container.coverage_service.list_tickets(1, date(2026, 2, 19), date(2026, 2, 20)) == []
    with pytest.raises(ValidationError):
        container.coverage_service.list_tickets(1, date(2026, 2, 20), DAY)
