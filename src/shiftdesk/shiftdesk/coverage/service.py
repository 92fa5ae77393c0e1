from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional, Sequence

from ..common.datetime_utils import worked_hours
from ..core.enums import AssignmentStatus, TicketKind, TicketStatus, TimeEntryStatus
from ..core.exceptions import DomainError, ValidationError
from ..employees.repository import EmployeeRepository
from ..shifts.model import Assignment, Shift
from ..shifts.repository import ShiftRepository
from ..timeclock.model import TimeEntry
from ..timeclock.repository import TimeEntryRepository
from .model import CoverageItem, CoverageSummary, DiscrepancyTicket, EmployeeRef
from .repository import TicketRepository

_logger = logging.getLogger(__name__)

_PLANNED = {AssignmentStatus.ACCEPTED, AssignmentStatus.PENDING}
UNKNOWN_EMPLOYEE = "Unknown"


def coverage_percent(assigned: int, clocked: int) -> int:
    if assigned <= 0:
        return 100
    return round(100 * min(clocked, assigned) / assigned)


class CoverageService:
    """Planned (assignments) vs actual (time entries) per shift."""

    def __init__(
        self,
        shifts: ShiftRepository,
        time_entries: TimeEntryRepository,
        tickets: TicketRepository,
        employees: EmployeeRepository,
        *,
        ticket_unassigned: bool = False,
    ):
        self._shifts = shifts
        self._time_entries = time_entries
        self._tickets = tickets
        self._employees = employees
        self._ticket_unassigned = bool(ticket_unassigned)

    def analyze(
        self,
        company_id: int,
        date_from: date,
        date_to: date,
        *,
        create_tickets: bool = True,
    ) -> CoverageSummary:
        if date_to < date_from:
            raise ValidationError("date_to must be on or after date_from")

        company_id = int(company_id)
        shifts = list(self._shifts.list_range(company_id, start=date_from, end=date_to))
        summary = CoverageSummary()
        if not shifts:
            return summary

        shift_ids = [s.shift_id for s in shifts]
        assignments = [a for a in self._shifts.list_assignments(company_id, shift_ids) if a.status in _PLANNED]
        entries = [
            e
            for e in self._time_entries.list_for_shifts(company_id, shift_ids)
            if e.status != TimeEntryStatus.REJECTED
        ]
        names = {e.employee_id: e.full_name for e in self._employees.list_for_company(company_id)}

        by_shift_assignments: Dict[int, List[Assignment]] = defaultdict(list)
        for a in assignments:
            by_shift_assignments[a.shift_id].append(a)
        by_shift_entries: Dict[int, List[TimeEntry]] = defaultdict(list)
        for e in entries:
            by_shift_entries[e.shift_id].append(e)

        for shift in shifts:
            item = self._reconcile(shift, by_shift_assignments[shift.shift_id], by_shift_entries[shift.shift_id], names)
            summary.items.append(item)
            if create_tickets:
                summary.tickets_created += self._open_tickets(company_id, shift, item)

        summary.total_shifts = len(summary.items)
        summary.fully_covered = sum(1 for i in summary.items if i.is_fully_covered)
        summary.uncovered = sum(1 for i in summary.items if i.is_uncovered)
        summary.partially_covered = summary.total_shifts - summary.fully_covered - summary.uncovered

        total_assigned = sum(i.total_assigned for i in summary.items)
        total_matched = sum(min(i.total_clocked, i.total_assigned) for i in summary.items)
        summary.overall_percent = coverage_percent(total_assigned, total_matched)

        _logger.info(
            "coverage %s..%s for company %s: %s shifts, %s%% overall, %s new tickets",
            date_from,
            date_to,
            company_id,
            summary.total_shifts,
            summary.overall_percent,
            summary.tickets_created,
        )
        return summary

    @staticmethod
    def _reconcile(
        shift: Shift,
        assignments: Sequence[Assignment],
        entries: Sequence[TimeEntry],
        names: Dict[int, str],
    ) -> CoverageItem:
        assigned_ids = list(dict.fromkeys(a.employee_id for a in assignments))

        hours: Dict[int, float] = {}
        for e in entries:
            hours[e.employee_id] = hours.get(e.employee_id, 0.0) + worked_hours(
                e.clock_in, e.clock_out, e.break_minutes
            )
        clocked_ids = list(hours)

        def ref(employee_id: int, with_hours: bool = False) -> EmployeeRef:
            return EmployeeRef(
                employee_id=employee_id,
                name=names.get(employee_id, UNKNOWN_EMPLOYEE),
                hours=round(hours[employee_id], 2) if with_hours else None,
            )

        return CoverageItem(
            shift_id=shift.shift_id,
            title=shift.title,
            date=shift.date,
            shift_code=shift.shift_code,
            client_id=shift.client_id,
            assigned_employees=[ref(i) for i in assigned_ids],
            clocked_employees=[ref(i, True) for i in clocked_ids],
            missing_employees=[ref(i) for i in assigned_ids if i not in hours],
            extra_employees=[ref(i, True) for i in clocked_ids if i not in assigned_ids],
            coverage_percent=coverage_percent(len(assigned_ids), len(clocked_ids)),
        )

    def _open_tickets(self, company_id: int, shift: Shift, item: CoverageItem) -> int:
        created = 0
        wanted = [(e, TicketKind.MISSING_ATTENDANCE) for e in item.missing_employees]
        if self._ticket_unassigned:
            wanted += [(e, TicketKind.UNASSIGNED_ATTENDANCE) for e in item.extra_employees]

        for employee, kind in wanted:
            if kind == TicketKind.MISSING_ATTENDANCE:
                description = (
                    f"{employee.name} was assigned to '{shift.title}' on {shift.date.isoformat()} "
                    f"({shift.time_label}) but has no clock-in"
                )
            else:
                description = (
                    f"{employee.name} clocked {employee.hours or 0:.2f}h on '{shift.title}' "
                    f"({shift.date.isoformat()}) without an assignment"
                )
            try:
                if self._tickets.create_if_absent(
                    company_id=company_id,
                    shift_id=shift.shift_id,
                    employee_id=employee.employee_id,
                    kind=kind,
                    description=description,
                ):
                    created += 1
            except DomainError as exc:
                _logger.warning("ticket for shift %s / employee %s not written: %s", shift.shift_id, employee.employee_id, exc)
        return created

    def list_tickets(
        self, company_id: int, date_from: date, date_to: date, *, status: Optional[TicketStatus] = None
    ) -> List[DiscrepancyTicket]:
        """Discrepancy tickets of the shifts dated in the range, optionally filtered by status."""
        if date_to < date_from:
            raise ValidationError("date_to must be on or after date_from")
        shift_ids = [s.shift_id for s in self._shifts.list_range(int(company_id), start=date_from, end=date_to)]
        if not shift_ids:
            return []
        tickets = self._tickets.list_for_shifts(int(company_id), shift_ids)
        return [t for t in tickets if status is None or t.status == status]

    @staticmethod
    def shift_status(shift_id: int, summary: CoverageSummary) -> Optional[str]:
        """Classify one shift of an analysed range as covered, partial or uncovered (None if absent)."""
        for item in summary.items:
            if item.shift_id != shift_id:
                continue
            if item.is_fully_covered:
                return "covered"
            if item.is_uncovered:
                return "uncovered"
            return "partial"
        return None
