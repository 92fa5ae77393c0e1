from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set

import mysql.connector

from ..common.datetime_utils import worked_hours
from ..conflicts.detector import ConflictDetector, ConflictMode
from ..core.constants import DEFAULT_SHIFT_SLOTS
from ..core.enums import AssignmentStatus, ImportKind, ShiftStatus
from ..core.exceptions import ConflictError, DomainError
from ..normalize.parsers import cell_text, is_blank_row, parse_clock_time, parse_export_date
from ..resolver.service import EntityResolver
from ..shifts.model import ShiftDraft
from ..shifts.repository import ShiftRepository
from .base import BatchedImport
from .model import ImportResult, ScheduleParseResult, ShiftGroup, UnavailableRecord

_logger = logging.getLogger(__name__)

UNAVAILABLE = "unavailable"
UNAVAILABLE_REASON = "Imported from schedule export"


class ScheduleImportService(BatchedImport):
    """Schedule export -> shifts, assignments and availability overrides."""

    kind = ImportKind.SCHEDULE

    def __init__(self, *, shifts: ShiftRepository, conflicts: ConflictDetector, **kwargs):
        super().__init__(**kwargs)
        self._shifts = shifts
        self._conflicts = conflicts

    def _delete_batch_rows(
        self,
        company_id: int,
        batch_ids: Sequence[int],
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> int:
        return self._shifts.delete_by_batches(company_id, batch_ids, date_from=date_from, date_to=date_to)

    def parse_rows(self, rows: Iterable[Mapping[str, Any]]) -> ScheduleParseResult:
        result = ScheduleParseResult()
        groups: Dict[tuple, ShiftGroup] = {}

        for row in rows:
            if is_blank_row(row):
                continue
            day = parse_export_date(row.get("Date"))
            if day is None:
                result.skipped_rows += 1
                continue

            user = cell_text(row, "Users")
            if cell_text(row, "Availability status").lower() == UNAVAILABLE:
                if user:
                    result.unavailable.append(UnavailableRecord(name=user, date=day))
                continue

            shift_code = cell_text(row, "Shift title")
            start_raw = cell_text(row, "Start")
            job = cell_text(row, "Job")
            if not shift_code and not job and not start_raw:
                continue

            start = parse_clock_time(start_raw)
            end = parse_clock_time(row.get("End"))
            if start is None or end is None:
                result.skipped_rows += 1
                continue

            key = (shift_code, day, start, end, job)
            group = groups.get(key)
            if group is None:
                group = ShiftGroup(
                    shift_code=shift_code,
                    date=day,
                    start_time=start,
                    end_time=end,
                    job=job,
                    sub_item=cell_text(row, "Sub item"),
                    address=cell_text(row, "Address"),
                    note=cell_text(row, "Note"),
                    tags=cell_text(row, "Shift tags"),
                    last_status=cell_text(row, "Last Status"),
                )
                groups[key] = group
                result.groups.append(group)
            group.add_employee(user)

        return result

    def preview(
        self,
        company_id: int,
        rows: Iterable[Mapping[str, Any]],
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Dict[str, Any]:
        """Parse and resolve without writing anything."""
        parsed = self.parse_rows(rows).filtered(date_from, date_to)
        resolver = self.new_resolver(company_id)
        for label in _distinct(g.job for g in parsed.groups):
            resolver.resolve_or_provision_client(label, auto_provision=False)
        for name in _distinct(n for g in parsed.groups for n in g.employees):
            resolver.resolve_or_provision_employee(name, auto_provision=False)

        span = parsed.date_range
        return {
            "shift_groups": len(parsed.groups),
            "assignments": sum(len(g.employees) for g in parsed.groups),
            "unavailable": len(parsed.unavailable),
            "skipped_rows": parsed.skipped_rows,
            "date_from": span[0].isoformat() if span else None,
            "date_to": span[1].isoformat() if span else None,
            "unmatched_employees": resolver.unmatched_employees,
            "unmatched_clients": resolver.unmatched_clients,
            "groups": [g.as_dict() for g in parsed.groups],
        }

    def run(
        self,
        company_id: int,
        rows: Iterable[Mapping[str, Any]],
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        auto_provision: bool = True,
        file_name: Optional[str] = None,
    ) -> ImportResult:
        company_id = int(company_id)
        parsed = self.parse_rows(rows).filtered(date_from, date_to)
        result = ImportResult(skipped_rows=parsed.skipped_rows)

        span = parsed.date_range
        if span is None:
            _logger.info("schedule import for company %s: nothing to import", company_id)
            return result
        range_start = date_from or span[0]
        range_end = date_to or span[1]
        result.replaced_batches, result.import_batch_id = self._open_batch(
            company_id, range_start=range_start, range_end=range_end, file_name=file_name
        )

        resolver = self.new_resolver(company_id)
        client_ids = {
            label: resolver.resolve_or_provision_client(label, auto_provision=auto_provision)
            for label in _distinct(g.job for g in parsed.groups)
        }
        employee_ids = {
            name: resolver.resolve_or_provision_employee(name, auto_provision=auto_provision)
            for name in _distinct(n for g in parsed.groups for n in g.employees)
        }

        for group in parsed.groups:
            self._import_group(company_id, group, client_ids, employee_ids, result)

        self._record_unavailable(company_id, parsed.unavailable, resolver, result)

        result.created_employees = resolver.created_employees
        result.created_clients = resolver.created_clients
        result.unmatched_employees = list(resolver.unmatched_employees)
        result.unmatched_clients = list(resolver.unmatched_clients)

        _logger.info(
            "schedule import for company %s (%s..%s): %s shifts, %s assignments, %s skipped overlap, "
            "%s unmatched employees",
            company_id,
            range_start,
            range_end,
            result.created_shifts,
            result.created_assignments,
            result.skipped_overlap,
            len(result.unmatched_employees),
        )
        self._emit(company_id, "scheduled_shifts")
        return result

    def _import_group(
        self,
        company_id: int,
        group: ShiftGroup,
        client_ids: Mapping[str, Optional[int]],
        employee_ids: Mapping[str, Optional[int]],
        result: ImportResult,
    ) -> None:
        draft = ShiftDraft(
            title=group.title,
            date=group.date,
            start_time=group.start_time,
            end_time=group.end_time,
            client_id=client_ids.get(group.job),
            slots=max(DEFAULT_SHIFT_SLOTS, len(group.employees)),
            claimable=False,
            status=ShiftStatus.PUBLISHED,
            shift_code=group.shift_code or None,
            notes=group.note or None,
            meeting_point=group.address or None,
        )
        try:
            shift_id = self._shifts.create_shift(
                company_id=company_id, draft=draft, import_batch_id=result.import_batch_id
            )
        except (DomainError, mysql.connector.Error) as exc:
            _logger.warning("skipping shift %r on %s: %s", group.title, group.date, exc)
            return
        result.created_shifts += 1

        status = group.assignment_status
        hours = worked_hours(
            datetime.combine(group.date, group.start_time), datetime.combine(group.date, group.end_time)
        )
        seen: Set[int] = set()
        for name in group.employees:
            employee_id = employee_ids.get(name)
            if employee_id is None or employee_id in seen:
                continue
            seen.add(employee_id)
            try:
                if status != AssignmentStatus.REJECTED:
                    self._conflicts.guard(
                        company_id,
                        employee_id,
                        group.date,
                        group.start_time,
                        group.end_time,
                        mode=ConflictMode.BLOCK,
                        exclude_shift_id=shift_id,
                    )
                self._shifts.create_assignment(
                    company_id=company_id,
                    shift_id=shift_id,
                    employee_id=employee_id,
                    status=status,
                    import_batch_id=result.import_batch_id,
                )
            except ConflictError as exc:
                result.skipped_overlap += 1
                _logger.warning("assignment skipped for %s on shift %s: %s", name, shift_id, exc)
                continue
            except (DomainError, mysql.connector.Error) as exc:
                _logger.warning("assignment failed for %s on shift %s: %s", name, shift_id, exc)
                continue
            result.created_assignments += 1
            if status != AssignmentStatus.REJECTED:
                result.total_hours += hours

    def _record_unavailable(
        self,
        company_id: int,
        records: List[UnavailableRecord],
        resolver: EntityResolver,
        result: ImportResult,
    ) -> None:
        for record in records:
            employee_id = resolver.resolve_employee(record.name)
            if employee_id is None:
                continue
            try:
                self._employees.upsert_availability(
                    company_id=company_id,
                    employee_id=employee_id,
                    day=record.date,
                    is_available=False,
                    reason=UNAVAILABLE_REASON,
                    source="import",
                )
            except (DomainError, mysql.connector.Error) as exc:
                _logger.warning("availability override failed for %s on %s: %s", record.name, record.date, exc)
                continue
            result.unavailable_recorded += 1


def _distinct(values: Iterable[str]) -> List[str]:
    return [v for v in dict.fromkeys(values) if v]
