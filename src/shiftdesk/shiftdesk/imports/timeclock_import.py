from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

import mysql.connector

from ..conflicts.detector import ConflictDetector
from ..core.enums import ImportKind, TimeEntryStatus
from ..core.exceptions import ConflictError, DomainError
from ..normalize.parsers import (
    cell_text,
    find_clock_date_column,
    is_blank_row,
    parse_clock_timestamp,
    parse_currency,
)
from ..shifts.repository import ShiftRepository
from ..timeclock.repository import TimeEntryRepository
from .base import BatchedImport
from .model import ClockParseResult, ClockRow, ImportResult

_logger = logging.getLogger(__name__)


def is_summary_row(row: Mapping[str, Any]) -> bool:
    """Total lines at the end of each employee block carry neither a shift number nor a type."""
    return not cell_text(row, "Shift Number") and not cell_text(row, "Type")


class TimeClockImportService(BatchedImport):
    """Time-clock export -> time entries, linked to shifts by shift code and date."""

    kind = ImportKind.TIME_CLOCK

    def __init__(
        self,
        *,
        shifts: ShiftRepository,
        time_entries: TimeEntryRepository,
        conflicts: ConflictDetector,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self._shifts = shifts
        self._time_entries = time_entries
        self._conflicts = conflicts

    def _delete_batch_rows(
        self,
        company_id: int,
        batch_ids: Sequence[int],
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> int:
        return self._time_entries.delete_by_batches(company_id, batch_ids, date_from=date_from, date_to=date_to)

    def parse_rows(self, rows: Iterable[Mapping[str, Any]]) -> ClockParseResult:
        result = ClockParseResult()
        for row in rows:
            if is_blank_row(row) or is_summary_row(row):
                continue
            first = cell_text(row, "First name")
            last = cell_text(row, "Last name")
            if not first and not last:
                continue

            start_key = find_clock_date_column(row, "Start Date")
            end_key = find_clock_date_column(row, "End Date")
            clock_in = parse_clock_timestamp(row.get(start_key), row.get("In"))
            if clock_in is None:
                result.skipped_rows += 1
                continue
            clock_out = parse_clock_timestamp(row.get(end_key), row.get("Out"))
            if clock_out is not None and clock_out < clock_in:
                result.skipped_rows += 1
                continue

            result.rows.append(
                ClockRow(
                    first_name=first,
                    last_name=last,
                    clock_in=clock_in,
                    clock_out=clock_out,
                    job=cell_text(row, "Type"),
                    sub_item=cell_text(row, "Sub item"),
                    shift_hours=parse_currency(row.get("Shift hours")),
                    hourly_rate=parse_currency(row.get("Hourly rate (USD)")),
                    scheduled_shift_title=cell_text(row, "Scheduled shift title"),
                    employee_notes=cell_text(row, "Employee notes"),
                    manager_notes=cell_text(row, "Manager notes"),
                )
            )
        return result

    def preview(
        self,
        company_id: int,
        rows: Iterable[Mapping[str, Any]],
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Dict[str, Any]:
        parsed = self.parse_rows(rows).filtered(date_from, date_to)
        resolver = self.new_resolver(company_id)
        for row in parsed.rows:
            resolver.resolve_or_provision_employee(row.full_name, auto_provision=False)

        span = parsed.date_range
        return {
            "entries": len(parsed.rows),
            "employees": len({r.full_name.lower() for r in parsed.rows}),
            "skipped_rows": parsed.skipped_rows,
            "date_from": span[0].isoformat() if span else None,
            "date_to": span[1].isoformat() if span else None,
            "total_hours": round(sum(r.hours for r in parsed.rows), 2),
            "unmatched_employees": resolver.unmatched_employees,
        }

    def run(
        self,
        company_id: int,
        rows: Iterable[Mapping[str, Any]],
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        auto_provision: bool = False,
        file_name: Optional[str] = None,
    ) -> ImportResult:
        company_id = int(company_id)
        parsed = self.parse_rows(rows).filtered(date_from, date_to)
        result = ImportResult(skipped_rows=parsed.skipped_rows)

        span = parsed.date_range
        if span is None:
            _logger.info("time-clock import for company %s: nothing to import", company_id)
            return result
        range_start = date_from or span[0]
        range_end = date_to or span[1]
        result.replaced_batches, result.import_batch_id = self._open_batch(
            company_id, range_start=range_start, range_end=range_end, file_name=file_name
        )

        resolver = self.new_resolver(company_id)
        shift_cache: Dict[Tuple[str, date], Optional[int]] = {}

        for row in parsed.rows:
            employee_id = resolver.resolve_or_provision_employee(row.full_name, auto_provision=auto_provision)
            if employee_id is None:
                continue
            resolver.resolve_or_provision_client(row.job, auto_provision=auto_provision)

            shift_id = self._linked_shift(company_id, row, shift_cache)
            try:
                if self._conflicts.find_time_entry_overlap(company_id, employee_id, row.clock_in, row.clock_out):
                    raise ConflictError(f"overlapping time entry for {row.full_name} at {row.clock_in}")
                self._time_entries.create_entry(
                    company_id=company_id,
                    employee_id=employee_id,
                    shift_id=shift_id,
                    clock_in=row.clock_in,
                    clock_out=row.clock_out,
                    status=TimeEntryStatus.APPROVED,
                    notes=row.notes,
                    import_batch_id=result.import_batch_id,
                )
            except ConflictError as exc:
                result.skipped_overlap += 1
                _logger.warning("time entry skipped: %s", exc)
                continue
            except (DomainError, mysql.connector.Error) as exc:
                _logger.warning("time entry failed for %s at %s: %s", row.full_name, row.clock_in, exc)
                continue

            result.created_time_entries += 1
            result.total_hours += row.hours
            if shift_id is not None:
                result.linked_to_shift += 1

        result.created_employees = resolver.created_employees
        result.created_clients = resolver.created_clients
        result.unmatched_employees = list(resolver.unmatched_employees)
        result.unmatched_clients = list(resolver.unmatched_clients)

        _logger.info(
            "time-clock import for company %s (%s..%s): %s entries, %s linked, %s skipped overlap",
            company_id,
            range_start,
            range_end,
            result.created_time_entries,
            result.linked_to_shift,
            result.skipped_overlap,
        )
        self._emit(company_id, "time_entries")
        return result

    def _linked_shift(
        self, company_id: int, row: ClockRow, cache: Dict[Tuple[str, date], Optional[int]]
    ) -> Optional[int]:
        code = row.scheduled_shift_title
        if not code:
            return None
        key = (code, row.clock_in.date())
        if key not in cache:
            shift = self._shifts.find_by_code(company_id, shift_code=code, day=key[1])
            cache[key] = shift.shift_id if shift else None
        return cache[key]
