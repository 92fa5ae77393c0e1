from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional, Tuple

from ..common.datetime_utils import format_hhmm, worked_hours
from ..core.constants import IMPORTED_TITLE_FALLBACK
from ..core.enums import AssignmentStatus, ImportKind
from ..normalize.parsers import normalize_label

_LAST_STATUS_MAP = {
    "accept": AssignmentStatus.ACCEPTED,
    "decline": AssignmentStatus.REJECTED,
}


@dataclass(frozen=True)
class ImportBatch:
    import_batch_id: int
    company_id: int
    kind: ImportKind
    range_start: date
    range_end: date
    file_name: Optional[str] = None
    created_at: Optional[datetime] = None

    def within(self, start: date, end: date) -> bool:
        return start <= self.range_start and self.range_end <= end


@dataclass
class ShiftGroup:
    """One planned shift occurrence built from one or more export rows."""

    shift_code: str
    date: date
    start_time: time
    end_time: time
    job: str = ""
    sub_item: str = ""
    address: str = ""
    note: str = ""
    tags: str = ""
    last_status: str = ""
    employees: List[str] = field(default_factory=list)

    @property
    def key(self) -> Tuple[str, date, time, time, str]:
        return (self.shift_code, self.date, self.start_time, self.end_time, self.job)

    @property
    def title(self) -> str:
        title = ""
        if self.shift_code:
            title += f"#{self.shift_code.zfill(4)} "
        if self.job:
            title += self.job
        if self.sub_item:
            title += f" - {self.sub_item}"
        return title.strip() or IMPORTED_TITLE_FALLBACK

    @property
    def assignment_status(self) -> AssignmentStatus:
        return _LAST_STATUS_MAP.get(self.last_status.strip().lower(), AssignmentStatus.ACCEPTED)

    def add_employee(self, name: str) -> None:
        """Keep the first spelling of each name; matching ignores case and spacing."""
        key = normalize_label(name)
        if key and key not in {normalize_label(n) for n in self.employees}:
            self.employees.append(name)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "shift_code": self.shift_code or None,
            "date": self.date.isoformat(),
            "start_time": format_hhmm(self.start_time),
            "end_time": format_hhmm(self.end_time),
            "job": self.job,
            "address": self.address,
            "employees": list(self.employees),
        }


@dataclass(frozen=True)
class UnavailableRecord:
    name: str
    date: date


def _span(days: List[date]) -> Optional[Tuple[date, date]]:
    if not days:
        return None
    return min(days), max(days)


@dataclass
class ScheduleParseResult:
    groups: List[ShiftGroup] = field(default_factory=list)
    unavailable: List[UnavailableRecord] = field(default_factory=list)
    skipped_rows: int = 0

    @property
    def date_range(self) -> Optional[Tuple[date, date]]:
        return _span([g.date for g in self.groups] + [u.date for u in self.unavailable])

    def filtered(self, date_from: Optional[date], date_to: Optional[date]) -> "ScheduleParseResult":
        def keep(day: date) -> bool:
            return (date_from is None or day >= date_from) and (date_to is None or day <= date_to)

        return ScheduleParseResult(
            groups=[g for g in self.groups if keep(g.date)],
            unavailable=[u for u in self.unavailable if keep(u.date)],
            skipped_rows=self.skipped_rows,
        )


@dataclass(frozen=True)
class ClockRow:
    """One clock session from a time-clock export."""

    first_name: str
    last_name: str
    clock_in: datetime
    clock_out: Optional[datetime] = None
    job: str = ""
    sub_item: str = ""
    shift_hours: float = 0.0
    hourly_rate: float = 0.0
    scheduled_shift_title: str = ""
    employee_notes: str = ""
    manager_notes: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def notes(self) -> str:
        parts = []
        if self.employee_notes:
            parts.append(f"Employee: {self.employee_notes}")
        if self.manager_notes:
            parts.append(f"Manager: {self.manager_notes}")
        parts.append("[Imported]")
        return " | ".join(parts)

    @property
    def hours(self) -> float:
        if self.shift_hours:
            return self.shift_hours
        return worked_hours(self.clock_in, self.clock_out)


@dataclass
class ClockParseResult:
    rows: List[ClockRow] = field(default_factory=list)
    skipped_rows: int = 0

    @property
    def date_range(self) -> Optional[Tuple[date, date]]:
        return _span([r.clock_in.date() for r in self.rows])

    def filtered(self, date_from: Optional[date], date_to: Optional[date]) -> "ClockParseResult":
        def keep(row: ClockRow) -> bool:
            day = row.clock_in.date()
            return (date_from is None or day >= date_from) and (date_to is None or day <= date_to)

        return ClockParseResult(rows=[r for r in self.rows if keep(r)], skipped_rows=self.skipped_rows)


@dataclass
class ImportResult:
    """Summary returned by every pipeline run; this is the caller's contract."""

    created_shifts: int = 0
    created_assignments: int = 0
    created_time_entries: int = 0
    linked_to_shift: int = 0
    created_employees: int = 0
    created_clients: int = 0
    unmatched_employees: List[str] = field(default_factory=list)
    unmatched_clients: List[str] = field(default_factory=list)
    skipped_overlap: int = 0
    skipped_rows: int = 0
    unavailable_recorded: int = 0
    replaced_batches: int = 0
    import_batch_id: Optional[int] = None
    total_hours: float = 0.0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "created_shifts": self.created_shifts,
            "created_assignments": self.created_assignments,
            "created_time_entries": self.created_time_entries,
            "linked_to_shift": self.linked_to_shift,
            "created_employees": self.created_employees,
            "created_clients": self.created_clients,
            "unmatched_employees": list(self.unmatched_employees),
            "unmatched_clients": list(self.unmatched_clients),
            "skipped_overlap": self.skipped_overlap,
            "skipped_rows": self.skipped_rows,
            "unavailable_recorded": self.unavailable_recorded,
            "replaced_batches": self.replaced_batches,
            "import_batch_id": self.import_batch_id,
            "total_hours": round(self.total_hours, 2),
        }
