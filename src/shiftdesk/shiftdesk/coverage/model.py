from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from ..core.enums import TicketKind, TicketStatus


@dataclass(frozen=True)
class EmployeeRef:
    employee_id: int
    name: str
    hours: Optional[float] = None

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"employee_id": self.employee_id, "name": self.name}
        if self.hours is not None:
            data["hours"] = self.hours
        return data


@dataclass(frozen=True)
class CoverageItem:
    shift_id: int
    title: str
    date: date
    shift_code: Optional[str]
    client_id: Optional[int]
    assigned_employees: List[EmployeeRef]
    clocked_employees: List[EmployeeRef]
    missing_employees: List[EmployeeRef]
    extra_employees: List[EmployeeRef]
    coverage_percent: int

    @property
    def total_assigned(self) -> int:
        return len(self.assigned_employees)

    @property
    def total_clocked(self) -> int:
        return len(self.clocked_employees)

    @property
    def is_fully_covered(self) -> bool:
        return self.coverage_percent >= 100 and not self.missing_employees

    @property
    def is_uncovered(self) -> bool:
        return self.total_assigned > 0 and self.total_clocked == 0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "shift_id": self.shift_id,
            "title": self.title,
            "date": self.date.isoformat(),
            "shift_code": self.shift_code,
            "client_id": self.client_id,
            "assigned_employees": [e.as_dict() for e in self.assigned_employees],
            "clocked_employees": [e.as_dict() for e in self.clocked_employees],
            "missing_employees": [e.as_dict() for e in self.missing_employees],
            "extra_employees": [e.as_dict() for e in self.extra_employees],
            "coverage_percent": self.coverage_percent,
            "total_assigned": self.total_assigned,
            "total_clocked": self.total_clocked,
        }


@dataclass
class CoverageSummary:
    total_shifts: int = 0
    fully_covered: int = 0
    partially_covered: int = 0
    uncovered: int = 0
    overall_percent: int = 100
    tickets_created: int = 0
    items: List[CoverageItem] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total_shifts": self.total_shifts,
            "fully_covered": self.fully_covered,
            "partially_covered": self.partially_covered,
            "uncovered": self.uncovered,
            "overall_percent": self.overall_percent,
            "tickets_created": self.tickets_created,
            "items": [i.as_dict() for i in self.items],
        }


@dataclass(frozen=True)
class DiscrepancyTicket:
    ticket_id: int
    company_id: int
    shift_id: int
    employee_id: int
    kind: TicketKind
    description: Optional[str] = None
    status: TicketStatus = TicketStatus.NEW

    def as_dict(self) -> Dict[str, Any]:
        return {
            "ticket_id": self.ticket_id,
            "shift_id": self.shift_id,
            "employee_id": self.employee_id,
            "kind": self.kind.value,
            "description": self.description,
            "status": self.status.value,
        }
