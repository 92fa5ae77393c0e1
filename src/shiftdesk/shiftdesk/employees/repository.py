from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AvailabilityOverride, Employee


class EmployeeRepository(Protocol):
    """Repository interface for employees.

    Note: services depend on this interface, not on a concrete database.
    """

    def list_for_company(self, company_id: int, *, active_only: bool = False) -> Sequence[Employee]:
        raise NotImplementedError

    def get_by_id(self, company_id: int, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def create(self, *, company_id: int, first_name: str, last_name: str, is_active: bool = True) -> int:
        raise NotImplementedError

    def set_active(self, company_id: int, employee_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def upsert_availability(
        self,
        *,
        company_id: int,
        employee_id: int,
        day: date,
        is_available: bool,
        reason: Optional[str] = None,
        source: str = "manual",
    ) -> None:
        raise NotImplementedError

    def list_availability(self, company_id: int, *, start: date, end: date) -> Sequence[AvailabilityOverride]:
        raise NotImplementedError
