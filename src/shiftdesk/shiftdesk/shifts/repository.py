from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import AssignmentStatus
from .model import Assignment, Shift, ShiftDraft


class ShiftRepository(Protocol):
    """Shifts and their assignments, always scoped by company."""

    def create_shift(self, *, company_id: int, draft: ShiftDraft, import_batch_id: Optional[int] = None) -> int:
        raise NotImplementedError

    def get_by_id(self, company_id: int, shift_id: int) -> Optional[Shift]:
        raise NotImplementedError

    def update_shift(self, company_id: int, shift_id: int, changes: Mapping[str, Any]) -> bool:
        """Full-row style update of the given columns (last write wins)."""

        raise NotImplementedError

    def list_range(self, company_id: int, *, start: date, end: date) -> Sequence[Shift]:
        raise NotImplementedError

    def find_by_code(self, company_id: int, *, shift_code: str, day: date) -> Optional[Shift]:
        raise NotImplementedError

    def create_assignment(
        self,
        *,
        company_id: int,
        shift_id: int,
        employee_id: int,
        status: AssignmentStatus,
        import_batch_id: Optional[int] = None,
    ) -> int:
        """Raises ConflictError when the employee is already on the shift."""

        raise NotImplementedError

    def get_assignment(self, company_id: int, assignment_id: int) -> Optional[Assignment]:
        raise NotImplementedError

    def delete_assignment(self, company_id: int, assignment_id: int) -> bool:
        raise NotImplementedError

    def list_assignments(self, company_id: int, shift_ids: Sequence[int]) -> Sequence[Assignment]:
        raise NotImplementedError

    def list_employee_shifts(self, company_id: int, *, employee_id: int, day: date) -> Sequence[Shift]:
        """Shifts on ``day`` the employee holds a non-rejected assignment for."""

        raise NotImplementedError

    def delete_by_batches(
        self,
        company_id: int,
        batch_ids: Sequence[int],
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> int:
        """Delete imported shifts/assignments tagged with the batches; returns shifts removed.

        With ``date_from``/``date_to`` only shifts dated inside the window go.
        """

        raise NotImplementedError
