from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import ShiftRequest


class ShiftRequestRepository(Protocol):
    def create(self, *, company_id: int, shift_id: int, employee_id: int) -> int:
        raise NotImplementedError

    def get_by_id(self, company_id: int, request_id: int) -> Optional[ShiftRequest]:
        raise NotImplementedError

    def find_pending(self, company_id: int, *, shift_id: int, employee_id: int) -> Optional[ShiftRequest]:
        raise NotImplementedError

    def decide(
        self,
        company_id: int,
        request_id: int,
        *,
        status: RequestStatus,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        """Only pending requests can be decided; returns False otherwise."""

        raise NotImplementedError

    def list_by_status(self, company_id: int, *, status: RequestStatus, limit: int = 200) -> Sequence[ShiftRequest]:
        raise NotImplementedError
