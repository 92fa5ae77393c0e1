from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import TicketKind, TicketStatus
from .model import DiscrepancyTicket


class TicketRepository(Protocol):
    def create_if_absent(
        self,
        *,
        company_id: int,
        shift_id: int,
        employee_id: int,
        kind: TicketKind,
        description: Optional[str] = None,
    ) -> bool:
        """Insert a ticket unless one exists for (shift, employee, kind); True when a row was written."""

        raise NotImplementedError

    def list_for_shifts(self, company_id: int, shift_ids: Sequence[int]) -> Sequence[DiscrepancyTicket]:
        raise NotImplementedError

    def set_status(self, company_id: int, ticket_id: int, *, status: TicketStatus) -> bool:
        raise NotImplementedError
