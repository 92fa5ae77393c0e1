from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Client, Location


class ClientRepository(Protocol):
    """Clients and locations. Soft-deleted rows are never returned."""

    def list_clients(self, company_id: int) -> Sequence[Client]:
        raise NotImplementedError

    def create_client(self, *, company_id: int, name: str, notes: Optional[str] = None) -> int:
        raise NotImplementedError

    def soft_delete_client(self, company_id: int, client_id: int) -> bool:
        raise NotImplementedError

    def list_locations(self, company_id: int) -> Sequence[Location]:
        raise NotImplementedError

    def create_location(self, *, company_id: int, name: str, notes: Optional[str] = None) -> int:
        raise NotImplementedError
