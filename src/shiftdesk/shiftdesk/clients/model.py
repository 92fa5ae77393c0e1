from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Client:
    """Domain entity: a customer site a shift can be worked for."""

    client_id: int
    company_id: int
    name: str
    notes: Optional[str] = None


@dataclass(frozen=True)
class Location:
    location_id: int
    company_id: int
    name: str
    notes: Optional[str] = None
