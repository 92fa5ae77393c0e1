from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: a person who can be assigned shifts and clock time.

    Note: employees are never hard-deleted; ``is_active`` is the soft switch.
    """

    employee_id: int
    company_id: int
    first_name: str
    last_name: str
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class AvailabilityOverride:
    employee_id: int
    company_id: int
    date: date
    is_available: bool
    reason: Optional[str] = None
    source: str = "manual"
