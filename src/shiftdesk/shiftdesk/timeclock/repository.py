from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import TimeEntryStatus
from .model import TimeEntry


class TimeEntryRepository(Protocol):
    def create_entry(
        self,
        *,
        company_id: int,
        employee_id: int,
        clock_in: datetime,
        clock_out: Optional[datetime],
        status: TimeEntryStatus,
        shift_id: Optional[int] = None,
        break_minutes: int = 0,
        notes: Optional[str] = None,
        import_batch_id: Optional[int] = None,
    ) -> int:
        """Raises ConflictError when a second open entry (or a duplicate clock-in) is inserted."""

        raise NotImplementedError

    def get_by_id(self, company_id: int, entry_id: int) -> Optional[TimeEntry]:
        raise NotImplementedError

    def get_open_for_employee(self, company_id: int, employee_id: int) -> Optional[TimeEntry]:
        raise NotImplementedError

    def close_entry(self, company_id: int, entry_id: int, *, clock_out: datetime) -> bool:
        raise NotImplementedError

    def admin_update_entry(
        self,
        company_id: int,
        entry_id: int,
        *,
        clock_in: datetime,
        clock_out: Optional[datetime],
        break_minutes: int,
        notes: Optional[str] = None,
    ) -> bool:
        """Admin-only correction of a closed entry."""

        raise NotImplementedError

    def set_status(self, company_id: int, entry_id: int, *, status: TimeEntryStatus) -> bool:
        raise NotImplementedError

    def list_for_employee_between(
        self, company_id: int, *, employee_id: int, start: datetime, end: datetime
    ) -> Sequence[TimeEntry]:
        """Entries whose [clock_in, clock_out) intersects [start, end); open entries never end."""

        raise NotImplementedError

    def list_for_shifts(self, company_id: int, shift_ids: Sequence[int]) -> Sequence[TimeEntry]:
        raise NotImplementedError

    def delete_by_batches(
        self,
        company_id: int,
        batch_ids: Sequence[int],
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> int:
        raise NotImplementedError
