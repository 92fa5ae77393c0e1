from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import TimeEntryStatus


@dataclass(frozen=True)
class TimeEntry:
    """Domain entity: an actual attendance record.

    ``clock_out`` is None while the employee is still clocked in.
    """

    entry_id: int
    company_id: int
    employee_id: int
    clock_in: datetime
    clock_out: Optional[datetime] = None
    shift_id: Optional[int] = None
    break_minutes: int = 0
    status: TimeEntryStatus = TimeEntryStatus.PENDING
    notes: Optional[str] = None
    import_batch_id: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self.clock_out is None
