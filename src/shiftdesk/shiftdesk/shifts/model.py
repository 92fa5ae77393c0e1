from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from ..core.constants import DEFAULT_SHIFT_SLOTS
from ..core.enums import AssignmentStatus, ShiftStatus

# Column order used when diffing an edited shift.
EDITABLE_FIELDS = (
    "title",
    "date",
    "start_time",
    "end_time",
    "client_id",
    "location_id",
    "slots",
    "claimable",
    "notes",
    "meeting_point",
)


@dataclass(frozen=True)
class Shift:
    """Domain entity: a planned, dated work occurrence.

    ``start_time < end_time`` is expected but not enforced here; the editor only
    warns about reversed ranges.
    """

    shift_id: int
    company_id: int
    title: str
    date: date
    start_time: time
    end_time: time
    client_id: Optional[int] = None
    location_id: Optional[int] = None
    slots: int = DEFAULT_SHIFT_SLOTS
    claimable: bool = False
    status: ShiftStatus = ShiftStatus.DRAFT
    shift_code: Optional[str] = None
    notes: Optional[str] = None
    meeting_point: Optional[str] = None
    import_batch_id: Optional[int] = None

    @property
    def time_label(self) -> str:
        return f"{self.start_time.strftime('%H:%M')}-{self.end_time.strftime('%H:%M')}"


@dataclass(frozen=True)
class ShiftDraft:
    """Input for creating a shift (no id yet)."""

    title: str
    date: date
    start_time: time
    end_time: time
    client_id: Optional[int] = None
    location_id: Optional[int] = None
    slots: int = DEFAULT_SHIFT_SLOTS
    claimable: bool = False
    status: ShiftStatus = ShiftStatus.DRAFT
    shift_code: Optional[str] = None
    notes: Optional[str] = None
    meeting_point: Optional[str] = None


@dataclass(frozen=True)
class Assignment:
    assignment_id: int
    company_id: int
    shift_id: int
    employee_id: int
    status: AssignmentStatus = AssignmentStatus.PENDING
    import_batch_id: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.status != AssignmentStatus.REJECTED
