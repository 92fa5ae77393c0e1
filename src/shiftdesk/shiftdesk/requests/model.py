from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.enums import RequestStatus


@dataclass(frozen=True)
class ShiftRequest:
    """An employee's request to take a claimable (open) shift."""

    request_id: int
    company_id: int
    shift_id: int
    employee_id: int
    status: RequestStatus = RequestStatus.PENDING
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "request_id": self.request_id,
            "shift_id": self.shift_id,
            "employee_id": self.employee_id,
            "status": self.status.value,
            "rejection_reason": self.rejection_reason,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
