from __future__ import annotations

import logging
from typing import List, Optional

from ..conflicts.detector import ConflictDetector, ConflictMode
from ..core.enums import AssignmentStatus, RequestStatus, ShiftStatus
from ..core.events import EntityChange, EventBus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..notifications.dispatcher import NotificationDispatcher
from ..shifts.model import Shift
from ..shifts.repository import ShiftRepository
from .model import ShiftRequest
from .repository import ShiftRequestRepository

_logger = logging.getLogger(__name__)


class ShiftRequestService:
    """Employees claim open shifts; a manager approves or rejects the claim."""

    def __init__(
        self,
        requests: ShiftRequestRepository,
        shifts: ShiftRepository,
        employees: EmployeeRepository,
        conflicts: ConflictDetector,
        dispatcher: NotificationDispatcher,
        events: Optional[EventBus] = None,
    ):
        self._requests = requests
        self._shifts = shifts
        self._employees = employees
        self._conflicts = conflicts
        self._dispatcher = dispatcher
        self._events = events

    def _get_shift(self, company_id: int, shift_id: int) -> Shift:
        shift = self._shifts.get_by_id(company_id, int(shift_id))
        if not shift:
            raise NotFoundError("Shift not found")
        return shift

    def _get_pending(self, company_id: int, request_id: int) -> ShiftRequest:
        req = self._requests.get_by_id(company_id, int(request_id))
        if not req:
            raise NotFoundError("Request not found")
        if req.status != RequestStatus.PENDING:
            raise ValidationError("Request has already been processed")
        return req

    def request_claim(self, company_id: int, shift_id: int, employee_id: int) -> int:
        company_id = int(company_id)
        shift = self._get_shift(company_id, shift_id)
        if not shift.claimable or shift.status != ShiftStatus.PUBLISHED:
            raise ValidationError("This shift is not open for claims")

        employee = self._employees.get_by_id(company_id, int(employee_id))
        if not employee or not employee.is_active:
            raise NotFoundError("Employee not found")

        if employee.employee_id in self._dispatcher.assignees(company_id, shift.shift_id):
            raise ConflictError("Already assigned to this shift")
        if self._requests.find_pending(company_id, shift_id=shift.shift_id, employee_id=employee.employee_id):
            raise ConflictError("A request for this shift is already pending")

        request_id = self._requests.create(
            company_id=company_id, shift_id=shift.shift_id, employee_id=employee.employee_id
        )
        self._dispatcher.claim_requested(company_id, shift, employee.employee_id, request_id)
        return request_id

    def approve(self, company_id: int, request_id: int) -> int:
        company_id = int(company_id)
        req = self._get_pending(company_id, request_id)
        shift = self._get_shift(company_id, req.shift_id)

        if len(self._dispatcher.assignees(company_id, shift.shift_id)) >= shift.slots:
            raise ValidationError("All slots for this shift are already filled")

        self._conflicts.guard(
            company_id,
            req.employee_id,
            shift.date,
            shift.start_time,
            shift.end_time,
            mode=ConflictMode.BLOCK,
            exclude_shift_id=shift.shift_id,
        )

        assignment_id = self._shifts.create_assignment(
            company_id=company_id,
            shift_id=shift.shift_id,
            employee_id=req.employee_id,
            status=AssignmentStatus.ACCEPTED,
        )
        if not self._requests.decide(company_id, req.request_id, status=RequestStatus.APPROVED):
            raise ValidationError("Approving the request failed")

        _logger.info("claim %s approved: employee %s on shift %s", req.request_id, req.employee_id, shift.shift_id)
        self._dispatcher.claim_approved(company_id, shift, req.employee_id)
        if self._events is not None:
            self._events.publish(
                EntityChange(company_id=company_id, entity="shift_assignments", action="created", entity_id=assignment_id)
            )
        return assignment_id

    def reject(self, company_id: int, request_id: int, reason: str = "") -> None:
        company_id = int(company_id)
        req = self._get_pending(company_id, request_id)
        shift = self._get_shift(company_id, req.shift_id)
        reason = (reason or "").strip() or None

        if not self._requests.decide(company_id, req.request_id, status=RequestStatus.REJECTED, rejection_reason=reason):
            raise ValidationError("Rejecting the request failed")
        self._dispatcher.claim_rejected(company_id, shift, req.employee_id, reason)

    def list_pending(self, company_id: int) -> List[ShiftRequest]:
        return list(self._requests.list_by_status(int(company_id), status=RequestStatus.PENDING))
