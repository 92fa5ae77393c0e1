from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty, require_positive
from ..conflicts.detector import ConflictDetector, ConflictMode
from ..core.enums import AssignmentStatus, ShiftStatus
from ..core.events import EntityChange, EventBus
from ..core.exceptions import ConfirmationRequired, ConflictError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..notifications.dispatcher import NotificationDispatcher, diff_shift
from .model import EDITABLE_FIELDS, Assignment, Shift, ShiftDraft
from .repository import ShiftRepository

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShiftWarning:
    """Advisory problem the operator can confirm past."""

    code: str
    message: str
    employee_id: Optional[int] = None

    def __str__(self) -> str:
        return self.message

    def as_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "employee_id": self.employee_id}


class ShiftService:
    def __init__(
        self,
        shifts: ShiftRepository,
        employees: EmployeeRepository,
        conflicts: ConflictDetector,
        dispatcher: NotificationDispatcher,
        events: Optional[EventBus] = None,
    ):
        self._shifts = shifts
        self._employees = employees
        self._conflicts = conflicts
        self._dispatcher = dispatcher
        self._events = events

    def _emit(self, company_id: int, entity: str, action: str, entity_id: Optional[int]) -> None:
        if self._events is not None:
            self._events.publish(EntityChange(company_id=company_id, entity=entity, action=action, entity_id=entity_id))

    def _get_shift(self, company_id: int, shift_id: int) -> Shift:
        shift = self._shifts.get_by_id(company_id, int(shift_id))
        if not shift:
            raise NotFoundError("Shift not found")
        return shift

    @staticmethod
    def _check_draft(draft: ShiftDraft) -> None:
        require_non_empty(draft.title, "Title")
        require_positive(draft.slots, "Slots")

    def validate(
        self,
        company_id: int,
        draft: ShiftDraft,
        employee_ids: Sequence[int],
        exclude_shift_id: Optional[int] = None,
        *,
        today: Optional[date] = None,
    ) -> List[ShiftWarning]:
        today = today or now_local().date()
        employee_ids = list(dict.fromkeys(int(e) for e in employee_ids))
        warnings: List[ShiftWarning] = []

        if draft.start_time >= draft.end_time:
            warnings.append(ShiftWarning("inverted_range", "End time is not after start time"))
        if not employee_ids:
            warnings.append(ShiftWarning("no_assignments", "No employees are assigned"))
        if len(employee_ids) > int(draft.slots):
            warnings.append(
                ShiftWarning("over_capacity", f"{len(employee_ids)} employees assigned to {draft.slots} slot(s)")
            )
        if draft.date < today:
            warnings.append(ShiftWarning("date_in_past", f"{draft.date.isoformat()} is in the past"))

        for employee_id in employee_ids:
            clash = self._conflicts.guard(
                company_id,
                employee_id,
                draft.date,
                draft.start_time,
                draft.end_time,
                mode=ConflictMode.WARN,
                exclude_shift_id=exclude_shift_id,
            )
            if clash is not None:
                warnings.append(
                    ShiftWarning(
                        "employee_conflict",
                        f"Employee {employee_id} already works '{clash.title}' ({clash.time_label})",
                        employee_id=employee_id,
                    )
                )
        return warnings

    def create_shift(
        self,
        company_id: int,
        draft: ShiftDraft,
        employee_ids: Iterable[int] = (),
        *,
        confirmed: bool = False,
        today: Optional[date] = None,
    ) -> Shift:
        company_id = int(company_id)
        self._check_draft(draft)
        employee_ids = list(dict.fromkeys(int(e) for e in employee_ids))

        warnings = self.validate(company_id, draft, employee_ids, today=today)
        if warnings and not confirmed:
            raise ConfirmationRequired(warnings)

        shift_id = self._shifts.create_shift(company_id=company_id, draft=draft)
        for employee_id in employee_ids:
            self._shifts.create_assignment(
                company_id=company_id,
                shift_id=shift_id,
                employee_id=employee_id,
                status=AssignmentStatus.PENDING,
            )

        shift = self._get_shift(company_id, shift_id)
        _logger.info("created shift %s for company %s with %s assignee(s)", shift_id, company_id, len(employee_ids))
        self._dispatcher.shift_created(company_id, shift)
        self._emit(company_id, "scheduled_shifts", "created", shift_id)
        return shift

    def update_shift(
        self,
        company_id: int,
        shift_id: int,
        changes: Mapping[str, Any],
        *,
        confirmed: bool = False,
        today: Optional[date] = None,
    ) -> Shift:
        company_id = int(company_id)
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot edit: {', '.join(sorted(unknown))}")

        before = self._get_shift(company_id, shift_id)
        after = dataclasses.replace(before, **dict(changes))
        changed = diff_shift(before, after)
        if not changed:
            return before

        draft = ShiftDraft(
            title=after.title,
            date=after.date,
            start_time=after.start_time,
            end_time=after.end_time,
            client_id=after.client_id,
            location_id=after.location_id,
            slots=after.slots,
            claimable=after.claimable,
            status=after.status,
            shift_code=after.shift_code,
            notes=after.notes,
            meeting_point=after.meeting_point,
        )
        self._check_draft(draft)
        assigned = self._dispatcher.assignees(company_id, before.shift_id)
        warnings = self.validate(company_id, draft, assigned, exclude_shift_id=before.shift_id, today=today)
        if warnings and not confirmed:
            raise ConfirmationRequired(warnings)

        self._shifts.update_shift(company_id, before.shift_id, {name: getattr(after, name) for name in changed})
        self._dispatcher.shift_edited(company_id, before, after, changed)
        self._emit(company_id, "scheduled_shifts", "updated", before.shift_id)
        return after

    def publish_shift(self, company_id: int, shift_id: int) -> Shift:
        company_id = int(company_id)
        shift = self._get_shift(company_id, shift_id)
        if shift.status == ShiftStatus.PUBLISHED:
            raise ValidationError("Shift is already published")

        self._shifts.update_shift(company_id, shift.shift_id, {"status": ShiftStatus.PUBLISHED})
        published = dataclasses.replace(shift, status=ShiftStatus.PUBLISHED)
        self._dispatcher.shift_published(company_id, published)
        self._emit(company_id, "scheduled_shifts", "published", shift.shift_id)
        return published

    def assign_employee(
        self,
        company_id: int,
        shift_id: int,
        employee_id: int,
        *,
        confirmed: bool = False,
    ) -> int:
        company_id = int(company_id)
        shift = self._get_shift(company_id, shift_id)
        employee = self._employees.get_by_id(company_id, int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        if not employee.is_active:
            raise ValidationError(f"{employee.full_name} is inactive")

        assigned = self._dispatcher.assignees(company_id, shift.shift_id)
        if employee.employee_id in assigned:
            raise ConflictError(f"{employee.full_name} is already assigned to this shift")

        warnings: List[ShiftWarning] = []
        if len(assigned) + 1 > shift.slots:
            warnings.append(ShiftWarning("over_capacity", f"All {shift.slots} slot(s) are already taken"))
        clash = self._conflicts.guard(
            company_id,
            employee.employee_id,
            shift.date,
            shift.start_time,
            shift.end_time,
            mode=ConflictMode.WARN,
            exclude_shift_id=shift.shift_id,
        )
        if clash is not None:
            warnings.append(
                ShiftWarning(
                    "employee_conflict",
                    f"{employee.full_name} already works '{clash.title}' ({clash.time_label})",
                    employee_id=employee.employee_id,
                )
            )
        if warnings and not confirmed:
            raise ConfirmationRequired(warnings)

        assignment_id = self._shifts.create_assignment(
            company_id=company_id,
            shift_id=shift.shift_id,
            employee_id=employee.employee_id,
            status=AssignmentStatus.PENDING,
        )
        self._dispatcher.employee_assigned(company_id, shift, employee.employee_id)
        self._emit(company_id, "shift_assignments", "created", assignment_id)
        return assignment_id

    def remove_assignment(self, company_id: int, assignment_id: int) -> None:
        company_id = int(company_id)
        assignment = self._shifts.get_assignment(company_id, int(assignment_id))
        if not assignment:
            raise NotFoundError("Assignment not found")
        shift = self._get_shift(company_id, assignment.shift_id)

        if not self._shifts.delete_assignment(company_id, assignment.assignment_id):
            raise NotFoundError("Assignment not found")
        self._dispatcher.assignment_removed(company_id, shift, assignment.employee_id)
        self._emit(company_id, "shift_assignments", "deleted", assignment.assignment_id)

    def list_range(self, company_id: int, start: date, end: date) -> List[Shift]:
        if end < start:
            raise ValidationError("End date must be on or after start date")
        return list(self._shifts.list_range(int(company_id), start=start, end=end))

    def list_assignments(self, company_id: int, shift_ids: Sequence[int]) -> List[Assignment]:
        return list(self._shifts.list_assignments(int(company_id), list(shift_ids)))
