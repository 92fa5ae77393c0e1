"""Decide who hears about a shift mutation and what they are told.

Assignees of a shift are its non-rejected assignments. Edits touching a
broadcast field (date, times, location, client) reach them as ``shift_changed``
with a field-by-field diff; any other edit is a quieter ``shift_updated``.
A shift becoming claimable fans out ``open_shift`` to every active employee who
is not already on it.
"""
from __future__ import annotations

import logging
from datetime import date, time
from typing import Any, Iterable, List, Optional, Sequence

import mysql.connector

from ..common.datetime_utils import format_hhmm
from ..core.constants import BROADCAST_FIELDS
from ..core.enums import NotificationType, RecipientType
from ..core.exceptions import DomainError
from ..employees.repository import EmployeeRepository
from ..shifts.model import EDITABLE_FIELDS, Shift
from ..shifts.repository import ShiftRepository
from .model import NewNotification
from .repository import NotificationRepository

_logger = logging.getLogger(__name__)

_FIELD_LABELS = {
    "date": "Date",
    "start_time": "Start",
    "end_time": "End",
    "location_id": "Location",
    "client_id": "Client",
    "meeting_point": "Meeting point",
}


def diff_shift(before: Shift, after: Shift) -> List[str]:
    return [name for name in EDITABLE_FIELDS if getattr(before, name) != getattr(after, name)]


def is_broadcast(changed_fields: Iterable[str]) -> bool:
    return any(name in BROADCAST_FIELDS for name in changed_fields)


def _render(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, time):
        return format_hhmm(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return "yes" if value else "no"
    return str(value)


def describe_changes(before: Shift, after: Shift, changed_fields: Sequence[str]) -> str:
    parts = []
    for name in changed_fields:
        label = _FIELD_LABELS.get(name, name.replace("_", " ").capitalize())
        parts.append(f"{label}: {_render(getattr(before, name))} -> {_render(getattr(after, name))}")
    return "; ".join(parts)


def _when(shift: Shift) -> str:
    return f"{shift.date.isoformat()} {shift.time_label}"


class NotificationDispatcher:
    def __init__(
        self,
        notifications: NotificationRepository,
        shifts: ShiftRepository,
        employees: EmployeeRepository,
    ):
        self._notifications = notifications
        self._shifts = shifts
        self._employees = employees

    def assignees(self, company_id: int, shift_id: int) -> List[int]:
        assignments = self._shifts.list_assignments(company_id, [shift_id])
        return list(dict.fromkeys(a.employee_id for a in assignments if a.is_active))

    def _send(self, company_id: int, notifications: List[NewNotification]) -> int:
        if not notifications:
            return 0
        try:
            return self._notifications.create_many(company_id, notifications)
        except (DomainError, mysql.connector.Error):
            _logger.exception("could not write %s notification(s) for company %s", len(notifications), company_id)
            return 0

    @staticmethod
    def _to_employees(
        employee_ids: Iterable[int],
        kind: NotificationType,
        title: str,
        body: str,
        metadata: dict,
    ) -> List[NewNotification]:
        return [
            NewNotification(
                recipient_id=int(employee_id),
                recipient_type=RecipientType.EMPLOYEE,
                type=kind,
                title=title,
                body=body,
                metadata=dict(metadata),
            )
            for employee_id in employee_ids
        ]

    def _open_shift(self, company_id: int, shift: Shift, assigned: Sequence[int]) -> List[NewNotification]:
        taken = set(assigned)
        audience = [
            e.employee_id
            for e in self._employees.list_for_company(company_id, active_only=True)
            if e.employee_id not in taken
        ]
        return self._to_employees(
            audience,
            NotificationType.OPEN_SHIFT,
            f"Open shift: {shift.title}",
            f"{_when(shift)} is open for claims.",
            {"shift_id": shift.shift_id, "date": shift.date.isoformat()},
        )

    def shift_edited(
        self,
        company_id: int,
        before: Shift,
        after: Shift,
        changed_fields: Optional[Sequence[str]] = None,
    ) -> int:
        changed = list(changed_fields) if changed_fields is not None else diff_shift(before, after)
        if not changed:
            return 0

        assigned = self.assignees(company_id, after.shift_id)
        metadata = {"shift_id": after.shift_id, "date": after.date.isoformat(), "changed_fields": changed}
        if is_broadcast(changed):
            batch = self._to_employees(
                assigned,
                NotificationType.SHIFT_CHANGED,
                f"Shift changed: {after.title}",
                describe_changes(before, after, changed),
                metadata,
            )
        else:
            batch = self._to_employees(
                assigned,
                NotificationType.SHIFT_UPDATED,
                f"Shift updated: {after.title}",
                f"Details of your shift on {_when(after)} were updated.",
                metadata,
            )

        if after.claimable and not before.claimable:
            batch += self._open_shift(company_id, after, assigned)
        return self._send(company_id, batch)

    def shift_created(self, company_id: int, shift: Shift) -> int:
        assigned = self.assignees(company_id, shift.shift_id)
        batch = self._to_employees(
            assigned,
            NotificationType.SHIFT_ASSIGNED,
            f"New shift: {shift.title}",
            f"You have been assigned to {_when(shift)}.",
            {"shift_id": shift.shift_id, "date": shift.date.isoformat()},
        )
        if shift.claimable:
            batch += self._open_shift(company_id, shift, assigned)
        return self._send(company_id, batch)

    def shift_published(self, company_id: int, shift: Shift) -> int:
        assigned = self.assignees(company_id, shift.shift_id)
        batch = self._to_employees(
            assigned,
            NotificationType.SHIFT_PUBLISHED,
            f"Shift published: {shift.title}",
            f"Your shift on {_when(shift)} is now published.",
            {"shift_id": shift.shift_id, "date": shift.date.isoformat()},
        )
        if shift.claimable:
            batch += self._open_shift(company_id, shift, assigned)
        return self._send(company_id, batch)

    def employee_assigned(self, company_id: int, shift: Shift, employee_id: int) -> int:
        return self._send(
            company_id,
            self._to_employees(
                [employee_id],
                NotificationType.SHIFT_ASSIGNED,
                f"New shift: {shift.title}",
                f"You have been assigned to {_when(shift)}.",
                {"shift_id": shift.shift_id, "date": shift.date.isoformat()},
            ),
        )

    def assignment_removed(self, company_id: int, shift: Shift, employee_id: int) -> int:
        return self._send(
            company_id,
            self._to_employees(
                [employee_id],
                NotificationType.SHIFT_UNASSIGNED,
                f"Removed from shift: {shift.title}",
                f"You are no longer assigned to {_when(shift)}.",
                {"shift_id": shift.shift_id, "date": shift.date.isoformat()},
            ),
        )

    def claim_requested(self, company_id: int, shift: Shift, employee_id: int, request_id: int) -> int:
        return self._send(
            company_id,
            [
                NewNotification(
                    recipient_id=int(company_id),
                    recipient_type=RecipientType.COMPANY,
                    type=NotificationType.CLAIM_REQUESTED,
                    title=f"Shift claim: {shift.title}",
                    body=f"Employee {employee_id} asked to work {_when(shift)}.",
                    metadata={"shift_id": shift.shift_id, "employee_id": int(employee_id), "request_id": request_id},
                )
            ],
        )

    def claim_approved(self, company_id: int, shift: Shift, employee_id: int) -> int:
        return self._send(
            company_id,
            self._to_employees(
                [employee_id],
                NotificationType.CLAIM_APPROVED,
                f"Claim approved: {shift.title}",
                f"You are now assigned to {_when(shift)}.",
                {"shift_id": shift.shift_id, "date": shift.date.isoformat()},
            ),
        )

    def claim_rejected(self, company_id: int, shift: Shift, employee_id: int, reason: Optional[str] = None) -> int:
        body = f"Your request for {_when(shift)} was declined."
        if reason:
            body += f" Reason: {reason}"
        return self._send(
            company_id,
            self._to_employees(
                [employee_id],
                NotificationType.CLAIM_REJECTED,
                f"Claim declined: {shift.title}",
                body,
                {"shift_id": shift.shift_id, "date": shift.date.isoformat()},
            ),
        )
