from __future__ import annotations

from datetime import date, time

import pytest

from src.shiftdesk.shiftdesk.core.enums import AssignmentStatus, NotificationType, ShiftStatus
from src.shiftdesk.shiftdesk.core.events import EntityChange
from src.shiftdesk.shiftdesk.core.exceptions import (
    ConfirmationRequired,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.shiftdesk.shiftdesk.shifts.model import ShiftDraft

TODAY = date(2026, 3, 1)
DAY = date(2026, 3, 2)


def _draft(**overrides) -> ShiftDraft:
    values = dict(title="Packing", date=DAY, start_time=time(8), end_time=time(16), slots=1)
    values.update(overrides)
    return ShiftDraft(**values)


def _codes(exc: ConfirmationRequired) -> list:
    return [w.code for w in exc.warnings]


def test_create_with_assignee_notifies_and_emits(store, container):
    ana = store.employees.add("Ana", "Lopez")
    seen: list[EntityChange] = []
    container.events.subscribe(seen.append)

    shift = container.shift_service.create_shift(1, _draft(), [ana], today=TODAY)

    (assignment,) = store.shifts.assignments.values()
    assert assignment.status == AssignmentStatus.PENDING
    assert assignment.shift_id == shift.shift_id
    (note,) = store.notifications.of_type(NotificationType.SHIFT_ASSIGNED)
    assert note.recipient_id == ana
    assert seen == [EntityChange(company_id=1, entity="scheduled_shifts", action="created", entity_id=shift.shift_id)]


def test_warnings_require_confirmation(store, container):
    with pytest.raises(ConfirmationRequired) as exc:
        container.shift_service.create_shift(1, _draft(start_time=time(16), end_time=time(8)), today=TODAY)

    assert _codes(exc.value) == ["inverted_range", "no_assignments"]
    assert store.shifts.shifts == {}

    shift = container.shift_service.create_shift(
        1, _draft(start_time=time(16), end_time=time(8)), confirmed=True, today=TODAY
    )
    assert shift.start_time == time(16)


def test_over_capacity_and_past_date_warnings(store, container):
    ana = store.employees.add("Ana", "Lopez")
    bob = store.employees.add("Bob", "Stone")

    with pytest.raises(ConfirmationRequired) as exc:
        container.shift_service.create_shift(1, _draft(date=date(2026, 2, 1)), [ana, bob], today=TODAY)

    assert _codes(exc.value) == ["over_capacity", "date_in_past"]


def test_double_booking_is_a_warning_for_the_editor(store, container):
    ana = store.employees.add("Ana", "Lopez")
    container.shift_service.create_shift(1, _draft(), [ana], today=TODAY)

    with pytest.raises(ConfirmationRequired) as exc:
        container.shift_service.create_shift(
            1, _draft(start_time=time(12), end_time=time(20)), [ana], today=TODAY
        )

    assert _codes(exc.value) == ["employee_conflict"]
    assert exc.value.warnings[0].employee_id == ana


def test_missing_title_and_bad_slots_are_errors(container):
    with pytest.raises(ValidationError):
        container.shift_service.create_shift(1, _draft(title="  "), confirmed=True, today=TODAY)
    with pytest.raises(ValidationError):
        container.shift_service.create_shift(1, _draft(slots=0), confirmed=True, today=TODAY)


def test_update_writes_only_changed_fields_and_broadcasts(store, container):
    ana = store.employees.add("Ana", "Lopez")
    shift = container.shift_service.create_shift(1, _draft(), [ana], today=TODAY)

    updated = container.shift_service.update_shift(
        1, shift.shift_id, {"start_time": time(9), "title": "Packing"}, today=TODAY
    )

    assert updated.start_time == time(9)
    assert store.shifts.get_by_id(1, shift.shift_id).start_time == time(9)
    (changed,) = store.notifications.of_type(NotificationType.SHIFT_CHANGED)
    assert changed.metadata["changed_fields"] == ["start_time"]


def test_update_without_changes_is_a_no_op(store, container):
    shift = container.shift_service.create_shift(1, _draft(), confirmed=True, today=TODAY)

    assert container.shift_service.update_shift(1, shift.shift_id, {"title": "Packing"}, today=TODAY) == shift
    assert store.notifications.rows == []


def test_update_rejects_unknown_fields_and_missing_shift(container):
    with pytest.raises(ValidationError):
        container.shift_service.update_shift(1, 1, {"status": "published"})
    with pytest.raises(NotFoundError):
        container.shift_service.update_shift(1, 404, {"title": "x"})


def test_update_ignores_own_assignment_when_checking_conflicts(store, container):
    ana = store.employees.add("Ana", "Lopez")
    shift = container.shift_service.create_shift(1, _draft(), [ana], today=TODAY)

    updated = container.shift_service.update_shift(1, shift.shift_id, {"end_time": time(17)}, today=TODAY)

    assert updated.end_time == time(17)


def test_publish_once(store, container):
    shift = container.shift_service.create_shift(1, _draft(), confirmed=True, today=TODAY)

    published = container.shift_service.publish_shift(1, shift.shift_id)

    assert published.status == ShiftStatus.PUBLISHED
    assert store.shifts.get_by_id(1, shift.shift_id).status == ShiftStatus.PUBLISHED
    with pytest.raises(ValidationError):
        container.shift_service.publish_shift(1, shift.shift_id)


def test_assign_employee_checks(store, container):
    ana = store.employees.add("Ana", "Lopez")
    bob = store.employees.add("Bob", "Stone")
    gone = store.employees.add("Old", "Timer", is_active=False)
    shift = container.shift_service.create_shift(1, _draft(), confirmed=True, today=TODAY)

    assignment_id = container.shift_service.assign_employee(1, shift.shift_id, ana)
    assert store.shifts.get_assignment(1, assignment_id).employee_id == ana

    with pytest.raises(ConflictError):
        container.shift_service.assign_employee(1, shift.shift_id, ana)
    with pytest.raises(ValidationError):
        container.shift_service.assign_employee(1, shift.shift_id, gone)
    with pytest.raises(NotFoundError):
        container.shift_service.assign_employee(1, shift.shift_id, 999)
    with pytest.raises(ConfirmationRequired) as exc:
        container.shift_service.assign_employee(1, shift.shift_id, bob)
    assert _codes(exc.value) == ["over_capacity"]

    container.shift_service.assign_employee(1, shift.shift_id, bob, confirmed=True)
    assert len(store.shifts.assignments) == 2


def test_remove_assignment_notifies_employee(store, container):
    ana = store.employees.add("Ana", "Lopez")
    shift = container.shift_service.create_shift(1, _draft(), [ana], today=TODAY)
    (assignment_id,) = store.shifts.assignments

    container.shift_service.remove_assignment(1, assignment_id)

    assert store.shifts.assignments == {}
    (note,) = store.notifications.of_type(NotificationType.SHIFT_UNASSIGNED)
    assert note.metadata["shift_id"] == shift.shift_id
    with pytest.raises(NotFoundError):
        container.shift_service.remove_assignment(1, assignment_id)


def test_list_range_validates_order(container):
    with pytest.raises(ValidationError):
        container.shift_service.list_range(1, DAY, TODAY)
