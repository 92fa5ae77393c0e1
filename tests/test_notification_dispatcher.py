from __future__ import annotations

import dataclasses
from datetime import date, time

import mysql.connector

from src.shiftdesk.shiftdesk.core.enums import AssignmentStatus, NotificationType, RecipientType, ShiftStatus
from src.shiftdesk.shiftdesk.notifications.dispatcher import describe_changes, diff_shift, is_broadcast
from src.shiftdesk.shiftdesk.shifts.model import ShiftDraft


def _published_shift(store, **kwargs):
    draft = ShiftDraft(
        title="Packing",
        date=date(2026, 3, 2),
        start_time=time(8),
        end_time=time(16),
        status=ShiftStatus.PUBLISHED,
        **kwargs,
    )
    shift_id = store.shifts.create_shift(company_id=1, draft=draft)
    return store.shifts.get_by_id(1, shift_id)


def test_diff_and_broadcast_rules(store):
    before = _published_shift(store)
    after = dataclasses.replace(before, start_time=time(9), notes="bring boots")

    changed = diff_shift(before, after)

    assert changed == ["start_time", "notes"]
    assert is_broadcast(changed)
    assert not is_broadcast(["notes", "title"])
    assert describe_changes(before, after, ["start_time"]) == "Start: 08:00 -> 09:00"


def test_time_change_notifies_active_assignees_with_diff(store, container):
    ana = store.employees.add("Ana", "Lopez")
    bob = store.employees.add("Bob", "Stone")
    cy = store.employees.add("Cy", "Young")
    before = _published_shift(store)
    for employee_id, status in ((ana, AssignmentStatus.ACCEPTED), (bob, AssignmentStatus.PENDING), (cy, AssignmentStatus.REJECTED)):
        store.shifts.create_assignment(company_id=1, shift_id=before.shift_id, employee_id=employee_id, status=status)
    after = dataclasses.replace(before, date=date(2026, 3, 3))

    sent = container.dispatcher.shift_edited(1, before, after)

    assert sent == 2
    changed = store.notifications.of_type(NotificationType.SHIFT_CHANGED)
    assert sorted(n.recipient_id for n in changed) == [ana, bob]
    assert changed[0].body == "Date: 2026-03-02 -> 2026-03-03"
    assert changed[0].metadata["changed_fields"] == ["date"]


def test_non_broadcast_change_is_a_quiet_update(store, container):
    ana = store.employees.add("Ana", "Lopez")
    before = _published_shift(store)
    store.shifts.create_assignment(
        company_id=1, shift_id=before.shift_id, employee_id=ana, status=AssignmentStatus.ACCEPTED
    )

    container.dispatcher.shift_edited(1, before, dataclasses.replace(before, notes="new gate"))

    assert store.notifications.of_type(NotificationType.SHIFT_CHANGED) == []
    (update,) = store.notifications.of_type(NotificationType.SHIFT_UPDATED)
    assert update.recipient_id == ana


def test_becoming_claimable_fans_out_to_other_active_employees(store, container):
    ana = store.employees.add("Ana", "Lopez")
    bob = store.employees.add("Bob", "Stone")
    store.employees.add("Old", "Timer", is_active=False)
    before = _published_shift(store)
    store.shifts.create_assignment(
        company_id=1, shift_id=before.shift_id, employee_id=ana, status=AssignmentStatus.ACCEPTED
    )

    container.dispatcher.shift_edited(1, before, dataclasses.replace(before, claimable=True, slots=2))

    (open_shift,) = store.notifications.of_type(NotificationType.OPEN_SHIFT)
    assert open_shift.recipient_id == bob


def test_no_change_sends_nothing(store, container):
    shift = _published_shift(store)
    assert container.dispatcher.shift_edited(1, shift, shift) == 0
    assert store.notifications.rows == []


def test_claim_request_goes_to_the_company(store, container):
    shift = _published_shift(store)

    container.dispatcher.claim_requested(1, shift, employee_id=5, request_id=9)

    (note,) = store.notifications.rows
    assert note.recipient_type == RecipientType.COMPANY
    assert note.recipient_id == 1
    assert note.metadata["request_id"] == 9


def test_store_failures_do_not_propagate(store, container, monkeypatch):
    shift = _published_shift(store)

    def boom(company_id, notifications):
        raise mysql.connector.Error("db down")

    monkeypatch.setattr(store.notifications, "create_many", boom)

    assert container.dispatcher.employee_assigned(1, shift, 3) == 0
