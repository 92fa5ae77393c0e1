from __future__ import annotations

from typing import Any, Dict, Mapping

from flask import Flask, request

from ..common.datetime_utils import format_hhmm
from ..common.http import as_bool, as_date, as_int, as_time, body, json_endpoint, ok, optional_int
from ..container import Container
from ..core.enums import ShiftStatus
from .model import EDITABLE_FIELDS, Shift, ShiftDraft

_CONVERTERS = {
    "date": as_date,
    "start_time": as_time,
    "end_time": as_time,
    "client_id": optional_int,
    "location_id": optional_int,
    "slots": as_int,
    "claimable": lambda v, _name: as_bool(v),
}


def _shift_json(shift: Shift) -> Dict[str, Any]:
    return {
        "shift_id": shift.shift_id,
        "title": shift.title,
        "date": shift.date.isoformat(),
        "start_time": format_hhmm(shift.start_time),
        "end_time": format_hhmm(shift.end_time),
        "client_id": shift.client_id,
        "location_id": shift.location_id,
        "slots": shift.slots,
        "claimable": shift.claimable,
        "status": shift.status.value,
        "shift_code": shift.shift_code,
        "notes": shift.notes,
        "meeting_point": shift.meeting_point,
    }


def _changes(payload: Mapping[str, Any]) -> Dict[str, Any]:
    changes: Dict[str, Any] = {}
    for name in EDITABLE_FIELDS:
        if name not in payload:
            continue
        convert = _CONVERTERS.get(name)
        value = payload[name]
        changes[name] = convert(value, name) if convert else (str(value).strip() if value is not None else None)
    return changes


def register(app: Flask, container: Container) -> None:
    @app.route("/api/companies/<int:company_id>/shifts", methods=["GET"], endpoint="shifts_list")
    @json_endpoint
    def shifts_list(company_id: int):
        start = as_date(request.args.get("start"), "start")
        end = as_date(request.args.get("end") or request.args.get("start"), "end")
        shifts = container.shift_service.list_range(company_id, start, end)
        assignments = container.shift_service.list_assignments(company_id, [s.shift_id for s in shifts])
        by_shift: Dict[int, list] = {}
        for a in assignments:
            by_shift.setdefault(a.shift_id, []).append(
                {"assignment_id": a.assignment_id, "employee_id": a.employee_id, "status": a.status.value}
            )
        return ok(shifts=[{**_shift_json(s), "assignments": by_shift.get(s.shift_id, [])} for s in shifts])

    @app.route("/api/companies/<int:company_id>/shifts", methods=["POST"], endpoint="shifts_create")
    @json_endpoint
    def shifts_create(company_id: int):
        payload = body()
        values = _changes(payload)
        draft = ShiftDraft(
            title=str(payload.get("title") or ""),
            date=as_date(payload.get("date"), "date"),
            start_time=as_time(payload.get("start_time"), "start_time"),
            end_time=as_time(payload.get("end_time"), "end_time"),
            client_id=values.get("client_id"),
            location_id=values.get("location_id"),
            slots=values.get("slots", 1),
            claimable=values.get("claimable", False),
            status=ShiftStatus.PUBLISHED if as_bool(payload.get("publish")) else ShiftStatus.DRAFT,
            shift_code=str(payload.get("shift_code") or "").strip() or None,
            notes=values.get("notes"),
            meeting_point=values.get("meeting_point"),
        )
        employee_ids = [as_int(e, "employee_ids") for e in payload.get("employee_ids") or []]
        shift = container.shift_service.create_shift(
            company_id, draft, employee_ids, confirmed=as_bool(payload.get("confirmed"))
        )
        return ok("Shift created", shift=_shift_json(shift)), 201

    @app.route("/api/companies/<int:company_id>/shifts/<int:shift_id>", methods=["PATCH"], endpoint="shifts_update")
    @json_endpoint
    def shifts_update(company_id: int, shift_id: int):
        payload = body()
        shift = container.shift_service.update_shift(
            company_id, shift_id, _changes(payload), confirmed=as_bool(payload.get("confirmed"))
        )
        return ok("Shift updated", shift=_shift_json(shift))

    @app.route(
        "/api/companies/<int:company_id>/shifts/<int:shift_id>/publish",
        methods=["POST"],
        endpoint="shifts_publish",
    )
    @json_endpoint
    def shifts_publish(company_id: int, shift_id: int):
        shift = container.shift_service.publish_shift(company_id, shift_id)
        return ok("Shift published", shift=_shift_json(shift))

    @app.route(
        "/api/companies/<int:company_id>/shifts/<int:shift_id>/assignments",
        methods=["POST"],
        endpoint="shifts_assign",
    )
    @json_endpoint
    def shifts_assign(company_id: int, shift_id: int):
        payload = body()
        assignment_id = container.shift_service.assign_employee(
            company_id,
            shift_id,
            as_int(payload.get("employee_id"), "employee_id"),
            confirmed=as_bool(payload.get("confirmed")),
        )
        return ok("Employee assigned", assignment_id=assignment_id), 201

    @app.route(
        "/api/companies/<int:company_id>/assignments/<int:assignment_id>",
        methods=["DELETE"],
        endpoint="assignments_delete",
    )
    @json_endpoint
    def assignments_delete(company_id: int, assignment_id: int):
        container.shift_service.remove_assignment(company_id, assignment_id)
        return ok("Assignment removed")
