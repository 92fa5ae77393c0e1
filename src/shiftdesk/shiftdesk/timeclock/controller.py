from __future__ import annotations

from typing import Any, Dict

from flask import Flask

from ..common.http import as_datetime, as_int, body, json_endpoint, ok, optional_int
from ..container import Container
from ..core.enums import TimeEntryStatus
from ..core.exceptions import ValidationError
from .model import TimeEntry


def _entry_json(entry: TimeEntry) -> Dict[str, Any]:
    return {
        "entry_id": entry.entry_id,
        "employee_id": entry.employee_id,
        "shift_id": entry.shift_id,
        "clock_in": entry.clock_in.isoformat(),
        "clock_out": entry.clock_out.isoformat() if entry.clock_out else None,
        "break_minutes": entry.break_minutes,
        "status": entry.status.value,
        "notes": entry.notes,
    }


def register(app: Flask, container: Container) -> None:
    @app.route(
        "/api/companies/<int:company_id>/employees/<int:employee_id>/clock-in",
        methods=["POST"],
        endpoint="clock_in",
    )
    @json_endpoint
    def clock_in(company_id: int, employee_id: int):
        payload = body()
        entry = container.timeclock_service.clock_in(
            company_id, employee_id, optional_int(payload.get("shift_id"), "shift_id")
        )
        return ok("Clocked in", entry=_entry_json(entry)), 201

    @app.route(
        "/api/companies/<int:company_id>/employees/<int:employee_id>/clock-out",
        methods=["POST"],
        endpoint="clock_out",
    )
    @json_endpoint
    def clock_out(company_id: int, employee_id: int):
        entry = container.timeclock_service.clock_out(company_id, employee_id)
        return ok("Clocked out", entry=_entry_json(entry))

    @app.route(
        "/api/companies/<int:company_id>/time-entries/<int:entry_id>",
        methods=["PUT"],
        endpoint="time_entry_correct",
    )
    @json_endpoint
    def time_entry_correct(company_id: int, entry_id: int):
        payload = body()
        entry = container.timeclock_service.correct_entry(
            company_id,
            entry_id,
            clock_in=as_datetime(payload.get("clock_in"), "clock_in"),
            clock_out=as_datetime(payload.get("clock_out"), "clock_out"),
            break_minutes=as_int(payload.get("break_minutes") or 0, "break_minutes"),
            notes=payload.get("notes"),
        )
        return ok("Time entry corrected", entry=_entry_json(entry))

    @app.route(
        "/api/companies/<int:company_id>/time-entries/<int:entry_id>/review",
        methods=["POST"],
        endpoint="time_entry_review",
    )
    @json_endpoint
    def time_entry_review(company_id: int, entry_id: int):
        try:
            status = TimeEntryStatus(str(body().get("status") or ""))
        except ValueError:
            raise ValidationError("Status must be approved or rejected")
        entry = container.timeclock_service.review_entry(company_id, entry_id, status)
        return ok("Time entry reviewed", entry=_entry_json(entry))
