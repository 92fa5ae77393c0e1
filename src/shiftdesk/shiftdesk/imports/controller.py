from __future__ import annotations

from typing import List, Tuple

from flask import Flask, request
from werkzeug.utils import secure_filename

from ..common.http import as_bool, json_endpoint, ok, optional_date
from ..container import Container
from ..core.exceptions import ImportFileError
from .readers import list_sheets, read_export


def register(app: Flask, container: Container) -> None:
    def _upload() -> Tuple[bytes, str]:
        upload = request.files.get("file")
        if upload is None or not upload.filename:
            raise ImportFileError("No file uploaded")
        return upload.read(), secure_filename(upload.filename)

    def _rows() -> Tuple[List[dict], str]:
        data, filename = _upload()
        rows = read_export(
            data,
            filename=filename,
            sheet_name=request.form.get("sheet_name") or None,
            max_rows=container.import_max_rows,
        )
        return rows, filename

    def _range():
        return (
            optional_date(request.form.get("date_from"), "date_from"),
            optional_date(request.form.get("date_to"), "date_to"),
        )

    @app.route("/api/companies/<int:company_id>/imports/sheets", methods=["POST"], endpoint="import_sheets")
    @json_endpoint
    def import_sheets(company_id: int):
        data, filename = _upload()
        return ok(sheets=list_sheets(data, filename=filename))

    @app.route(
        "/api/companies/<int:company_id>/imports/schedule/preview",
        methods=["POST"],
        endpoint="schedule_import_preview",
    )
    @json_endpoint
    def schedule_import_preview(company_id: int):
        rows, _ = _rows()
        date_from, date_to = _range()
        preview = container.schedule_import_service.preview(company_id, rows, date_from=date_from, date_to=date_to)
        return ok(preview=preview)

    @app.route("/api/companies/<int:company_id>/imports/schedule", methods=["POST"], endpoint="schedule_import_run")
    @json_endpoint
    def schedule_import_run(company_id: int):
        rows, filename = _rows()
        date_from, date_to = _range()
        result = container.schedule_import_service.run(
            company_id,
            rows,
            date_from=date_from,
            date_to=date_to,
            auto_provision=as_bool(request.form.get("auto_provision"), True),
            file_name=filename,
        )
        return ok(
            f"Imported {result.created_shifts} shifts and {result.created_assignments} assignments",
            result=result.as_dict(),
        )

    @app.route(
        "/api/companies/<int:company_id>/imports/time-clock/preview",
        methods=["POST"],
        endpoint="timeclock_import_preview",
    )
    @json_endpoint
    def timeclock_import_preview(company_id: int):
        rows, _ = _rows()
        date_from, date_to = _range()
        preview = container.timeclock_import_service.preview(company_id, rows, date_from=date_from, date_to=date_to)
        return ok(preview=preview)

    @app.route("/api/companies/<int:company_id>/imports/time-clock", methods=["POST"], endpoint="timeclock_import_run")
    @json_endpoint
    def timeclock_import_run(company_id: int):
        rows, filename = _rows()
        date_from, date_to = _range()
        result = container.timeclock_import_service.run(
            company_id,
            rows,
            date_from=date_from,
            date_to=date_to,
            auto_provision=as_bool(request.form.get("auto_provision"), False),
            file_name=filename,
        )
        return ok(
            f"Imported {result.created_time_entries} time entries, {result.linked_to_shift} linked to shifts",
            result=result.as_dict(),
        )
