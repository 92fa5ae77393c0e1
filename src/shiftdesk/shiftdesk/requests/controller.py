from __future__ import annotations

from flask import Flask

from ..common.http import as_int, body, json_endpoint, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route(
        "/api/companies/<int:company_id>/shifts/<int:shift_id>/claims",
        methods=["POST"],
        endpoint="claims_create",
    )
    @json_endpoint
    def claims_create(company_id: int, shift_id: int):
        request_id = container.request_service.request_claim(
            company_id, shift_id, as_int(body().get("employee_id"), "employee_id")
        )
        return ok("Request sent", request_id=request_id), 201

    @app.route("/api/companies/<int:company_id>/claims", methods=["GET"], endpoint="claims_pending")
    @json_endpoint
    def claims_pending(company_id: int):
        return ok(requests=[r.as_dict() for r in container.request_service.list_pending(company_id)])

    @app.route(
        "/api/companies/<int:company_id>/claims/<int:request_id>/approve",
        methods=["POST"],
        endpoint="claims_approve",
    )
    @json_endpoint
    def claims_approve(company_id: int, request_id: int):
        assignment_id = container.request_service.approve(company_id, request_id)
        return ok("Request approved", assignment_id=assignment_id)

    @app.route(
        "/api/companies/<int:company_id>/claims/<int:request_id>/reject",
        methods=["POST"],
        endpoint="claims_reject",
    )
    @json_endpoint
    def claims_reject(company_id: int, request_id: int):
        container.request_service.reject(company_id, request_id, str(body().get("reason") or ""))
        return ok("Request rejected")
