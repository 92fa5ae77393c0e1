from __future__ import annotations

from flask import Flask, request

from ..common.http import as_bool, as_date, json_endpoint, ok
from ..container import Container
from ..core.enums import TicketStatus
from ..core.exceptions import NotFoundError, ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/companies/<int:company_id>/coverage", methods=["GET"], endpoint="coverage_analyze")
    @json_endpoint
    def coverage_analyze(company_id: int):
        date_from = as_date(request.args.get("from"), "from")
        date_to = as_date(request.args.get("to") or request.args.get("from"), "to")
        summary = container.coverage_service.analyze(
            company_id,
            date_from,
            date_to,
            create_tickets=as_bool(request.args.get("create_tickets"), True),
        )
        return ok(coverage=summary.as_dict())

    @app.route(
        "/api/companies/<int:company_id>/tickets/<int:ticket_id>/status",
        methods=["POST"],
        endpoint="ticket_status",
    )
    @json_endpoint
    def ticket_status(company_id: int, ticket_id: int):
        payload = request.get_json(silent=True) or {}
        try:
            status = TicketStatus(str(payload.get("status") or ""))
        except ValueError:
            raise ValidationError("Unknown ticket status")
        if not container.tickets_repo.set_status(company_id, ticket_id, status=status):
            raise NotFoundError("Ticket not found")
        return ok("Ticket updated")

    @app.route("/api/companies/<int:company_id>/tickets", methods=["GET"], endpoint="ticket_list")
    @json_endpoint
    def ticket_list(company_id: int):
        date_from = as_date(request.args.get("from"), "from")
        date_to = as_date(request.args.get("to") or request.args.get("from"), "to")
        raw_status = request.args.get("status")
        try:
            status = TicketStatus(raw_status) if raw_status else None
        except ValueError:
            raise ValidationError("Unknown ticket status")
        tickets = container.coverage_service.list_tickets(company_id, date_from, date_to, status=status)
        return ok(tickets=[t.as_dict() for t in tickets])
