from __future__ import annotations

from flask import Flask, request

from ..common.http import as_bool, as_int, json_endpoint, ok
from ..container import Container
from ..core.enums import RecipientType
from ..core.exceptions import NotFoundError, ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/companies/<int:company_id>/notifications", methods=["GET"], endpoint="notifications_list")
    @json_endpoint
    def notifications_list(company_id: int):
        try:
            recipient_type = RecipientType(request.args.get("recipient_type") or RecipientType.EMPLOYEE.value)
        except ValueError:
            raise ValidationError("recipient_type must be employee or company")
        recipient_id = as_int(request.args.get("recipient_id") or company_id, "recipient_id")
        items = container.notifications_repo.list_for_recipient(
            company_id,
            recipient_type=recipient_type,
            recipient_id=recipient_id,
            unread_only=as_bool(request.args.get("unread")),
        )
        return ok(notifications=[n.as_dict() for n in items])

    @app.route(
        "/api/companies/<int:company_id>/notifications/<int:notification_id>/read",
        methods=["POST"],
        endpoint="notifications_read",
    )
    @json_endpoint
    def notifications_read(company_id: int, notification_id: int):
        if not container.notifications_repo.mark_read(company_id, notification_id):
            raise NotFoundError("Notification not found")
        return ok("Marked as read")
