from __future__ import annotations

import logging
from datetime import date, datetime, time
from functools import wraps
from typing import Any, Mapping, Optional

from flask import jsonify, request

from ..core.exceptions import (
    ConfirmationRequired,
    ConflictError,
    ImportFileError,
    NotFoundError,
    ValidationError,
)
from .datetime_utils import parse_hhmm, parse_iso_date

_logger = logging.getLogger(__name__)


def ok(message: str = "OK", **payload: Any):
    return jsonify({"success": True, "message": message, **payload})


def fail(message: str, status: int, **payload: Any):
    return jsonify({"success": False, "message": message, **payload}), status


def json_endpoint(view):
    """Map domain exceptions onto JSON error responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ConfirmationRequired as e:
            warnings = [w.as_dict() if hasattr(w, "as_dict") else {"message": str(w)} for w in e.warnings]
            return fail("Confirmation required", 409, warnings=warnings)
        except (ValidationError, ImportFileError) as e:
            return fail(str(e), 400)
        except NotFoundError as e:
            return fail(str(e), 404)
        except ConflictError as e:
            return fail(str(e), 409)
        except Exception:
            _logger.exception("unhandled error on %s %s", request.method, request.path)
            return fail("Internal server error", 500)

    return wrapper


def body() -> Mapping[str, Any]:
    return request.get_json(silent=True) or {}


def as_bool(value: Any, default: bool = False) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def as_date(value: Any, field_name: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return parse_iso_date(str(value or ""))
    except ValueError:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD")


def optional_date(value: Any, field_name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    return as_date(value, field_name)


def as_time(value: Any, field_name: str) -> time:
    if isinstance(value, time):
        return value
    try:
        return parse_hhmm(str(value or ""))
    except ValueError:
        raise ValidationError(f"{field_name} must be HH:MM")


def as_datetime(value: Any, field_name: str) -> datetime:
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value or "").strip())
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO timestamp")


def as_int(value: Any, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")


def optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    return as_int(value, field_name)
