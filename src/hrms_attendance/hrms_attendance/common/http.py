from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from functools import wraps
from typing import Any, Callable, Optional, Tuple

from flask import jsonify, request, session

from ..core.exceptions import DomainError, DuplicatePunch, EmployeeNotFound

logger = logging.getLogger(__name__)


def to_json(value: Any) -> Any:
    """Plain JSON-friendly structure for service results."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_json(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    return value


def ok(data: Any = None, message: Optional[str] = None, status: int = 200):
    body = {"success": True, "data": to_json(data)}
    if message:
        body["message"] = message
    return jsonify(body), status


def fail(message: str, status: int = 400):
    return jsonify({"success": False, "message": message}), status


def status_for(error: DomainError) -> int:
    if isinstance(error, EmployeeNotFound):
        return 404
    if isinstance(error, DuplicatePunch):
        return 409
    return 400


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def request_params() -> dict:
    """Query string merged with the JSON body (body wins)."""
    params = request.args.to_dict()
    params.update(json_body())
    return params


def session_identity() -> Tuple[int, int]:
    return int(session["employee_id"]), int(session["company_id"])


def api_login_required(view: Callable):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session or "company_id" not in session:
            return fail("Authentication required", 401)
        return view(*args, **kwargs)

    return wrapper


def handle_errors(view: Callable):
    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            return fail(str(e), status_for(e))
        except Exception:
            logger.exception("Unhandled error in %s", view.__name__)
            return fail("Internal server error", 500)

    return wrapper
