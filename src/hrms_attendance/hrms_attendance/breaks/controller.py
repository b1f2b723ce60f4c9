from __future__ import annotations

from flask import Flask

from ..common.datetime_utils import parse_optional_date
from ..common.http import api_login_required, handle_errors, json_body, ok, request_params, session_identity
from ..common.validators import optional_int
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT


def register(app: Flask, container: Container) -> None:
    service = container.break_service

    @app.route("/api/ess/break/toggle", methods=["POST"], endpoint="toggle_break")
    @api_login_required
    @handle_errors
    def toggle_break():
        employee_id, company_id = session_identity()
        data = json_body()
        result = service.toggle_break(
            employee_id,
            company_id,
            break_rule_id=optional_int(data.get("break_rule_id"), "break_rule_id"),
            remarks=data.get("remarks"),
        )
        return ok(result, result.message)

    @app.route("/api/ess/break/status", methods=["GET", "POST"], endpoint="break_status")
    @api_login_required
    @handle_errors
    def break_status():
        employee_id, company_id = session_identity()
        return ok(service.get_break_status(employee_id, company_id))

    @app.route("/api/ess/break/history", methods=["GET", "POST"], endpoint="break_history")
    @api_login_required
    @handle_errors
    def break_history():
        employee_id, company_id = session_identity()
        params = request_params()
        history = service.get_break_history(
            employee_id,
            company_id,
            from_date=parse_optional_date(params.get("from_date"), "from_date"),
            to_date=parse_optional_date(params.get("to_date"), "to_date"),
            limit=optional_int(params.get("limit"), "limit", default=DEFAULT_HISTORY_LIMIT),
            offset=optional_int(params.get("offset"), "offset", default=0),
        )
        return ok(history)
