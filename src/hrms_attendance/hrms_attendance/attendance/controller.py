from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_optional_date
from ..common.http import api_login_required, handle_errors, json_body, ok, request_params, session_identity
from ..common.validators import optional_float, optional_int
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..punches.model import BiometricPunch, Location, PunchRequest


def _punch_request(data: dict) -> PunchRequest:
    loc = data.get("location") or {}
    location = None
    if loc:
        location = Location(
            latitude=optional_float(loc.get("latitude"), "location.latitude"),
            longitude=optional_float(loc.get("longitude"), "location.longitude"),
            accuracy=optional_float(loc.get("accuracy"), "location.accuracy"),
            address=loc.get("address"),
        )
    return PunchRequest(
        location=location,
        device_id=data.get("device_id"),
        device_name=data.get("device_name"),
        device_info=data.get("device_info"),
        ip_address=request.remote_addr,
        user_agent=request.headers.get("User-Agent"),
        photo_url=data.get("photo_url"),
        photo_verified=bool(data.get("photo_verified", False)),
        is_outside_geofence=bool(data.get("is_outside_geofence", False)),
        remarks=data.get("remarks"),
    )


def register(app: Flask, container: Container) -> None:
    service = container.punch_service

    @app.route("/api/ess/attendance/web-punch", methods=["POST"], endpoint="web_punch")
    @api_login_required
    @handle_errors
    def web_punch():
        employee_id, company_id = session_identity()
        result = service.handle_web_punch(employee_id, company_id, _punch_request(json_body()))
        return ok(result, result.message)

    @app.route("/api/ess/attendance/mobile-punch", methods=["POST"], endpoint="mobile_punch")
    @api_login_required
    @handle_errors
    def mobile_punch():
        employee_id, company_id = session_identity()
        result = service.handle_mobile_punch(employee_id, company_id, _punch_request(json_body()))
        return ok(result, result.message)

    @app.route("/api/ess/attendance/today", methods=["GET", "POST"], endpoint="today_punch_status")
    @api_login_required
    @handle_errors
    def today_punch_status():
        employee_id, company_id = session_identity()
        return ok(service.get_today_punch_status(employee_id, company_id))

    @app.route("/api/ess/attendance/history", methods=["GET", "POST"], endpoint="punch_history")
    @api_login_required
    @handle_errors
    def punch_history():
        employee_id, company_id = session_identity()
        params = request_params()
        history = service.get_punch_history(
            employee_id,
            company_id,
            from_date=parse_optional_date(params.get("from_date"), "from_date"),
            to_date=parse_optional_date(params.get("to_date"), "to_date"),
            limit=optional_int(params.get("limit"), "limit", default=DEFAULT_HISTORY_LIMIT),
            offset=optional_int(params.get("offset"), "offset", default=0),
        )
        return ok(history)

    # Device and cron callers authenticate outside this app.
    @app.route("/api/ess/attendance/biometric-push", methods=["POST"], endpoint="biometric_push")
    @handle_errors
    def biometric_push():
        data = json_body()
        result = service.push_biometric_punch(
            BiometricPunch(
                biometric_device_id=data.get("biometric_device_id"),
                punch_datetime=data.get("punch_datetime"),
                company_id=data.get("company_id"),
                is_utc=bool(data.get("is_utc", False)),
                device_id=data.get("device_id"),
                device_name=data.get("device_name"),
            )
        )
        return ok(result, result.message, 201)

    @app.route("/api/ess/attendance/process-punches", methods=["POST"], endpoint="process_punches")
    @handle_errors
    def process_punches():
        params = request_params()
        result = container.aggregator.process_punch_logs(
            company_id=optional_int(params.get("company_id"), "company_id"),
            employee_id=optional_int(params.get("employee_id"), "employee_id"),
            date_from=parse_optional_date(params.get("date_from"), "date_from"),
            date_to=parse_optional_date(params.get("date_to"), "date_to"),
        )
        return ok(result, result.message)
