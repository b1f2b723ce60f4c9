from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import day_bounds, default_range, parse_iso_datetime
from ..common.time_of_day import TimeOfDay
from ..common.timezone_utils import format_datetime, localize, now_in_timezone, to_employee_timezone, utc_offset
from ..common.validators import require_positive_int, require_present
from ..companies.repository import CompanySettings
from ..core.constants import DEFAULT_HISTORY_DAYS, DEFAULT_HISTORY_LIMIT, DEFAULT_TIMEZONE
from ..core.enums import PunchDirection, PunchSource, PunchTimingStatus
from ..core.exceptions import (
    DuplicatePunch,
    EmployeeNotFound,
    LocationRequired,
    NoShiftAssigned,
    PunchRejected,
    ValidationError,
)
from ..database.transaction import TransactionManager
from ..employees.repository import EmployeeDirectory
from ..punches.duplicate import DuplicateDetector
from ..punches.model import BiometricPunch, Punch, PunchRequest
from ..punches.repository import PunchRepository
from ..shifts.model import ResolvedShift
from ..shifts.resolver import ShiftResolver
from .aggregator import DailyAttendanceAggregator
from .model import BiometricPushResult, PunchHistory, PunchResult, TodayPunchStatus
from .timing import validate_punch_timing

logger = logging.getLogger(__name__)


def _shift_summary(resolved: Optional[ResolvedShift]) -> Optional[dict]:
    if not resolved:
        return None
    shift = resolved.shift
    return {
        "name": shift.shift_name,
        "start": str(TimeOfDay.from_time(shift.start_time)),
        "end": str(TimeOfDay.from_time(shift.end_time)),
        "source": resolved.source.value,
    }


class PunchService:
    """Punch ingestion for every source.

    IN/OUT is never sent by the client: it is inferred from whether a regular
    daily attendance row already exists for the employee's local date.
    """

    def __init__(
        self,
        tx: TransactionManager,
        employees: EmployeeDirectory,
        companies: CompanySettings,
        shift_resolver: ShiftResolver,
        punches: PunchRepository,
        duplicates: DuplicateDetector,
        aggregator: DailyAttendanceAggregator,
        *,
        default_timezone: str = DEFAULT_TIMEZONE,
    ):
        self._tx = tx
        self._employees = employees
        self._companies = companies
        self._shift_resolver = shift_resolver
        self._punches = punches
        self._duplicates = duplicates
        self._aggregator = aggregator
        self._default_timezone = default_timezone

    def handle_web_punch(
        self, employee_id: int, company_id: int, request: Optional[PunchRequest] = None, *, now: Optional[datetime] = None
    ) -> PunchResult:
        request = replace(request or PunchRequest(), punch_source=PunchSource.WEB)
        return self.handle_punch(employee_id, company_id, request, now=now)

    def handle_mobile_punch(
        self, employee_id: int, company_id: int, request: Optional[PunchRequest] = None, *, now: Optional[datetime] = None
    ) -> PunchResult:
        request = request or PunchRequest()
        if not request.location or not request.location.has_coordinates:
            raise LocationRequired("Location (latitude, longitude) is required for mobile punch")
        request = replace(request, punch_source=PunchSource.MOBILE)
        return self.handle_punch(employee_id, company_id, request, now=now)

    def handle_punch(
        self, employee_id: int, company_id: int, request: Optional[PunchRequest] = None, *, now: Optional[datetime] = None
    ) -> PunchResult:
        request = request or PunchRequest()

        with self._tx.transaction():
            # Row lock serialises concurrent punches of the same employee.
            employee = self._employees.find_active_employee(employee_id, company_id, for_update=True)
            if not employee:
                raise EmployeeNotFound("Employee not found or inactive")

            tz = employee.timezone_or(self._default_timezone)
            utc_enabled = self._companies.is_biometric_utc_enabled(company_id)

            original_utc = None
            if request.punch_source == PunchSource.BIOMETRIC and request.is_utc and utc_enabled:
                original_utc = to_employee_timezone(request.punch_datetime or now_in_timezone("UTC", now=now), "UTC")
                punch_at = to_employee_timezone(original_utc, tz)
            else:
                punch_at = now_in_timezone(tz, now=now)

            punch_date = punch_at.date()

            resolved = self._shift_resolver.resolve_shift(employee.employee_id, punch_date)
            if not resolved:
                raise NoShiftAssigned("No shift assigned for this date. Please contact HR.")
            shift = resolved.shift

            existing = self._aggregator.find_regular_row(
                employee_id=employee.employee_id,
                company_id=company_id,
                attendance_date=punch_date,
            )
            direction = PunchDirection.IN if existing is None else PunchDirection.OUT

            decision = validate_punch_timing(punch_at, direction, shift, tz)
            if not decision.allowed:
                logger.warning("Punch rejected for employee %s at %s: %s", employee.employee_id, punch_at, decision.reason)
                raise PunchRejected(decision.reason)

            if self._duplicates.is_duplicate(employee.employee_id, punch_at):
                raise DuplicatePunch(
                    "Duplicate punch detected. "
                    f"Please wait at least {self._duplicates.window_minutes} minute between punches."
                )

            is_late = decision.is_late if direction == PunchDirection.IN else False
            is_early_out = decision.is_early if direction == PunchDirection.OUT else False
            location = request.location

            punch_id = self._punches.create(
                Punch(
                    employee_id=employee.employee_id,
                    company_id=company_id,
                    punch_datetime=punch_at,
                    punch_source=request.punch_source,
                    timezone=tz,
                    utc_offset=utc_offset(tz, at=punch_at),
                    is_utc_converted=original_utc is not None,
                    original_utc_datetime=original_utc,
                    biometric_device_id=request.biometric_device_id,
                    biometric_device_name=request.biometric_device_name,
                    device_id=request.device_id,
                    device_name=request.device_name,
                    device_info=request.device_info,
                    latitude=location.latitude if location else None,
                    longitude=location.longitude if location else None,
                    location_accuracy=location.accuracy if location else None,
                    location_address=location.address if location else None,
                    ip_address=request.ip_address,
                    user_agent=request.user_agent,
                    photo_url=request.photo_url,
                    photo_verified=request.photo_verified,
                    is_outside_geofence=request.is_outside_geofence,
                    is_late=is_late,
                    is_early_out=is_early_out,
                    remarks=request.remarks,
                    created_by=employee.employee_id,
                )
            )

            self._aggregator.apply_interactive_punch(
                punch_id=punch_id,
                employee_id=employee.employee_id,
                company_id=company_id,
                attendance_date=punch_date,
                timezone=tz,
                punch_datetime=punch_at,
                direction=direction,
                existing=existing,
            )

        logger.info(
            "Employee %s clocked %s at %s via %s",
            employee.employee_id,
            direction.value,
            punch_at,
            request.punch_source.value,
        )

        if decision.is_late:
            status = PunchTimingStatus.LATE
        elif decision.is_early:
            status = PunchTimingStatus.EARLY_OUT
        else:
            status = PunchTimingStatus.ON_TIME

        message = f"Clocked {direction.value} successfully"
        if decision.is_late:
            message += " (Late)"
        if decision.is_early:
            message += " (Early departure)"

        return PunchResult(
            action=direction,
            message=message,
            punch_id=punch_id,
            punch_datetime=format_datetime(punch_at, tz),
            punch_type=direction,
            is_late=decision.is_late,
            is_early_out=decision.is_early,
            shift_name=shift.shift_name,
            shift_start=str(TimeOfDay.from_time(shift.start_time)),
            shift_end=str(TimeOfDay.from_time(shift.end_time)),
            shift_source=resolved.source,
            status=status,
            timezone=tz,
        )

    def push_biometric_punch(self, payload: BiometricPunch) -> BiometricPushResult:
        """Record a device punch as-is; reconciliation happens in the batch run."""

        device_id = str(require_present(payload.biometric_device_id, "biometric_device_id")).strip()
        raw = parse_iso_datetime(require_present(payload.punch_datetime, "punch_datetime"), "punch_datetime")
        company_id = require_positive_int(require_present(payload.company_id, "company_id"), "company_id")

        with self._tx.transaction():
            employee = self._employees.find_active_employee_by_biometric_device(device_id, company_id)
            if not employee:
                raise EmployeeNotFound(f"Employee not found for biometric_device_id: {device_id}")

            tz = employee.timezone_or(self._default_timezone)
            utc_enabled = self._companies.is_biometric_utc_enabled(company_id)

            original_utc = None
            if payload.is_utc and utc_enabled:
                original_utc = to_employee_timezone(raw, "UTC")
                punch_at = to_employee_timezone(original_utc, tz)
            else:
                # Device clock already runs in the employee's zone.
                punch_at = localize(raw, tz)

            if self._duplicates.is_duplicate(employee.employee_id, punch_at):
                raise DuplicatePunch(
                    "Duplicate punch detected. "
                    f"Punch already exists within {self._duplicates.window_minutes} minute window."
                )

            punch_id = self._punches.create(
                Punch(
                    employee_id=employee.employee_id,
                    company_id=company_id,
                    punch_datetime=punch_at,
                    punch_source=PunchSource.BIOMETRIC,
                    timezone=tz,
                    utc_offset=utc_offset(tz, at=punch_at),
                    is_utc_converted=original_utc is not None,
                    original_utc_datetime=original_utc,
                    biometric_device_id=device_id,
                    biometric_device_name=payload.device_name,
                    device_id=payload.device_id,
                    daily_attendance_id=None,
                    created_by=employee.employee_id,
                )
            )

        logger.info("Biometric punch %s recorded for employee %s (device %s)", punch_id, employee.employee_id, device_id)
        return BiometricPushResult(
            message="Biometric punch recorded successfully",
            punch_id=punch_id,
            punch_datetime=format_datetime(punch_at, tz),
            employee_id=employee.employee_id,
            employee_code=employee.employee_code,
            employee_name=employee.full_name,
            biometric_device_id=device_id,
            is_utc_converted=original_utc is not None,
        )

    def _timezone_for(self, employee_id: int) -> str:
        employee = self._employees.get_by_id(employee_id)
        return employee.timezone_or(self._default_timezone) if employee else self._default_timezone

    def get_today_punch_status(self, employee_id: int, company_id: int, *, now: Optional[datetime] = None) -> TodayPunchStatus:
        tz = self._timezone_for(employee_id)
        today = now_in_timezone(tz, now=now).date()

        resolved = self._shift_resolver.resolve_shift(employee_id, today)
        daily = self._aggregator.find_regular_row(employee_id=employee_id, company_id=company_id, attendance_date=today)
        punches = list(self._punches.list_for_daily_attendance(daily_attendance_id=daily.daily_attendance_id)) if daily else []

        first_punch = None
        if daily and daily.punch_in:
            first_punch = {
                "time": format_datetime(daily.punch_in, tz),
                "is_late": punches[0].is_late if punches else False,
            }

        last_punch = None
        if punches:
            last_punch = {
                "time": format_datetime(punches[-1].punch_datetime, tz),
                "is_early_out": punches[-1].is_early_out,
            }

        return TodayPunchStatus(
            date=today,
            punch_count=len(punches),
            is_clocked_in=bool(daily and daily.punch_out is None),
            first_punch=first_punch,
            last_punch=last_punch,
            punches=[
                {"id": p.punch_id, "time": format_datetime(p.punch_datetime, tz), "source": p.punch_source.value}
                for p in punches
            ],
            next_action=PunchDirection.IN if daily is None else PunchDirection.OUT,
            shift=_shift_summary(resolved),
        )

    def get_punch_history(
        self,
        employee_id: int,
        company_id: int,
        *,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
        offset: int = 0,
        now: Optional[datetime] = None,
    ) -> PunchHistory:
        tz = self._timezone_for(employee_id)
        default_from, default_to = default_range(now_in_timezone(tz, now=now).date(), days=DEFAULT_HISTORY_DAYS)
        from_date = from_date or default_from
        to_date = to_date or default_to
        if from_date > to_date:
            raise ValidationError("from_date must not be after to_date")
        if int(limit) <= 0 or int(offset) < 0:
            raise ValidationError("limit must be positive and offset must not be negative")

        start, end = day_bounds(from_date, to_date)
        total, rows = self._punches.list_history(
            employee_id=employee_id,
            company_id=company_id,
            start=start,
            end=end,
            limit=int(limit),
            offset=int(offset),
        )

        records = [
            {
                "id": p.punch_id,
                "punch_datetime": format_datetime(p.punch_datetime, tz),
                "punch_source": p.punch_source.value,
                "is_late": p.is_late,
                "is_early_out": p.is_early_out,
                "latitude": p.latitude,
                "longitude": p.longitude,
                "location_address": p.location_address,
                "photo_url": p.photo_url,
                "remarks": p.remarks,
            }
            for p in rows
        ]
        return PunchHistory(
            total=total,
            records=records,
            from_date=from_date,
            to_date=to_date,
            limit=int(limit),
            offset=int(offset),
        )
