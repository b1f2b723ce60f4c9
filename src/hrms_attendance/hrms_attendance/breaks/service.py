from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Dict, List, Optional

from ..attendance.model import most_relevant
from ..attendance.repository import DailyAttendanceRepository
from ..common.datetime_utils import default_range
from ..common.timezone_utils import format_datetime, minutes_between, now_in_timezone
from ..core.constants import AD_HOC_BREAK_NAME, DEFAULT_HISTORY_DAYS, DEFAULT_HISTORY_LIMIT, DEFAULT_TIMEZONE
from ..core.enums import BreakAction, BreakStatus
from ..core.exceptions import AlreadyClockedOut, ClockInRequired, EmployeeNotFound, ValidationError
from ..database.transaction import TransactionManager
from ..employees.repository import EmployeeDirectory
from ..shifts.model import BreakRule, ResolvedShift
from ..shifts.repository import BreakRuleRepository
from ..shifts.resolver import ShiftResolver
from .model import BreakHistory, BreakLog, BreakResult, BreakStatusView
from .repository import BreakLogRepository

logger = logging.getLogger(__name__)

_UNSET = object()


class ShiftContext:
    """Shift of one employee-day, resolved at most once per request."""

    def __init__(self, resolver: ShiftResolver, rules: BreakRuleRepository, *, employee_id: int, work_date: date):
        self._resolver = resolver
        self._rules = rules
        self._employee_id = employee_id
        self._work_date = work_date
        self._resolved = _UNSET

    @property
    def resolved(self) -> Optional[ResolvedShift]:
        if self._resolved is _UNSET:
            self._resolved = self._resolver.resolve_shift(self._employee_id, self._work_date)
        return self._resolved

    def find_break_rule(self, rule_id: Optional[int]) -> Optional[BreakRule]:
        if not rule_id or not self.resolved:
            return None
        return self._rules.find_break_rule(int(rule_id), self.resolved.shift.shift_id)

    def available_break_rules(self) -> List[BreakRule]:
        if not self.resolved:
            return []
        return list(self._rules.list_for_shift(self.resolved.shift.shift_id))


def _break_row(b: BreakLog, tz: str) -> Dict[str, object]:
    return {
        "break_id": b.break_id,
        "break_start_time": format_datetime(b.break_start_time, tz),
        "break_end_time": format_datetime(b.break_end_time, tz),
        "duration_minutes": b.break_duration_minutes,
        "status": b.status.value,
    }


class BreakService:
    def __init__(
        self,
        tx: TransactionManager,
        employees: EmployeeDirectory,
        attendance: DailyAttendanceRepository,
        breaks: BreakLogRepository,
        break_rules: BreakRuleRepository,
        shift_resolver: ShiftResolver,
        *,
        default_timezone: str = DEFAULT_TIMEZONE,
    ):
        self._tx = tx
        self._employees = employees
        self._attendance = attendance
        self._breaks = breaks
        self._break_rules = break_rules
        self._shift_resolver = shift_resolver
        self._default_timezone = default_timezone

    def _context(self, employee_id: int, work_date: date) -> ShiftContext:
        return ShiftContext(self._shift_resolver, self._break_rules, employee_id=employee_id, work_date=work_date)

    def _employee_timezone(self, employee_id: int, company_id: int) -> str:
        employee = self._employees.find_active_employee(employee_id, company_id)
        if not employee:
            raise EmployeeNotFound("Employee not found or inactive")
        return employee.timezone_or(self._default_timezone)

    def toggle_break(
        self,
        employee_id: int,
        company_id: int,
        break_rule_id: Optional[int] = None,
        remarks: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> BreakResult:
        """End the ongoing break of today, or start a new one."""

        with self._tx.transaction():
            employee = self._employees.find_active_employee(employee_id, company_id, for_update=True)
            if not employee:
                raise EmployeeNotFound("Employee not found or inactive")

            tz = employee.timezone_or(self._default_timezone)
            current = now_in_timezone(tz, now=now)
            today = current.date()

            rows = self._attendance.list_regular_for_date(
                employee_id=employee_id,
                company_id=company_id,
                attendance_date=today,
            )
            daily = most_relevant([r for r in rows if r.punch_in is not None])
            if daily is None:
                raise ClockInRequired("You must clock in before taking a break")
            if daily.punch_out is not None:
                raise AlreadyClockedOut("You have already clocked out for the day")

            context = self._context(employee_id, today)
            ongoing = self._breaks.get_ongoing(employee_id=employee_id, company_id=company_id, break_date=today)

            if ongoing:
                duration = max(0, minutes_between(ongoing.break_start_time, current))
                self._breaks.close(break_id=ongoing.break_id, break_end_time=current, break_duration_minutes=duration)
                rule = context.find_break_rule(ongoing.shift_break_rule_id)
                result = BreakResult(
                    action=BreakAction.END,
                    message="Break ended successfully",
                    break_id=ongoing.break_id,
                    break_start_time=format_datetime(ongoing.break_start_time, tz),
                    break_end_time=format_datetime(current, tz),
                    break_duration_minutes=duration,
                    break_name=rule.break_name if rule else AD_HOC_BREAK_NAME,
                    status=BreakStatus.COMPLETED,
                )
            else:
                rule = context.find_break_rule(break_rule_id)
                break_id = self._breaks.create(
                    employee_id=employee_id,
                    company_id=company_id,
                    break_date=today,
                    timezone=tz,
                    break_start_time=current,
                    shift_break_rule_id=rule.break_rule_id if rule else None,
                    remarks=remarks,
                    created_by=employee_id,
                )
                result = BreakResult(
                    action=BreakAction.START,
                    message="Break started successfully",
                    break_id=break_id,
                    break_start_time=format_datetime(current, tz),
                    break_name=rule.break_name if rule else AD_HOC_BREAK_NAME,
                    status=BreakStatus.ONGOING,
                )

        logger.info("Employee %s break %s (%s)", employee_id, result.action.value, result.break_id)
        return result

    def get_break_status(self, employee_id: int, company_id: int, *, now: Optional[datetime] = None) -> BreakStatusView:
        tz = self._employee_timezone(employee_id, company_id)
        current = now_in_timezone(tz, now=now)
        today = current.date()

        ongoing = self._breaks.get_ongoing(employee_id=employee_id, company_id=company_id, break_date=today)
        today_breaks = self._breaks.list_for_date(employee_id=employee_id, company_id=company_id, break_date=today)
        total = sum(b.break_duration_minutes or 0 for b in today_breaks)

        ongoing_view = None
        if ongoing:
            ongoing_view = {
                "break_id": ongoing.break_id,
                "break_start_time": format_datetime(ongoing.break_start_time, tz),
                "duration_so_far": max(0, minutes_between(ongoing.break_start_time, current)),
            }

        rules = self._context(employee_id, today).available_break_rules()
        return BreakStatusView(
            is_on_break=ongoing is not None,
            ongoing_break=ongoing_view,
            today_breaks=[_break_row(b, tz) for b in today_breaks],
            total_break_minutes=total,
            available_breaks=[
                {
                    "id": r.break_rule_id,
                    "break_name": r.break_name,
                    "break_start_after_minutes": r.break_start_after_minutes,
                    "break_duration_minutes": r.break_duration_minutes,
                    "is_paid": r.is_paid,
                    "is_mandatory": r.is_mandatory,
                }
                for r in rules
            ],
        )

    def get_break_history(
        self,
        employee_id: int,
        company_id: int,
        *,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
        offset: int = 0,
        now: Optional[datetime] = None,
    ) -> BreakHistory:
        tz = self._employee_timezone(employee_id, company_id)
        default_from, default_to = default_range(now_in_timezone(tz, now=now).date(), days=DEFAULT_HISTORY_DAYS)
        from_date = from_date or default_from
        to_date = to_date or default_to
        if from_date > to_date:
            raise ValidationError("from_date must not be after to_date")
        if int(limit) <= 0 or int(offset) < 0:
            raise ValidationError("limit must be positive and offset must not be negative")

        total, rows = self._breaks.list_history(
            employee_id=employee_id,
            company_id=company_id,
            from_date=from_date,
            to_date=to_date,
            limit=int(limit),
            offset=int(offset),
        )
        records = []
        for b in rows:
            row = _break_row(b, tz)
            row["break_date"] = b.break_date.isoformat()
            row["remarks"] = b.remarks
            records.append(row)

        return BreakHistory(
            total=total,
            records=records,
            from_date=from_date,
            to_date=to_date,
            limit=int(limit),
            offset=int(offset),
        )
