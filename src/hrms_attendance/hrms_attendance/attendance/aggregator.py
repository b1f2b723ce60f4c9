from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Tuple

from ..common.datetime_utils import day_bounds
from ..common.timezone_utils import local_date, minutes_between, now_in_timezone
from ..core.constants import DEFAULT_TIMEZONE, FULL_PAY_DAY
from ..core.enums import AttendanceStatus, PunchDirection
from ..core.exceptions import ValidationError
from ..database.transaction import TransactionManager
from ..employees.repository import EmployeeDirectory
from ..punches.model import Punch
from ..punches.repository import PunchRepository
from ..shifts.resolver import ShiftResolver
from .model import BatchResult, DailyAttendance, most_relevant
from .repository import DailyAttendanceRepository
from .timing import validate_punch_timing

logger = logging.getLogger(__name__)

_HUNDREDTH = Decimal("0.01")


def worked_hours_between(punch_in: datetime, punch_out: datetime) -> Decimal:
    """Hours between two instants, rounded to two decimals."""
    minutes = minutes_between(punch_in, punch_out)
    return (Decimal(minutes) / Decimal(60)).quantize(_HUNDREDTH, rounding=ROUND_HALF_UP)


@dataclass
class _PunchGroup:
    employee_id: int
    company_id: int
    punch_date: date
    timezone: str
    punches: List[Punch] = field(default_factory=list)


class DailyAttendanceAggregator:
    """Maintains the regular daily attendance row from punches.

    Both the interactive path and the biometric batch go through
    ``upsert_daily_attendance`` so the merge rule lives in one place.
    """

    def __init__(
        self,
        tx: TransactionManager,
        attendance: DailyAttendanceRepository,
        punches: PunchRepository,
        employees: EmployeeDirectory,
        shift_resolver: ShiftResolver,
        *,
        default_timezone: str = DEFAULT_TIMEZONE,
    ):
        self._tx = tx
        self._attendance = attendance
        self._punches = punches
        self._employees = employees
        self._shift_resolver = shift_resolver
        self._default_timezone = default_timezone

    def find_regular_row(self, *, employee_id: int, company_id: int, attendance_date: date) -> Optional[DailyAttendance]:
        rows = self._attendance.list_regular_for_date(
            employee_id=employee_id,
            company_id=company_id,
            attendance_date=attendance_date,
        )
        return most_relevant(rows)

    def upsert_daily_attendance(
        self,
        *,
        employee_id: int,
        company_id: int,
        attendance_date: date,
        timezone: str,
        punch_in: Optional[datetime] = None,
        punch_out: Optional[datetime] = None,
        existing: Optional[DailyAttendance] = None,
    ) -> int:
        """Merge new instants into the day's regular row and return its id.

        The earliest known instant becomes ``punch_in`` and the latest becomes
        ``punch_out``; a single instant leaves the day open.
        """

        if existing is None:
            existing = self.find_regular_row(
                employee_id=employee_id,
                company_id=company_id,
                attendance_date=attendance_date,
            )

        known = [punch_in, punch_out]
        if existing is not None:
            known += [existing.punch_in, existing.punch_out]
        instants = sorted({i for i in known if i is not None})
        if not instants:
            raise ValidationError("At least one of punch_in or punch_out is required")

        first = instants[0]
        last = instants[-1] if len(instants) > 1 else None
        hours = worked_hours_between(first, last) if last is not None else None

        if existing is not None:
            self._attendance.update_punches(
                daily_attendance_id=existing.daily_attendance_id,
                punch_in=first,
                punch_out=last,
                total_hours=hours,
                worked_hours=hours,
                attendance_status=AttendanceStatus.PRESENT,
            )
            return existing.daily_attendance_id

        return self._attendance.create(
            employee_id=employee_id,
            company_id=company_id,
            attendance_date=attendance_date,
            timezone=timezone,
            punch_in=first,
            punch_out=last,
            total_hours=hours,
            worked_hours=hours,
            attendance_status=AttendanceStatus.PRESENT,
            pay_day=FULL_PAY_DAY,
        )

    def apply_interactive_punch(
        self,
        *,
        punch_id: int,
        employee_id: int,
        company_id: int,
        attendance_date: date,
        timezone: str,
        punch_datetime: datetime,
        direction: PunchDirection,
        existing: Optional[DailyAttendance] = None,
    ) -> int:
        """Synchronous update after a web/mobile/admin punch; links the punch."""

        if PunchDirection(direction) == PunchDirection.IN:
            daily_id = self.upsert_daily_attendance(
                employee_id=employee_id,
                company_id=company_id,
                attendance_date=attendance_date,
                timezone=timezone,
                punch_in=punch_datetime,
            )
        else:
            if existing is None:
                raise ValidationError("No clock-in found for today")
            daily_id = self.upsert_daily_attendance(
                employee_id=employee_id,
                company_id=company_id,
                attendance_date=attendance_date,
                timezone=timezone,
                punch_out=punch_datetime,
                existing=existing,
            )

        self._punches.link_to_daily_attendance(punch_ids=[punch_id], daily_attendance_id=daily_id)
        return daily_id

    def process_punch_logs(
        self,
        *,
        company_id: Optional[int] = None,
        employee_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> BatchResult:
        """Reconcile unlinked biometric punches into daily attendance.

        The whole run is one transaction: a failure in any group rolls back
        every group. Groups without a shift are left unlinked for a later run.
        """

        today = now_in_timezone(self._default_timezone, now=now).date()
        date_to = date_to or today
        date_from = date_from or (today - timedelta(days=1))
        if date_from > date_to:
            raise ValidationError("date_from must not be after date_to")

        with self._tx.transaction():
            start, end = day_bounds(date_from, date_to)
            punches = self._punches.list_unlinked_biometric(
                start=start,
                end=end,
                company_id=company_id,
                employee_id=employee_id,
            )
            if not punches:
                logger.info("No unprocessed biometric punches between %s and %s", date_from, date_to)
                return BatchResult(processed_count=0, total_punches=0, message="No unprocessed punches found")

            groups = self._group_by_employee_day(punches)
            processed = 0
            skipped = 0
            for group in groups.values():
                if self._process_group(group):
                    processed += 1
                else:
                    skipped += 1

        message = f"Successfully processed {processed} employee-date groups"
        logger.info("%s (%d punches, %d groups skipped)", message, len(punches), skipped)
        return BatchResult(
            processed_count=processed,
            total_punches=len(punches),
            skipped_groups=skipped,
            message=message,
        )

    def _group_by_employee_day(self, punches) -> Dict[Tuple[int, date], _PunchGroup]:
        zones: Dict[int, str] = {}
        groups: Dict[Tuple[int, date], _PunchGroup] = {}
        for p in punches:
            if p.employee_id not in zones:
                employee = self._employees.get_by_id(p.employee_id)
                zones[p.employee_id] = (employee.timezone if employee else None) or p.timezone or self._default_timezone
            tz = zones[p.employee_id]
            key = (p.employee_id, local_date(p.punch_datetime, tz))
            if key not in groups:
                groups[key] = _PunchGroup(
                    employee_id=p.employee_id,
                    company_id=p.company_id,
                    punch_date=key[1],
                    timezone=tz,
                )
            groups[key].punches.append(p)
        return groups

    def _process_group(self, group: _PunchGroup) -> bool:
        resolved = self._shift_resolver.resolve_shift(group.employee_id, group.punch_date)
        if not resolved:
            logger.warning("No shift found for employee %s on %s; punches left unlinked", group.employee_id, group.punch_date)
            return False

        ordered = sorted(group.punches, key=lambda p: p.punch_datetime)
        first = ordered[0]
        last = ordered[-1]
        punch_out = last.punch_datetime if len(ordered) > 1 else None

        # Biometric punches are recorded even when outside the check-in window.
        in_decision = validate_punch_timing(first.punch_datetime, PunchDirection.IN, resolved.shift, group.timezone)
        self._punches.update_flags(punch_id=first.punch_id, is_late=in_decision.is_late, is_early_out=False)

        if punch_out is not None and last.punch_id != first.punch_id:
            out_decision = validate_punch_timing(punch_out, PunchDirection.OUT, resolved.shift, group.timezone)
            self._punches.update_flags(punch_id=last.punch_id, is_late=False, is_early_out=out_decision.is_early)

        daily_id = self.upsert_daily_attendance(
            employee_id=group.employee_id,
            company_id=group.company_id,
            attendance_date=group.punch_date,
            timezone=group.timezone,
            punch_in=first.punch_datetime,
            punch_out=punch_out,
        )
        self._punches.link_to_daily_attendance(
            punch_ids=[p.punch_id for p in ordered],
            daily_attendance_id=daily_id,
        )
        return True
