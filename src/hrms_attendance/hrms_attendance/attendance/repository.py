from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import DailyAttendance


class DailyAttendanceRepository(Protocol):
    def get_by_id(self, daily_attendance_id: int) -> Optional[DailyAttendance]:
        raise NotImplementedError

    def list_regular_for_date(self, *, employee_id: int, company_id: int, attendance_date: date) -> Sequence[DailyAttendance]:
        """Rows with ``workflow_master_id IS NULL`` for the date."""

        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        company_id: int,
        attendance_date: date,
        timezone: str,
        punch_in: Optional[datetime],
        punch_out: Optional[datetime],
        total_hours: Optional[Decimal],
        worked_hours: Optional[Decimal],
        attendance_status: AttendanceStatus,
        pay_day: int,
    ) -> int:
        raise NotImplementedError

    def update_punches(
        self,
        *,
        daily_attendance_id: int,
        punch_in: Optional[datetime],
        punch_out: Optional[datetime],
        total_hours: Optional[Decimal],
        worked_hours: Optional[Decimal],
        attendance_status: AttendanceStatus,
    ) -> bool:
        raise NotImplementedError
