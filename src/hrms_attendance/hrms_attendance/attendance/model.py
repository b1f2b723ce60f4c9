from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from ..core.constants import FULL_PAY_DAY
from ..core.enums import AttendanceStatus, PunchDirection, PunchTimingStatus, ShiftSource


@dataclass(frozen=True)
class DailyAttendance:
    """Domain entity: one employee-day summary.

    ``workflow_master_id is None`` marks the regular row built from punches;
    rows produced by approval workflows carry an id and are never touched here.
    """

    daily_attendance_id: int
    employee_id: int
    company_id: int
    attendance_date: date
    timezone: str
    punch_in: Optional[datetime] = None
    punch_out: Optional[datetime] = None
    total_hours: Optional[Decimal] = None
    worked_hours: Optional[Decimal] = None
    attendance_status: AttendanceStatus = AttendanceStatus.PRESENT
    pay_day: int = FULL_PAY_DAY
    workflow_master_id: Optional[int] = None
    request_id: Optional[int] = None

    @property
    def is_regular(self) -> bool:
        return self.workflow_master_id is None

    @property
    def is_open(self) -> bool:
        return self.punch_in is not None and self.punch_out is None


def most_relevant(rows: Sequence[DailyAttendance]) -> Optional[DailyAttendance]:
    """Pick the row a punch or break should act on.

    Several regular rows can exist for one date; the open one wins, then the
    newest.
    """

    regular = [r for r in rows if r.is_regular]
    if not regular:
        return None
    open_rows = [r for r in regular if r.is_open]
    pool = open_rows or regular
    return max(pool, key=lambda r: r.daily_attendance_id)


@dataclass(frozen=True)
class PunchResult:
    action: PunchDirection
    message: str
    punch_id: int
    punch_datetime: Optional[str]
    punch_type: PunchDirection
    is_late: bool
    is_early_out: bool
    shift_name: str
    shift_start: str
    shift_end: str
    shift_source: ShiftSource
    status: PunchTimingStatus
    timezone: str


@dataclass(frozen=True)
class BiometricPushResult:
    message: str
    punch_id: int
    punch_datetime: Optional[str]
    employee_id: int
    employee_code: Optional[str]
    employee_name: str
    biometric_device_id: str
    is_utc_converted: bool


@dataclass(frozen=True)
class BatchResult:
    processed_count: int
    total_punches: int
    skipped_groups: int = 0
    message: str = ""


@dataclass(frozen=True)
class TodayPunchStatus:
    date: date
    punch_count: int
    is_clocked_in: bool
    first_punch: Optional[Dict[str, Any]]
    last_punch: Optional[Dict[str, Any]]
    punches: List[Dict[str, Any]]
    next_action: PunchDirection
    shift: Optional[Dict[str, Any]]


@dataclass(frozen=True)
class PunchHistory:
    total: int
    records: List[Dict[str, Any]] = field(default_factory=list)
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    limit: int = 0
    offset: int = 0
