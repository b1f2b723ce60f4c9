from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from ..common.timezone_utils import localize, to_wall_clock
from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal
from .model import DailyAttendance
from .repository import DailyAttendanceRepository

_COLUMNS = """
    id, employee_id, company_id, attendance_date, timezone, punch_in, punch_out,
    total_hours, worked_hours, attendance_status, pay_day, workflow_master_id, request_id
"""


def _to_daily(r: Dict[str, Any]) -> DailyAttendance:
    tz = r["timezone"]
    return DailyAttendance(
        daily_attendance_id=int(r["id"]),
        employee_id=int(r["employee_id"]),
        company_id=int(r["company_id"]),
        attendance_date=r["attendance_date"],
        timezone=tz,
        punch_in=localize(r.get("punch_in"), tz),
        punch_out=localize(r.get("punch_out"), tz),
        total_hours=to_decimal(r.get("total_hours")),
        worked_hours=to_decimal(r.get("worked_hours")),
        attendance_status=AttendanceStatus(r["attendance_status"]),
        pay_day=int(r.get("pay_day") or 0),
        workflow_master_id=r.get("workflow_master_id"),
        request_id=r.get("request_id"),
    )


class MySQLDailyAttendanceRepository(DailyAttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, daily_attendance_id: int) -> Optional[DailyAttendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM hrms_daily_attendance WHERE id=%s", (int(daily_attendance_id),))
            r = fetchone(cur)
            return _to_daily(r) if r else None

    def list_regular_for_date(self, *, employee_id: int, company_id: int, attendance_date: date) -> Sequence[DailyAttendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM hrms_daily_attendance
                WHERE employee_id=%s AND company_id=%s AND attendance_date=%s AND workflow_master_id IS NULL
                ORDER BY id ASC
                """,
                (int(employee_id), int(company_id), attendance_date),
            )
            return [_to_daily(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO hrms_daily_attendance(
                    employee_id, company_id, attendance_date, timezone, punch_in, punch_out,
                    total_hours, worked_hours, attendance_status, pay_day, workflow_master_id, request_id
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,NULL,NULL)
                """,
                (
                    int(employee_id),
                    int(company_id),
                    attendance_date,
                    timezone,
                    to_wall_clock(punch_in, timezone),
                    to_wall_clock(punch_out, timezone),
                    total_hours,
                    worked_hours,
                    attendance_status.value,
                    int(pay_day),
                ),
            )
            return int(cur.lastrowid)

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT timezone FROM hrms_daily_attendance WHERE id=%s", (int(daily_attendance_id),))
            r = fetchone(cur)
            if not r:
                return False
            tz = r["timezone"]

            cur.execute(
                """
                UPDATE hrms_daily_attendance
                SET punch_in=%s, punch_out=%s, total_hours=%s, worked_hours=%s, attendance_status=%s
                WHERE id=%s
                """,
                (
                    to_wall_clock(punch_in, tz),
                    to_wall_clock(punch_out, tz),
                    total_hours,
                    worked_hours,
                    attendance_status.value,
                    int(daily_attendance_id),
                ),
            )
            return cur.rowcount > 0
