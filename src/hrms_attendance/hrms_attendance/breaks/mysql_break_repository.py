from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence, Tuple

from ..common.timezone_utils import localize, to_wall_clock
from ..core.enums import BreakStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import BreakLog
from .repository import BreakLogRepository

_COLUMNS = """
    id, employee_id, company_id, break_date, shift_break_rule_id, break_start_time, break_end_time,
    break_duration_minutes, status, timezone, remarks, created_by
"""


def _to_break(r: Dict[str, Any]) -> BreakLog:
    tz = r["timezone"]
    duration = r.get("break_duration_minutes")
    return BreakLog(
        break_id=int(r["id"]),
        employee_id=int(r["employee_id"]),
        company_id=int(r["company_id"]),
        break_date=r["break_date"],
        shift_break_rule_id=int(r["shift_break_rule_id"]) if r.get("shift_break_rule_id") is not None else None,
        break_start_time=localize(r["break_start_time"], tz),
        break_end_time=localize(r.get("break_end_time"), tz),
        break_duration_minutes=int(duration) if duration is not None else None,
        status=BreakStatus(r["status"]),
        timezone=tz,
        remarks=r.get("remarks"),
        created_by=r.get("created_by"),
    )


class MySQLBreakLogRepository(BreakLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_ongoing(self, *, employee_id: int, company_id: int, break_date: date) -> Optional[BreakLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM hrms_break_log
                WHERE employee_id=%s AND company_id=%s AND break_date=%s AND status=%s
                ORDER BY break_start_time DESC
                LIMIT 1
                """,
                (int(employee_id), int(company_id), break_date, BreakStatus.ONGOING.value),
            )
            r = fetchone(cur)
            return _to_break(r) if r else None

    def create(
        self,
        *,
        employee_id: int,
        company_id: int,
        break_date: date,
        timezone: str,
        break_start_time: datetime,
        shift_break_rule_id: Optional[int],
        remarks: Optional[str],
        created_by: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO hrms_break_log(
                    employee_id, company_id, break_date, shift_break_rule_id, break_start_time,
                    status, timezone, remarks, created_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    int(company_id),
                    break_date,
                    shift_break_rule_id,
                    to_wall_clock(break_start_time, timezone),
                    BreakStatus.ONGOING.value,
                    timezone,
                    remarks,
                    created_by,
                ),
            )
            return int(cur.lastrowid)

    def close(self, *, break_id: int, break_end_time: datetime, break_duration_minutes: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT timezone FROM hrms_break_log WHERE id=%s", (int(break_id),))
            r = fetchone(cur)
            if not r:
                return False

            cur.execute(
                """
                UPDATE hrms_break_log
                SET break_end_time=%s, break_duration_minutes=%s, status=%s
                WHERE id=%s
                """,
                (
                    to_wall_clock(break_end_time, r["timezone"]),
                    int(break_duration_minutes),
                    BreakStatus.COMPLETED.value,
                    int(break_id),
                ),
            )
            return cur.rowcount > 0

    def list_for_date(self, *, employee_id: int, company_id: int, break_date: date) -> Sequence[BreakLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM hrms_break_log
                WHERE employee_id=%s AND company_id=%s AND break_date=%s
                ORDER BY break_start_time ASC
                """,
                (int(employee_id), int(company_id), break_date),
            )
            return [_to_break(r) for r in fetchall(cur)]

    def list_history(
        self,
        *,
        employee_id: int,
        company_id: int,
        from_date: date,
        to_date: date,
        limit: int,
        offset: int,
    ) -> Tuple[int, Sequence[BreakLog]]:
        where = "employee_id=%s AND company_id=%s AND break_date BETWEEN %s AND %s"
        params = (int(employee_id), int(company_id), from_date, to_date)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM hrms_break_log WHERE {where}", params)
            total = int((fetchone(cur) or {}).get("total") or 0)

            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM hrms_break_log
                WHERE {where}
                ORDER BY break_start_time DESC
                LIMIT %s OFFSET %s
                """,
                (*params, int(limit), int(offset)),
            )
            return total, [_to_break(r) for r in fetchall(cur)]
