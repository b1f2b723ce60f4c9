from __future__ import annotations

from datetime import date
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Schedule
from .repository import ScheduleRepository


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, *, employee_id: int, work_date: date) -> Optional[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, employee_id, work_date, shift_id, note
                FROM hrms_shift_roster
                WHERE employee_id=%s AND work_date=%s
                ORDER BY id DESC
                LIMIT 1
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Schedule(
                schedule_id=int(r["id"]),
                employee_id=int(r["employee_id"]),
                work_date=r["work_date"],
                shift_id=int(r["shift_id"]),
                note=r.get("note"),
            )
