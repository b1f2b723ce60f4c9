from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.constants import DEFAULT_CHECKIN_ALLOWED_BEFORE_MINUTES
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import BreakRule, Shift
from .repository import BreakRuleRepository, ShiftRepository


def _to_shift(r: Dict[str, Any]) -> Shift:
    before = r.get("checkin_allowed_before_minutes")
    return Shift(
        shift_id=int(r["id"]),
        shift_name=r["shift_name"],
        start_time=normalize_mysql_time(r["shift_start_time"]),
        end_time=normalize_mysql_time(r["shift_end_time"]),
        checkin_allowed_before_minutes=int(before) if before else DEFAULT_CHECKIN_ALLOWED_BEFORE_MINUTES,
        grace_time_late_minutes=int(r.get("grace_time_late_minutes") or 0),
        grace_time_early_minutes=int(r.get("grace_time_early_minutes") or 0),
    )


def _to_break_rule(r: Dict[str, Any]) -> BreakRule:
    return BreakRule(
        break_rule_id=int(r["id"]),
        shift_id=int(r["shift_id"]),
        break_name=r["break_name"],
        break_start_after_minutes=r.get("break_start_after_minutes"),
        break_duration_minutes=r.get("break_duration_minutes"),
        is_paid=bool(r.get("is_paid")),
        is_mandatory=bool(r.get("is_mandatory")),
        break_order=int(r.get("break_order") or 0),
        is_active=bool(r.get("is_active", True)),
    )


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, shift_name, shift_start_time, shift_end_time,
                       checkin_allowed_before_minutes, grace_time_late_minutes, grace_time_early_minutes
                FROM hrms_shift_master
                WHERE id=%s
                """,
                (int(shift_id),),
            )
            r = fetchone(cur)
            return _to_shift(r) if r else None


class MySQLBreakRuleRepository(BreakRuleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_break_rule(self, rule_id: int, shift_id: int) -> Optional[BreakRule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, shift_id, break_name, break_start_after_minutes, break_duration_minutes,
                       is_paid, is_mandatory, break_order, is_active
                FROM hrms_shift_break_rules
                WHERE id=%s AND shift_id=%s AND is_active=1
                """,
                (int(rule_id), int(shift_id)),
            )
            r = fetchone(cur)
            return _to_break_rule(r) if r else None

    def list_for_shift(self, shift_id: int) -> Sequence[BreakRule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, shift_id, break_name, break_start_after_minutes, break_duration_minutes,
                       is_paid, is_mandatory, break_order, is_active
                FROM hrms_shift_break_rules
                WHERE shift_id=%s AND is_active=1
                ORDER BY break_order ASC
                """,
                (int(shift_id),),
            )
            return [_to_break_rule(r) for r in fetchall(cur)]
