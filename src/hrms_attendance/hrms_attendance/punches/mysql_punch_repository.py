from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, Optional, Sequence, Tuple

from ..common.timezone_utils import localize, to_wall_clock
from ..core.enums import PunchSource
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Punch
from .repository import PunchRepository

_COLUMNS = """
    id, employee_id, company_id, punch_datetime, punch_source, is_utc_converted, original_utc_datetime,
    biometric_device_id, biometric_device_name, device_id, device_name, device_info,
    latitude, longitude, location_accuracy, location_address, ip_address, user_agent,
    timezone, utc_offset, photo_url, photo_verified, is_valid, is_outside_geofence,
    is_manual_entry, is_duplicate, is_late, is_early_out, daily_attendance_id, remarks, created_by
"""


def _wall(value: Optional[datetime]) -> Optional[datetime]:
    # Instants arrive already expressed in the employee's zone.
    return value.replace(tzinfo=None) if value is not None else None


def _float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


def _to_punch(r: Dict[str, Any]) -> Punch:
    tz = r["timezone"]
    device_info = r.get("device_info")
    if isinstance(device_info, (str, bytes)):
        device_info = json.loads(device_info)
    return Punch(
        punch_id=int(r["id"]),
        employee_id=int(r["employee_id"]),
        company_id=int(r["company_id"]),
        punch_datetime=localize(r["punch_datetime"], tz),
        punch_source=PunchSource(r["punch_source"]),
        timezone=tz,
        utc_offset=r.get("utc_offset"),
        is_utc_converted=bool(r.get("is_utc_converted")),
        original_utc_datetime=localize(r.get("original_utc_datetime"), "UTC"),
        biometric_device_id=r.get("biometric_device_id"),
        biometric_device_name=r.get("biometric_device_name"),
        device_id=r.get("device_id"),
        device_name=r.get("device_name"),
        device_info=device_info,
        latitude=_float(r.get("latitude")),
        longitude=_float(r.get("longitude")),
        location_accuracy=_float(r.get("location_accuracy")),
        location_address=r.get("location_address"),
        ip_address=r.get("ip_address"),
        user_agent=r.get("user_agent"),
        photo_url=r.get("photo_url"),
        photo_verified=bool(r.get("photo_verified")),
        is_valid=bool(r.get("is_valid")),
        is_outside_geofence=bool(r.get("is_outside_geofence")),
        is_manual_entry=bool(r.get("is_manual_entry")),
        is_duplicate=bool(r.get("is_duplicate")),
        is_late=bool(r.get("is_late")),
        is_early_out=bool(r.get("is_early_out")),
        daily_attendance_id=int(r["daily_attendance_id"]) if r.get("daily_attendance_id") is not None else None,
        remarks=r.get("remarks"),
        created_by=r.get("created_by"),
    )


class MySQLPunchRepository(PunchRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, punch: Punch) -> int:
        original_utc = to_wall_clock(punch.original_utc_datetime, "UTC")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO hrms_punch_log(
                    employee_id, company_id, punch_datetime, punch_source, is_utc_converted, original_utc_datetime,
                    biometric_device_id, biometric_device_name, device_id, device_name, device_info,
                    latitude, longitude, location_accuracy, location_address, ip_address, user_agent,
                    timezone, utc_offset, photo_url, photo_verified, is_valid, is_outside_geofence,
                    is_manual_entry, is_duplicate, is_late, is_early_out, daily_attendance_id, remarks, created_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    punch.employee_id,
                    punch.company_id,
                    _wall(punch.punch_datetime),
                    punch.punch_source.value,
                    punch.is_utc_converted,
                    original_utc,
                    punch.biometric_device_id,
                    punch.biometric_device_name,
                    punch.device_id,
                    punch.device_name,
                    json.dumps(punch.device_info) if punch.device_info is not None else None,
                    punch.latitude,
                    punch.longitude,
                    punch.location_accuracy,
                    punch.location_address,
                    punch.ip_address,
                    punch.user_agent,
                    punch.timezone,
                    punch.utc_offset,
                    punch.photo_url,
                    punch.photo_verified,
                    punch.is_valid,
                    punch.is_outside_geofence,
                    punch.is_manual_entry,
                    punch.is_duplicate,
                    punch.is_late,
                    punch.is_early_out,
                    punch.daily_attendance_id,
                    punch.remarks,
                    punch.created_by,
                ),
            )
            return int(cur.lastrowid)

    def exists_valid_within(self, *, employee_id: int, start: datetime, end: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id
                FROM hrms_punch_log
                WHERE employee_id=%s AND is_valid=1 AND punch_datetime BETWEEN %s AND %s
                LIMIT 1
                """,
                (int(employee_id), _wall(start), _wall(end)),
            )
            return fetchone(cur) is not None

    def link_to_daily_attendance(self, *, punch_ids: Sequence[int], daily_attendance_id: int) -> int:
        if not punch_ids:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE hrms_punch_log SET daily_attendance_id=%s WHERE id IN ({in_clause(punch_ids)})",
                (int(daily_attendance_id), *[int(i) for i in punch_ids]),
            )
            return cur.rowcount

    def update_flags(self, *, punch_id: int, is_late: bool, is_early_out: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE hrms_punch_log SET is_late=%s, is_early_out=%s WHERE id=%s",
                (bool(is_late), bool(is_early_out), int(punch_id)),
            )
            return cur.rowcount > 0

    def list_unlinked_biometric(
        self,
        *,
        start: datetime,
        end: datetime,
        company_id: Optional[int] = None,
        employee_id: Optional[int] = None,
    ) -> Sequence[Punch]:
        clauses = [
            "punch_source=%s",
            "is_valid=1",
            "daily_attendance_id IS NULL",
            "punch_datetime BETWEEN %s AND %s",
        ]
        params: list[object] = [PunchSource.BIOMETRIC.value, _wall(start), _wall(end)]

        if company_id is not None:
            clauses.append("company_id=%s")
            params.append(int(company_id))
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM hrms_punch_log
                WHERE {where}
                ORDER BY employee_id ASC, punch_datetime ASC
                FOR UPDATE
                """,
                tuple(params),
            )
            return [_to_punch(r) for r in fetchall(cur)]

    def list_for_daily_attendance(self, *, daily_attendance_id: int) -> Sequence[Punch]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM hrms_punch_log
                WHERE daily_attendance_id=%s AND is_valid=1
                ORDER BY punch_datetime ASC
                """,
                (int(daily_attendance_id),),
            )
            return [_to_punch(r) for r in fetchall(cur)]

    def list_history(
        self,
        *,
        employee_id: int,
        company_id: int,
        start: datetime,
        end: datetime,
        limit: int,
        offset: int,
    ) -> Tuple[int, Sequence[Punch]]:
        where = "employee_id=%s AND company_id=%s AND is_valid=1 AND punch_datetime BETWEEN %s AND %s"
        params = (int(employee_id), int(company_id), _wall(start), _wall(end))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM hrms_punch_log WHERE {where}", params)
            total = int((fetchone(cur) or {}).get("total") or 0)

            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM hrms_punch_log
                WHERE {where}
                ORDER BY punch_datetime DESC
                LIMIT %s OFFSET %s
                """,
                (*params, int(limit), int(offset)),
            )
            return total, [_to_punch(r) for r in fetchall(cur)]
