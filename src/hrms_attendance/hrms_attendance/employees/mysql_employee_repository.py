from __future__ import annotations

from typing import Any, Dict, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Employee
from .repository import EmployeeDirectory

_COLUMNS = """
    id, company_id, employee_code, first_name, last_name,
    timezone, biometric_device_id, shift_id, is_active
"""


def _to_employee(r: Dict[str, Any]) -> Employee:
    return Employee(
        employee_id=int(r["id"]),
        company_id=int(r["company_id"]),
        employee_code=r.get("employee_code"),
        first_name=r["first_name"],
        last_name=r.get("last_name"),
        timezone=r.get("timezone"),
        biometric_device_id=r.get("biometric_device_id"),
        shift_id=int(r["shift_id"]) if r.get("shift_id") is not None else None,
        is_active=bool(r.get("is_active", True)),
    )


class MySQLEmployeeRepository(EmployeeDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM hrms_employees WHERE id=%s", (int(employee_id),))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def find_active_employee(self, employee_id: int, company_id: int, *, for_update: bool = False) -> Optional[Employee]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM hrms_employees
                WHERE id=%s AND company_id=%s AND is_active=1{lock}
                """,
                (int(employee_id), int(company_id)),
            )
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def find_active_employee_by_biometric_device(self, device_id: str, company_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM hrms_employees
                WHERE biometric_device_id=%s AND company_id=%s AND is_active=1
                LIMIT 1
                """,
                (str(device_id), int(company_id)),
            )
            r = fetchone(cur)
            return _to_employee(r) if r else None
