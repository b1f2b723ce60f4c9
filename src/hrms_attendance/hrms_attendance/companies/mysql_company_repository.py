from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .repository import CompanySettings


class MySQLCompanySettings(CompanySettings):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def is_biometric_utc_enabled(self, company_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT biometric_utc_enabled FROM hrms_companies WHERE id=%s", (int(company_id),))
            r = fetchone(cur)
            return bool(r and r.get("biometric_utc_enabled"))
