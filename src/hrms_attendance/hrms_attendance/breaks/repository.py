from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence, Tuple

from .model import BreakLog


class BreakLogRepository(Protocol):
    def get_ongoing(self, *, employee_id: int, company_id: int, break_date: date) -> Optional[BreakLog]:
        raise NotImplementedError

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
        """Insert an ``ongoing`` break."""

        raise NotImplementedError

    def close(self, *, break_id: int, break_end_time: datetime, break_duration_minutes: int) -> bool:
        """Set the end time and mark the break ``completed``."""

        raise NotImplementedError

    def list_for_date(self, *, employee_id: int, company_id: int, break_date: date) -> Sequence[BreakLog]:
        raise NotImplementedError

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
        """Total count and one page of breaks, newest first."""

        raise NotImplementedError
