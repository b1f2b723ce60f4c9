from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence, Tuple

from .model import Punch


class PunchRepository(Protocol):
    """Punch ledger: append, link, flag. Never rewrites ``punch_datetime``.

    Datetime arguments are expressed in the employee's zone; range filters
    compare wall-clock values.
    """

    def create(self, punch: Punch) -> int:
        raise NotImplementedError

    def exists_valid_within(self, *, employee_id: int, start: datetime, end: datetime) -> bool:
        raise NotImplementedError

    def link_to_daily_attendance(self, *, punch_ids: Sequence[int], daily_attendance_id: int) -> int:
        raise NotImplementedError

    def update_flags(self, *, punch_id: int, is_late: bool, is_early_out: bool) -> bool:
        raise NotImplementedError

    def list_unlinked_biometric(
        self,
        *,
        start: datetime,
        end: datetime,
        company_id: Optional[int] = None,
        employee_id: Optional[int] = None,
    ) -> Sequence[Punch]:
        """Valid biometric punches with no daily attendance yet, by employee then time."""

        raise NotImplementedError

    def list_for_daily_attendance(self, *, daily_attendance_id: int) -> Sequence[Punch]:
        raise NotImplementedError

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
        """Total count and one page of valid punches, newest first."""

        raise NotImplementedError
