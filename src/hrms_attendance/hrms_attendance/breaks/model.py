from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from ..core.enums import BreakAction, BreakStatus


@dataclass(frozen=True)
class BreakLog:
    """Domain entity: one break interval of an employee-day."""

    break_id: int
    employee_id: int
    company_id: int
    break_date: date
    break_start_time: datetime
    timezone: str
    status: BreakStatus = BreakStatus.ONGOING
    shift_break_rule_id: Optional[int] = None
    break_end_time: Optional[datetime] = None
    break_duration_minutes: Optional[int] = None
    remarks: Optional[str] = None
    created_by: Optional[int] = None

    @property
    def is_ongoing(self) -> bool:
        return self.status == BreakStatus.ONGOING


@dataclass(frozen=True)
class BreakResult:
    action: BreakAction
    message: str
    break_id: int
    break_start_time: Optional[str]
    status: BreakStatus
    break_name: Optional[str] = None
    break_end_time: Optional[str] = None
    break_duration_minutes: Optional[int] = None


@dataclass(frozen=True)
class BreakStatusView:
    is_on_break: bool
    ongoing_break: Optional[Dict[str, Any]]
    today_breaks: List[Dict[str, Any]]
    total_break_minutes: int
    available_breaks: List[Dict[str, Any]]


@dataclass(frozen=True)
class BreakHistory:
    total: int
    records: List[Dict[str, Any]] = field(default_factory=list)
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    limit: int = 0
    offset: int = 0
