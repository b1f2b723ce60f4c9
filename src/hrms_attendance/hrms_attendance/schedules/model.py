from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Schedule:
    """Roster assignment of a shift to an employee for one date."""

    schedule_id: int
    employee_id: int
    work_date: date
    shift_id: int
    note: Optional[str] = None
