from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional

from ..common.time_of_day import ShiftWindow
from ..core.constants import DEFAULT_CHECKIN_ALLOWED_BEFORE_MINUTES
from ..core.enums import ShiftSource


@dataclass(frozen=True)
class Shift:
    """Domain entity: Shift configuration (read-only for the punch core)."""

    shift_id: int
    shift_name: str
    start_time: time
    end_time: time
    checkin_allowed_before_minutes: int = DEFAULT_CHECKIN_ALLOWED_BEFORE_MINUTES
    grace_time_late_minutes: int = 0
    grace_time_early_minutes: int = 0

    @property
    def window(self) -> ShiftWindow:
        return ShiftWindow.of(self.start_time, self.end_time)


@dataclass(frozen=True)
class ResolvedShift:
    """Effective shift of one employee on one date, and where it came from."""

    shift: Shift
    source: ShiftSource


@dataclass(frozen=True)
class BreakRule:
    """A configured break of a shift (lunch, tea, ...)."""

    break_rule_id: int
    shift_id: int
    break_name: str
    break_start_after_minutes: Optional[int] = None
    break_duration_minutes: Optional[int] = None
    is_paid: bool = False
    is_mandatory: bool = False
    break_order: int = 0
    is_active: bool = True
