from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.timezone_utils import to_employee_timezone
from ..core.enums import PunchDirection
from ..shifts.model import Shift
from .factory import TimingStrategyFactory
from .strategies.base import TimingDecision

_default_factory = TimingStrategyFactory()


def validate_punch_timing(
    punch_datetime: datetime,
    direction: PunchDirection,
    shift: Shift,
    timezone: str,
    *,
    factory: Optional[TimingStrategyFactory] = None,
) -> TimingDecision:
    """Judge one punch against its shift in the employee's wall-clock time."""
    local = to_employee_timezone(punch_datetime, timezone)
    strategy = (factory or _default_factory).for_direction(direction)
    return strategy.decide(local_punch=local, shift=shift)
