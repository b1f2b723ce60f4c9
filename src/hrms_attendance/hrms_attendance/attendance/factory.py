from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import PunchDirection
from .strategies.base import PunchTimingStrategy
from .strategies.checkin_strategy import CheckInStrategy
from .strategies.checkout_strategy import CheckOutStrategy


@dataclass
class TimingStrategyFactory:
    """Factory Pattern: choose the timing strategy for a punch direction."""

    def for_direction(self, direction: PunchDirection) -> PunchTimingStrategy:
        if PunchDirection(direction) == PunchDirection.IN:
            return CheckInStrategy()
        return CheckOutStrategy()
