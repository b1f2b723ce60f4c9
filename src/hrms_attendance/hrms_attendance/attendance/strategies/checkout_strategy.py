from __future__ import annotations

from datetime import datetime

from ...common.time_of_day import TimeOfDay
from ...shifts.model import Shift
from .base import PunchTimingStrategy, TimingDecision


class CheckOutStrategy(PunchTimingStrategy):
    """Check-out is never refused, only flagged when early."""

    def decide(self, *, local_punch: datetime, shift: Shift) -> TimingDecision:
        window = shift.window
        moment = TimeOfDay.from_datetime(local_punch)
        grace = int(shift.grace_time_early_minutes)
        leave_from = window.end.minus_minutes(grace)

        if window.is_overnight or leave_from > window.end:
            offset = window.offset_from_start(moment)
            early = offset < window.length_seconds - grace * 60
        else:
            early = moment < leave_from

        if early:
            return TimingDecision(is_early=True, reason="Early clock-out")
        return TimingDecision()
