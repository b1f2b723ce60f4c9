from __future__ import annotations

from datetime import datetime

from ...common.time_of_day import TimeOfDay
from ...shifts.model import Shift
from .base import PunchTimingStrategy, TimingDecision


class CheckInStrategy(PunchTimingStrategy):
    """Too-early check-ins are refused; past the grace period they are late.

    Plain time-of-day comparisons apply unless the shift or its check-in
    window (earliest allowed .. late threshold) crosses midnight; only then
    is the punch placed on the circular shift clock.
    """

    def decide(self, *, local_punch: datetime, shift: Shift) -> TimingDecision:
        window = shift.window
        moment = TimeOfDay.from_datetime(local_punch)
        before = int(shift.checkin_allowed_before_minutes)
        grace = int(shift.grace_time_late_minutes)
        earliest = window.start.minus_minutes(before)
        late_after = window.start.plus_minutes(grace)

        if window.is_overnight or earliest > window.start or late_after < window.start:
            offset = window.offset_from_start(moment)
            too_early = offset < -before * 60
            late = offset > grace * 60
        else:
            too_early = moment < earliest
            late = moment > late_after

        if too_early:
            return TimingDecision(
                allowed=False,
                reason=(
                    f"Clock-in not allowed before {earliest}. "
                    f"You can clock in {before} minutes before shift start."
                ),
            )
        if late:
            return TimingDecision(is_late=True, reason="Late clock-in")
        return TimingDecision()
