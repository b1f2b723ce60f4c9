from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from ..core.constants import DUPLICATE_PUNCH_WINDOW_MINUTES
from .repository import PunchRepository


class DuplicateDetector:
    """Near-duplicate gate: any valid punch within +/- the window counts."""

    def __init__(self, punches: PunchRepository, *, window_minutes: int = DUPLICATE_PUNCH_WINDOW_MINUTES):
        self._punches = punches
        self.window_minutes = int(window_minutes)

    def is_duplicate(self, employee_id: int, instant: datetime, window_minutes: Optional[int] = None) -> bool:
        window = timedelta(minutes=self.window_minutes if window_minutes is None else int(window_minutes))
        return self._punches.exists_valid_within(
            employee_id=employee_id,
            start=instant - window,
            end=instant + window,
        )
