from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from ...shifts.model import Shift


@dataclass(frozen=True)
class TimingDecision:
    allowed: bool = True
    is_late: bool = False
    is_early: bool = False
    reason: str = ""


class PunchTimingStrategy(ABC):
    """Strategy Pattern: how one punch direction is judged against a shift.

    ``local_punch`` must already be expressed in the employee's zone.
    """

    @abstractmethod
    def decide(self, *, local_punch: datetime, shift: Shift) -> TimingDecision:
        raise NotImplementedError
