from __future__ import annotations

from enum import Enum


class PunchSource(str, Enum):
    """Where a punch came from."""

    WEB = "web"
    MOBILE = "mobile"
    BIOMETRIC = "biometric"
    ADMIN = "admin"


class PunchDirection(str, Enum):
    """IN/OUT transition inferred for a punch (never stored on the punch row)."""

    IN = "in"
    OUT = "out"


class AttendanceStatus(str, Enum):
    """Status stored on the daily attendance row."""

    PRESENT = "present"
    ABSENT = "absent"
    HALF_DAY = "half_day"


class PunchTimingStatus(str, Enum):
    ON_TIME = "on_time"
    LATE = "late"
    EARLY_OUT = "early_out"


class BreakStatus(str, Enum):
    ONGOING = "ongoing"
    COMPLETED = "completed"


class BreakAction(str, Enum):
    START = "start"
    END = "end"


class ShiftSource(str, Enum):
    """Which assignment produced the shift of a day."""

    ROSTER = "roster"
    DEFAULT = "default"
