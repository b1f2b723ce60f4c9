from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Union

SECONDS_PER_DAY = 24 * 60 * 60

TimeLike = Union["TimeOfDay", time, timedelta, str]


@dataclass(frozen=True, order=True)
class TimeOfDay:
    """Wall-clock time of day with modulo-24h arithmetic.

    Shift boundaries can cross midnight (22:00-06:00), so every comparison
    that involves a shift goes through this type instead of comparing
    ``HH:MM:SS`` strings.
    """

    seconds: int

    def __post_init__(self) -> None:
        if not 0 <= self.seconds < SECONDS_PER_DAY:
            raise ValueError(f"Time of day out of range: {self.seconds}s")

    @classmethod
    def of(cls, hour: int, minute: int = 0, second: int = 0) -> "TimeOfDay":
        return cls(hour * 3600 + minute * 60 + second)

    @classmethod
    def parse(cls, value: str) -> "TimeOfDay":
        """Parse ``HH:MM`` or ``HH:MM:SS``."""
        parts = value.strip().split(":")
        if len(parts) not in (2, 3):
            raise ValueError(f"Invalid time string: {value!r}")
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2]) if len(parts) == 3 and parts[2] else 0
        if not (0 <= hours < 24 and 0 <= minutes < 60 and 0 <= seconds < 60):
            raise ValueError(f"Invalid time string: {value!r}")
        return cls.of(hours, minutes, seconds)

    @classmethod
    def from_time(cls, value: time) -> "TimeOfDay":
        return cls.of(value.hour, value.minute, value.second)

    @classmethod
    def from_datetime(cls, value: datetime) -> "TimeOfDay":
        return cls.of(value.hour, value.minute, value.second)

    @classmethod
    def coerce(cls, value: TimeLike) -> "TimeOfDay":
        if isinstance(value, TimeOfDay):
            return value
        if isinstance(value, time):
            return cls.from_time(value)
        if isinstance(value, timedelta):
            return cls(int(value.total_seconds()) % SECONDS_PER_DAY)
        if isinstance(value, str):
            return cls.parse(value)
        raise TypeError(f"Unsupported time of day value: {type(value)!r}")

    def plus_minutes(self, minutes: int) -> "TimeOfDay":
        return TimeOfDay((self.seconds + int(minutes) * 60) % SECONDS_PER_DAY)

    def minus_minutes(self, minutes: int) -> "TimeOfDay":
        return self.plus_minutes(-int(minutes))

    def seconds_until(self, other: "TimeOfDay") -> int:
        """Forward distance on the clock, in [0, 24h)."""
        return (other.seconds - self.seconds) % SECONDS_PER_DAY

    def is_within(self, start: "TimeOfDay", end: "TimeOfDay") -> bool:
        """Inclusive range check; ``end < start`` wraps past midnight."""
        if end < start:
            return self >= start or self <= end
        return start <= self <= end

    def to_time(self) -> time:
        return time(self.seconds // 3600, (self.seconds % 3600) // 60, self.seconds % 60)

    def __str__(self) -> str:
        return self.to_time().strftime("%H:%M:%S")


@dataclass(frozen=True)
class ShiftWindow:
    """A shift's start/end placed on a circular 24h clock."""

    start: TimeOfDay
    end: TimeOfDay

    @classmethod
    def of(cls, start: TimeLike, end: TimeLike) -> "ShiftWindow":
        return cls(TimeOfDay.coerce(start), TimeOfDay.coerce(end))

    @property
    def length_seconds(self) -> int:
        return self.start.seconds_until(self.end)

    @property
    def gap_seconds(self) -> int:
        return SECONDS_PER_DAY - self.length_seconds

    @property
    def is_overnight(self) -> bool:
        return self.end < self.start

    def offset_from_start(self, moment: TimeOfDay) -> int:
        """Signed seconds between shift start and ``moment``.

        Negative means before the start. The split point sits in the middle of
        the off-duty gap, so the result lies in ``(-gap/2, length + gap/2]``.
        """
        forward = self.start.seconds_until(moment)
        if forward <= self.length_seconds + self.gap_seconds / 2:
            return forward
        return forward - SECONDS_PER_DAY

    def contains(self, moment: TimeOfDay) -> bool:
        return moment.is_within(self.start, self.end)
