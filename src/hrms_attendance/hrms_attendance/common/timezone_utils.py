"""Timezone helpers shared by punches, attendance and breaks.

Conversions and ``is_within_time_of_day`` raise ``InvalidTimezone``; the
display helpers (``utc_offset``, ``format_datetime``) return ``None`` instead
because they only feed audit and response fields.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

import pytz
from pytz.exceptions import UnknownTimeZoneError

from ..core.constants import DEFAULT_DATETIME_FORMAT
from ..core.exceptions import InvalidTimezone
from .time_of_day import TimeLike, TimeOfDay


def get_zone(tz: str):
    if not tz:
        raise InvalidTimezone("Employee timezone is required")
    try:
        return pytz.timezone(tz)
    except UnknownTimeZoneError:
        raise InvalidTimezone(f"Invalid timezone: {tz}")


def is_valid_timezone(tz: str) -> bool:
    try:
        get_zone(tz)
    except InvalidTimezone:
        return False
    return True


def to_employee_timezone(utc_instant: datetime, tz: str) -> datetime:
    """Re-express an instant in ``tz``. Naive input is read as UTC."""
    zone = get_zone(tz)
    if utc_instant.tzinfo is None:
        utc_instant = pytz.utc.localize(utc_instant)
    return utc_instant.astimezone(zone)


def now_in_timezone(tz: str, *, now: Optional[datetime] = None) -> datetime:
    return to_employee_timezone(now or datetime.now(pytz.utc), tz)


def utc_offset(tz: str, *, at: Optional[datetime] = None) -> Optional[str]:
    """Offset like ``+05:30``; ``None`` when ``tz`` is not a known zone."""
    try:
        local = now_in_timezone(tz, now=at)
    except InvalidTimezone:
        return None
    raw = local.strftime("%z")
    return f"{raw[:3]}:{raw[3:]}"


def format_datetime(instant: Optional[datetime], tz: str, pattern: str = DEFAULT_DATETIME_FORMAT) -> Optional[str]:
    if instant is None:
        return None
    try:
        return to_employee_timezone(instant, tz).strftime(pattern)
    except InvalidTimezone:
        return None


def minutes_between(a: datetime, b: datetime) -> int:
    """Signed whole minutes ``b - a``, truncated toward zero."""
    return int((b - a).total_seconds() / 60)


def is_within_time_of_day(instant: datetime, start: TimeLike, end: TimeLike, tz: str) -> bool:
    local = to_employee_timezone(instant, tz)
    return TimeOfDay.from_datetime(local).is_within(TimeOfDay.coerce(start), TimeOfDay.coerce(end))


def local_date(instant: datetime, tz: str) -> date:
    return to_employee_timezone(instant, tz).date()


def localize(value: Optional[datetime], tz: str) -> Optional[datetime]:
    """Attach ``tz`` to a wall-clock value read back from the database."""
    if value is None:
        return None
    if value.tzinfo is not None:
        return to_employee_timezone(value, tz)
    return get_zone(tz).localize(value)


def to_wall_clock(value: Optional[datetime], tz: str) -> Optional[datetime]:
    """Naive wall-clock value in ``tz``, the form stored in DATETIME columns."""
    if value is None:
        return None
    return to_employee_timezone(value, tz).replace(tzinfo=None)
