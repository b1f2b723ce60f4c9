from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_optional_date(value: Optional[str], field_name: str = "date") -> Optional[date]:
    value = (value or "").strip()
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be a YYYY-MM-DD date")


def parse_iso_datetime(value, field_name: str = "datetime") -> datetime:
    """Accept a datetime or an ISO-8601 string (``Z`` suffix allowed)."""
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO-8601 datetime")


def day_bounds(start: date, end: date) -> tuple[datetime, datetime]:
    """Wall-clock bounds covering ``start`` 00:00 through the end of ``end``."""
    return datetime.combine(start, time.min), datetime.combine(end, time.max)


def default_range(today: date, *, days: int) -> tuple[date, date]:
    return today - timedelta(days=days), today
