"""
Regional wall-clock helpers.

Departure times are stored as naive timestamps in the region's local time.
The region uses a fixed UTC offset (no DST), so conversion is a plain shift.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from tareeqi.config import settings


def regional_offset(hours: int | None = None) -> timedelta:
    return timedelta(
        hours=settings.regional_utc_offset_hours if hours is None else hours
    )


def regional_now() -> datetime:
    """Current local wall time as a naive datetime."""
    return (datetime.now(timezone.utc) + regional_offset()).replace(tzinfo=None)


def to_regional(value: datetime) -> datetime:
    """Naive values are already local; aware values are shifted from UTC."""
    if value.tzinfo is None:
        return value
    return (value.astimezone(timezone.utc) + regional_offset()).replace(
        tzinfo=None
    )


def parse_timestamp(value: str) -> datetime:
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)
