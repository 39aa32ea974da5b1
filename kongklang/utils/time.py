"""Time utility helpers."""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo


@lru_cache(maxsize=8)
def get_zone(name: str) -> ZoneInfo:
    """Return a cached ``ZoneInfo`` for an IANA zone name."""
    return ZoneInfo(name)


def now_utc() -> datetime:
    """Return current timezone-aware UTC datetime."""
    return datetime.now(tz=UTC)


def parse_iso_date(value: str | None, default: date | None = None) -> date:
    """Parse an ISO date string with an optional fallback default."""
    if not value:
        if default is None:
            raise ValueError("Missing required date value")
        return default
    return date.fromisoformat(value)


def parse_year_month(value: str) -> tuple[int, int]:
    """Parse ``YYYY-MM`` into a ``(year, month)`` pair."""
    year_text, _, month_text = value.partition("-")
    if len(year_text) != 4 or len(month_text) != 2:
        raise ValueError(f"Invalid year-month value: {value!r}")
    year, month = int(year_text), int(month_text)
    if not 1 <= month <= 12:
        raise ValueError(f"Month out of range: {value!r}")
    return year, month


def start_of_day(day: date, tz: tzinfo) -> datetime:
    """Return local midnight for ``day``."""
    return datetime.combine(day, time.min, tzinfo=tz)


def end_of_day(day: date, tz: tzinfo) -> datetime:
    """Return the last representable local instant of ``day`` (23:59:59.999999)."""
    return datetime.combine(day, time.max, tzinfo=tz)


def day_bounds(day: date, tz: tzinfo) -> tuple[datetime, datetime]:
    """Return the closed local range covering one calendar day."""
    return start_of_day(day, tz), end_of_day(day, tz)


def last_day_of_month(year: int, month: int) -> date:
    """Return the final calendar day of a month.

    Computed as "day 0 of the next month": step to the first of the following
    month (rolling December into January of the next year) and go back one day.
    """
    next_year, next_month = (year + 1, 1) if month == 12 else (year, month + 1)
    return date(next_year, next_month, 1) - timedelta(days=1)


def month_bounds(year: int, month: int, tz: tzinfo) -> tuple[datetime, datetime]:
    """Return the closed local range covering one calendar month."""
    first = date(year, month, 1)
    return start_of_day(first, tz), end_of_day(last_day_of_month(year, month), tz)


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse a PostgREST timestamp (or pass a datetime through) as aware UTC-safe value."""
    if isinstance(value, str):
        normalized = value.replace("Z", "+00:00")
        parsed = datetime.fromisoformat(normalized)
    else:
        parsed = value

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_local(value: datetime, tz: tzinfo) -> str:
    """Format an instant as ``YYYY-MM-DD HH:MM`` in local time."""
    return value.astimezone(tz).strftime("%Y-%m-%d %H:%M")
