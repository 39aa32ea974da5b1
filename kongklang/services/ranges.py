"""Resolve command scopes into concrete local time ranges."""

from __future__ import annotations

from datetime import datetime, timedelta, tzinfo

from kongklang.commands.models import (
    AllTime,
    CurrentMonth,
    Day,
    Month,
    PastDays,
    Scope,
    Today,
)
from kongklang.utils.time import day_bounds, month_bounds, start_of_day

TimeRange = tuple[datetime, datetime]


def resolve_range(
    scope: Scope,
    now: datetime,
    tz: tzinfo,
    bounds: TimeRange | None = None,
) -> TimeRange | None:
    """Return the closed ``(start, end)`` range for ``scope``.

    ``now`` is the current instant. ``bounds`` is the earliest/latest
    ``recorded_at`` of the conversation and is only used for ``AllTime``;
    an all-time scope over an empty ledger resolves to None.
    """
    local_now = now.astimezone(tz)
    today = local_now.date()

    match scope:
        case Today():
            return day_bounds(today, tz)
        case Day(day=day):
            return day_bounds(day, tz)
        case Month(year=year, month=month):
            return month_bounds(year, month, tz)
        case CurrentMonth():
            return month_bounds(today.year, today.month, tz)
        case PastDays(days=days):
            return start_of_day(today - timedelta(days=days), tz), local_now
        case AllTime():
            return bounds
    raise TypeError(f"Unsupported scope: {scope!r}")


def describe_scope(scope: Scope) -> str:
    """Short Thai label used in reply headers."""
    match scope:
        case Today():
            return "วันนี้"
        case Day(day=day):
            return day.isoformat()
        case Month(year=year, month=month):
            return f"เดือน {year:04d}-{month:02d}"
        case CurrentMonth():
            return "เดือนนี้"
        case PastDays(days=days):
            return f"ย้อนหลัง {days} วัน"
        case AllTime():
            return "ทั้งหมด"
    raise TypeError(f"Unsupported scope: {scope!r}")
