"""Forecast day selection and date helpers.

The provider returns roughly forty three-hour steps covering five days. The
viewer shows one row per calendar day: the first step seen for that day, in
the order the provider sent them. Calendar days are evaluated in a fixed time
zone (UTC unless configured otherwise), so which steps count as "the same
day" near midnight does not depend on the machine running the viewer.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import UTC, date, datetime, tzinfo

from .exceptions import InvalidDateError
from .weather.models import ForecastEntry

FORECAST_DAYS = 5


def calendar_date(entry: ForecastEntry, tz: tzinfo = UTC) -> date:
    """Return the date portion of the entry timestamp in ``tz``."""
    timestamp = entry.timestamp
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    return timestamp.astimezone(tz).date()


def normalize_forecast(
    entries: Iterable[ForecastEntry],
    *,
    max_days: int = FORECAST_DAYS,
    tz: tzinfo = UTC,
) -> list[ForecastEntry]:
    """Keep the first entry per calendar date, in scan order, capped at ``max_days``."""
    if max_days <= 0:
        return []

    seen: set[date] = set()
    days: list[ForecastEntry] = []
    for entry in entries:
        day = calendar_date(entry, tz)
        if day in seen:
            continue
        seen.add(day)
        days.append(entry)
        if len(days) == max_days:
            break
    return days


def date_to_unix_seconds(selected_date: str) -> int:
    """Convert an ISO date or date-time to whole Unix seconds.

    A bare date means midnight UTC; a date-time without an offset is read as
    UTC as well.
    """
    candidate = selected_date.strip()
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise InvalidDateError(f"Invalid date: {selected_date}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return math.floor(parsed.timestamp())
