from __future__ import annotations

import calendar
from datetime import date, datetime, time, timezone
from typing import Any

from ..core.exceptions import ValidationError

# Epoch values at or above this are treated as milliseconds.
_EPOCH_MS_THRESHOLD = 10**11


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_time_of_day(value: str) -> time:
    """Parse HH:MM:SS (or HH:MM) into a time."""
    v = value.strip()
    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Invalid time of day: {value!r}")


def parse_request_timestamp(value: Any) -> datetime:
    """Parse a device request timestamp into an aware UTC datetime.

    Accepts epoch milliseconds, epoch seconds (number or digit string) and
    ISO-8601 strings. Naive ISO values are read as UTC.
    """

    if isinstance(value, bool):
        raise ValidationError("Invalid timestamp")

    if isinstance(value, str):
        v = value.strip()
        if v.lstrip("-").isdigit():
            value = int(v)
        else:
            try:
                parsed = datetime.fromisoformat(v.replace("Z", "+00:00"))
            except ValueError:
                raise ValidationError("Invalid timestamp")
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed.astimezone(timezone.utc)

    if isinstance(value, (int, float)):
        seconds = value / 1000 if abs(value) >= _EPOCH_MS_THRESHOLD else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise ValidationError("Invalid timestamp")

    raise ValidationError("Invalid timestamp")


def month_bounds(month: int, year: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def now_utc() -> datetime:
    return datetime.now(timezone.utc)
