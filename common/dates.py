"""Calendar-day helpers. Every pulse is keyed by a UTC calendar date."""
from datetime import date, datetime, timezone
from typing import Optional, Union

DayLike = Union[date, datetime, str, None]


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def truncate_to_day(value: DayLike = None) -> date:
    """Drop the time of day.

    Aware datetimes are converted to UTC first, naive ones are taken as-is.
    Strings accept ``YYYY-MM-DD`` and full ISO-8601 timestamps (a trailing
    ``Z`` included). ``None`` means today in UTC.
    """
    if value is None:
        return utc_today()
    if isinstance(value, str):
        value = _parse_iso(value)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Cannot interpret {value!r} as a calendar date")


def _parse_iso(text: str) -> Union[date, datetime]:
    text = text.strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def day_bounds(day: date) -> tuple[str, str]:
    """First and last second of a UTC day as ISO-8601 strings."""
    iso = day.isoformat()
    return f"{iso}T00:00:00Z", f"{iso}T23:59:59Z"


def optional_day(value: DayLike) -> Optional[date]:
    return None if value is None else truncate_to_day(value)
