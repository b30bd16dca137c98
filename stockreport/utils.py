from datetime import date, datetime, timedelta, timezone
from typing import Any


def utc_now() -> datetime:
    """Returns the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def iso_now() -> str:
    """Returns the current UTC time as an ISO-8601 string, e.g. for history dates."""
    return utc_now().isoformat()


def parse_timestamp(value: Any) -> datetime | None:
    """
    Converts a stored timestamp into an aware datetime.
    Accepts datetimes and ISO strings; naive values are read as UTC.
    Anything unreadable (missing, malformed) comes back as None.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            # 'Z' suffix is what JavaScript clients write
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def cutoff_from_days(days: int, now: datetime | None = None) -> datetime:
    """Returns the instant that lies `days` days before `now`."""
    return (now or utc_now()) - timedelta(days=days)


def same_day(value: Any, day: date) -> bool:
    """True when the stored timestamp falls on the given calendar day (UTC)."""
    parsed = parse_timestamp(value)
    return parsed is not None and parsed.date() == day
