from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Union

DateLike = Union[str, date, datetime, None]


def parse_datetime(value: DateLike) -> Optional[datetime]:
    """
    Parse an ISO-8601 string, date or datetime into an aware UTC datetime.

    Naive values are treated as UTC, bare dates as midnight UTC. Empty or
    unparseable input returns None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time.min)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_local_date(value: DateLike) -> Optional[date]:
    """Calendar date of a value; bare date strings keep their literal day."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if isinstance(value, str) and len(value.strip()) == 10:
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            return None
    dt = parse_datetime(value)
    return dt.date() if dt else None


def format_date_display(value: DateLike) -> str:
    """MM/DD/YYYY, or an empty string when the value is not a date."""
    d = to_local_date(value)
    return d.strftime("%m/%d/%Y") if d else ""


def to_iso_midnight(value: DateLike) -> Optional[str]:
    d = to_local_date(value)
    if d is None:
        return None
    return f"{d.isoformat()}T00:00:00.000Z"


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
