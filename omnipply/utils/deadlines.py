import math
from datetime import datetime
from typing import Optional

from omnipply.utils.dates import DateLike, format_date_display, parse_datetime, utcnow

SECONDS_PER_DAY = 24 * 60 * 60


def is_past_deadline(deadline: DateLike, now: Optional[datetime] = None) -> bool:
    close = parse_datetime(deadline)
    if close is None:
        return False
    return (now or utcnow()) > close


def is_before_open_date(open_date: DateLike, now: Optional[datetime] = None) -> bool:
    opens = parse_datetime(open_date)
    if opens is None:
        return False
    return (now or utcnow()) < opens


def is_application_open(open_date: DateLike, close_date: DateLike, now: Optional[datetime] = None) -> bool:
    """
    True when ``now`` falls inside the application window.

    A missing open date means the program has always been open; a missing
    close date means it never closes.
    """
    now = now or utcnow()
    opens = parse_datetime(open_date)
    close = parse_datetime(close_date)

    if opens is None:
        return not is_past_deadline(close_date, now)
    if close is None:
        return now >= opens
    return opens <= now <= close


def _days_until(target: datetime, now: datetime) -> int:
    return math.ceil((target - now).total_seconds() / SECONDS_PER_DAY)


def deadline_message(deadline: DateLike, now: Optional[datetime] = None) -> str:
    close = parse_datetime(deadline)
    if close is None:
        return "No deadline set"

    now = now or utcnow()
    if close < now:
        return "Deadline passed"
    days = _days_until(close, now)
    if days == 1:
        return "Deadline tomorrow"
    if days <= 7:
        return f"Deadline in {days} days"
    return f"Deadline: {format_date_display(close)}"


def open_date_message(open_date: DateLike, now: Optional[datetime] = None) -> str:
    opens = parse_datetime(open_date)
    if opens is None:
        return "No open date set"

    now = now or utcnow()
    if opens < now:
        return "Application is open"
    days = _days_until(opens, now)
    if days == 1:
        return "Opens tomorrow"
    if days <= 7:
        return f"Opens in {days} days"
    return f"Opens: {format_date_display(opens)}"
