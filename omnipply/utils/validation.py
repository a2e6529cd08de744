import re
from datetime import date
from typing import Optional

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
URL_PATTERN = re.compile(r"^https?://.+")
SLUG_PATTERN = re.compile(r"^[a-z0-9_-]+$")


def is_valid_email(value: Optional[str]) -> bool:
    return bool(value) and EMAIL_PATTERN.match(value) is not None


def is_valid_url(value: Optional[str]) -> bool:
    return bool(value) and URL_PATTERN.match(value) is not None


def is_valid_slug(value: Optional[str]) -> bool:
    return bool(value) and SLUG_PATTERN.match(value) is not None


def require_text(value: Optional[str], field_name: str) -> str:
    """Return the stripped value or raise ValueError naming the field."""
    text = (value or "").strip()
    if not text:
        raise ValueError(f"{field_name} is required")
    return text


def validate_campaign_dates(show_from: Optional[date], hide_after: Optional[date], require_end: bool = False) -> None:
    """Campaigns need a start; an end, when given or required, must fall after it."""
    if show_from is None:
        raise ValueError("Please choose when the campaign should start.")
    if hide_after is None:
        if require_end:
            raise ValueError("Please choose when the campaign should end.")
        return
    if hide_after <= show_from:
        raise ValueError("End date must be later than the start date.")
