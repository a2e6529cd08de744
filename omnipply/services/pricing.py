"""
Advertising campaign pricing.

Two fixed rate tables, one for featuring an organization and one for
featuring a single program. Longer presets carry a better per-day rate.
Preset durations are billed at their flat rate; ``custom`` and
``until_deadline`` ranges are billed per calendar day, inclusive of both ends.
"""
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional

from omnipply.utils.dates import DateLike, add_days, parse_datetime, to_local_date, utcnow

SECONDS_PER_DAY = 24 * 60 * 60


class DurationPreset(str, Enum):
    SEVEN_DAYS = "7d"
    FOURTEEN_DAYS = "14d"
    THIRTY_DAYS = "30d"
    UNTIL_DEADLINE = "until_deadline"
    CUSTOM = "custom"


class TargetType(str, Enum):
    ORG = "org"
    PROGRAM = "program"


@dataclass(frozen=True)
class RateTable:
    daily: int
    weekly: int
    biweekly: int
    monthly: int


ORG_PRICING = RateTable(daily=2, weekly=10, biweekly=18, monthly=35)
PROGRAM_PRICING = RateTable(daily=1, weekly=6, biweekly=11, monthly=20)

PRESET_LABELS: Dict[DurationPreset, str] = {
    DurationPreset.SEVEN_DAYS: "7 days",
    DurationPreset.FOURTEEN_DAYS: "14 days",
    DurationPreset.THIRTY_DAYS: "30 days",
    DurationPreset.UNTIL_DEADLINE: "Until deadline",
    DurationPreset.CUSTOM: "Custom",
}

_PRESET_DAYS = {
    DurationPreset.SEVEN_DAYS: 7,
    DurationPreset.FOURTEEN_DAYS: 14,
    DurationPreset.THIRTY_DAYS: 30,
}


def rates_for(target: TargetType) -> RateTable:
    return ORG_PRICING if TargetType(target) == TargetType.ORG else PROGRAM_PRICING


def preset_to_days(preset: DurationPreset) -> Optional[int]:
    """Fixed length of a preset, None for open-ended presets."""
    return _PRESET_DAYS.get(DurationPreset(preset))


def inclusive_days(start: DateLike, end: DateLike) -> int:
    """Calendar days covered by ``start..end`` counting both ends; 0 when reversed or missing."""
    start_dt = parse_datetime(start)
    end_dt = parse_datetime(end)
    if start_dt is None or end_dt is None:
        return 0
    span = (end_dt - start_dt).total_seconds() / SECONDS_PER_DAY
    return max(0, math.ceil(span) + 1)


def calculate_price(target: TargetType, preset: DurationPreset, show_from: DateLike, hide_after: DateLike) -> int:
    rates = rates_for(target)
    preset = DurationPreset(preset)

    if preset in (DurationPreset.CUSTOM, DurationPreset.UNTIL_DEADLINE):
        return rates.daily * inclusive_days(show_from, hide_after)
    if preset == DurationPreset.SEVEN_DAYS:
        return rates.weekly
    if preset == DurationPreset.FOURTEEN_DAYS:
        return rates.biweekly
    if preset == DurationPreset.THIRTY_DAYS:
        return rates.monthly
    return 0


def calculate_program_price_until_deadline(show_from: DateLike, deadline: DateLike) -> int:
    """Price one program from the start date to its own close date, at least one day."""
    start = to_local_date(show_from)
    end = to_local_date(deadline)
    if start is None or end is None:
        return 0
    days = max(1, (end - start).days + 1)
    return PROGRAM_PRICING.daily * days


def earliest_future_deadline(deadlines: Iterable[DateLike], today: Optional[date] = None) -> Optional[date]:
    """Earliest close date on or after today, ignoring missing and past ones."""
    today = today or utcnow().date()
    future = [d for d in (to_local_date(x) for x in deadlines) if d is not None and d >= today]
    return min(future) if future else None


def resolve_hide_after(
    preset: DurationPreset,
    show_from: Optional[date],
    hide_after: Optional[date] = None,
    deadlines: Iterable[DateLike] = (),
    today: Optional[date] = None,
) -> Optional[date]:
    """End date actually used for a campaign given its preset."""
    preset = DurationPreset(preset)
    if preset == DurationPreset.CUSTOM:
        return hide_after
    if preset == DurationPreset.UNTIL_DEADLINE:
        if show_from is None:
            return None
        return earliest_future_deadline(deadlines, today)
    days = preset_to_days(preset)
    if show_from is None or days is None:
        return None
    return add_days(show_from, days)


@dataclass
class ProgramQuoteLine:
    program_id: str
    price: int
    close_at: Optional[str] = None


@dataclass
class CampaignQuote:
    preset: DurationPreset
    org_price: int = 0
    program_price: int = 0
    lines: List[ProgramQuoteLine] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.org_price + self.program_price


def quote_campaign(
    preset: DurationPreset,
    show_from: DateLike,
    hide_after: DateLike,
    include_org: bool,
    programs: Iterable[dict],
) -> CampaignQuote:
    """
    Price a whole campaign.

    ``programs`` are the selected program rows (``id`` and ``close_at``).
    Under ``until_deadline`` each program is priced against its own close
    date and programs without one are free; otherwise every program pays
    the same flat program price.
    """
    preset = DurationPreset(preset)
    quote = CampaignQuote(preset=preset)

    if include_org:
        quote.org_price = calculate_price(TargetType.ORG, preset, show_from, hide_after)

    for program in programs:
        close_at = program.get("close_at")
        if preset == DurationPreset.UNTIL_DEADLINE:
            price = calculate_program_price_until_deadline(show_from, close_at) if close_at else 0
        else:
            price = calculate_price(TargetType.PROGRAM, preset, show_from, hide_after)
        quote.lines.append(ProgramQuoteLine(program_id=str(program.get("id")), price=price, close_at=close_at))
        quote.program_price += price

    return quote


def time_remaining(hide_after: DateLike, now: Optional[datetime] = None) -> Optional[str]:
    """Human label for how long an active campaign still runs."""
    end = parse_datetime(hide_after)
    if end is None:
        return None
    now = now or utcnow()
    if end <= now:
        return "Ended"

    days = math.ceil((end - now).total_seconds() / SECONDS_PER_DAY)
    if days == 1:
        return "1 day left"
    if days < 7:
        return f"{days} days left"
    weeks = days // 7
    if weeks == 1:
        return "1 week left"
    if weeks < 4:
        return f"{weeks} weeks left"
    months = max(1, days // 30)
    return "1 month left" if months == 1 else f"{months} months left"
