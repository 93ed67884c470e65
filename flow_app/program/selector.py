"""Pick today's session variant from a week's free-text variant labels."""
from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from .models import WeekDefinition

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

MWF_TOKENS = ("Mon", "Wed", "Fri", "M/W/F", "MWF")
TTH_TOKENS = ("Tue", "Thu", "T/Th", "TTh")
SATURDAY_TOKENS = ("Sat", "Saturday")

# Weekday index (Monday == 0) to the token set matching that day.
_DAY_TOKENS = {
    0: MWF_TOKENS,
    2: MWF_TOKENS,
    4: MWF_TOKENS,
    1: TTH_TOKENS,
    3: TTH_TOKENS,
    5: SATURDAY_TOKENS,
}


def weekday_name(day: date) -> str:
    return WEEKDAY_NAMES[day.weekday()]


def _first_match(keys: Iterable[str], tokens: Sequence[str]) -> Optional[str]:
    for key in keys:
        if any(token in key for token in tokens):
            return key
    return None


def select_variant(week: WeekDefinition, day: date) -> str:
    """Return the variant key for ``day``.

    Variant labels are matched by substring against the day's token set in
    declared order; Sunday, or a day with no matching label, falls back to
    the first declared variant.
    """
    keys = week.variant_keys
    tokens = _DAY_TOKENS.get(day.weekday())
    if tokens:
        match = _first_match(keys, tokens)
        if match is not None:
            return match
    return keys[0]


def is_rest_day(day: date) -> bool:
    return day.weekday() == 6


def time_of_day(moment: datetime) -> str:
    if moment.hour < 12:
        return "morning"
    if moment.hour < 17:
        return "afternoon"
    return "evening"


def time_based_message(period: str) -> str:
    if period == "morning":
        return "Perfect timing! Morning sessions provide the best dopamine boost for your day ahead."
    if period == "afternoon":
        return "Great time for a focus reset! This session will help you power through the rest of your day."
    return "Wind down with intention. Evening sessions help prepare your mind for restful sleep."
