"""Data models for the Focus & Flow program."""
from __future__ import annotations

import random
import string
import time
from dataclasses import dataclass, field, fields
from datetime import date
from typing import Mapping, Optional, Tuple, Union

Duration = Union[int, float, str]

ACTIVITY_TYPES = ("movement", "mindfulness", "cognitive", "review")
PHASES = ("Foundation", "Integration", "Mastery")
THEMES = ("light", "dark", "auto")
EXERCISE_TYPES = ("mixed", "cardio", "strength", "mindful", "dance")

_WEEKDAY_ABBR = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


@dataclass(frozen=True)
class ActivityTemplate:
    """One timed step of a session as written in the curriculum."""

    type: str
    name: str
    description: str
    duration: Duration


@dataclass(frozen=True)
class SessionTemplate:
    duration: Duration
    activities: Tuple[ActivityTemplate, ...]


@dataclass(frozen=True)
class WeekDefinition:
    """A curriculum week. ``sessions`` keeps the declared variant order."""

    week_number: int
    title: str
    phase: str
    phase_color: str
    sessions: Mapping[str, SessionTemplate]
    milestone: str

    @property
    def variant_keys(self) -> Tuple[str, ...]:
        return tuple(self.sessions)


@dataclass(frozen=True)
class AdaptedActivity:
    type: str
    name: str
    description: str
    duration: Duration


@dataclass(frozen=True)
class AdaptedSession:
    duration: Duration
    activities: Tuple[AdaptedActivity, ...]


@dataclass(frozen=True)
class CompletionRecord:
    """A finished session, ready to be written into the ledger."""

    week_number: int
    variant_key: str
    calendar_date: date

    @property
    def key(self) -> str:
        return f"week{self.week_number}-{self.variant_key}-{format_ledger_date(self.calendar_date)}"


def format_ledger_date(value: date) -> str:
    """Render a date as ``Sun Oct 18 2026`` independently of the locale."""
    return f"{_WEEKDAY_ABBR[value.weekday()]} {_MONTH_ABBR[value.month - 1]} {value.day:02d} {value.year}"


def parse_ledger_date(text: str) -> date:
    """Inverse of ``format_ledger_date``; raises ValueError on bad input."""
    _weekday, month, day, year = text.split()
    return date(int(year), _MONTH_ABBR.index(month) + 1, int(day))


def parse_ledger_key(key: str) -> Optional[Tuple[int, str, str]]:
    """Split a ledger key into week number, variant key and date text.

    Variant keys may contain dashes, so the date (which never does) is
    peeled from the right first.
    """
    if not key.startswith("week"):
        return None
    head, sep, date_text = key.rpartition("-")
    if not sep:
        return None
    try:
        parse_ledger_date(date_text)
    except ValueError:
        return None
    week_text, sep, variant = head.partition("-")
    if not sep:
        return None
    try:
        week_number = int(week_text[len("week"):])
    except ValueError:
        return None
    return week_number, variant, date_text


# Persisted field names follow the stored profile document.
_PREFERENCE_KEYS = {
    "notifications": "notifications",
    "reminder_time": "reminderTime",
    "sound_enabled": "soundEnabled",
    "theme": "theme",
    "high_contrast": "highContrast",
    "reduce_motion": "reduceMotion",
    "extended_breaks": "extendedBreaks",
    "skip_complex": "skipComplex",
    "exercise_type": "exerciseType",
}


@dataclass
class UserPreferences:
    notifications: bool = True
    reminder_time: str = "09:00"
    sound_enabled: bool = True
    theme: str = "light"
    high_contrast: bool = False
    reduce_motion: bool = False
    extended_breaks: bool = False
    skip_complex: bool = False
    exercise_type: str = "mixed"

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_dict(cls, data: dict) -> "UserPreferences":
        defaults = cls()
        values = {}
        for attr, stored in _PREFERENCE_KEYS.items():
            raw = data.get(stored, data.get(attr, getattr(defaults, attr)))
            default = getattr(defaults, attr)
            if isinstance(default, bool):
                values[attr] = _coerce_bool(raw, default)
            else:
                values[attr] = str(raw)
        if values["theme"] not in THEMES:
            values["theme"] = defaults.theme
        if values["exercise_type"] not in EXERCISE_TYPES:
            values["exercise_type"] = defaults.exercise_type
        return cls(**values)

    def to_dict(self) -> dict:
        return {stored: getattr(self, attr) for attr, stored in _PREFERENCE_KEYS.items()}


def parse_flag(raw: object) -> Optional[bool]:
    """Interpret a boolean preference value; None for unrecognised text."""
    if isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
        return None
    return bool(raw)


def _coerce_bool(raw: object, default: bool) -> bool:
    value = parse_flag(raw)
    return default if value is None else value


def generate_user_id() -> str:
    suffix = "".join(random.choices(string.digits + string.ascii_lowercase, k=9))
    return f"user_{int(time.time() * 1000)}_{suffix}"


@dataclass
class UserProfile:
    user_id: str = field(default_factory=generate_user_id)
    name: str = "ADHD Warrior"
    start_date: str = field(default_factory=lambda: date.today().isoformat())
    current_week: int = 1
    preferences: UserPreferences = field(default_factory=UserPreferences)

    @classmethod
    def from_dict(cls, data: dict) -> "UserProfile":
        try:
            week = int(data.get("currentWeek", 1))
        except (TypeError, ValueError):
            week = 1
        return cls(
            user_id=str(data.get("userId") or generate_user_id()),
            name=str(data.get("name", "ADHD Warrior")),
            start_date=str(data.get("startDate") or date.today().isoformat()),
            current_week=min(12, max(1, week)),
            preferences=UserPreferences.from_dict(data.get("preferences") or {}),
        )

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "name": self.name,
            "startDate": self.start_date,
            "currentWeek": self.current_week,
            "preferences": self.preferences.to_dict(),
        }


@dataclass
class ProgramState:
    current_week: int = 1
    completed_session_keys: set = field(default_factory=set)
