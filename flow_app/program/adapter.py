"""Preference-driven adaptation of curriculum sessions.

Every function here is pure: templates are never mutated and the same
(template, preferences) pair always yields an equal result.
"""
from __future__ import annotations

from typing import Iterable, List, Sequence

from .models import AdaptedActivity, AdaptedSession, ActivityTemplate, Duration, SessionTemplate, UserPreferences

EXTENDED_BREAK_MINUTES = 2
FALLBACK_COUNTDOWN_SECONDS = 5 * 60

COMPLEX_KEYWORDS = (
    "exergaming",
    "complex movement patterns",
    "multi-step coordination",
    "coordination exercises",
)
PRESERVE_KEYWORDS = (
    "dance",
    "martial arts",
    "open-skill",
)


def _is_numeric(value: Duration) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def adjust_duration(value: Duration, extended_breaks: bool) -> Duration:
    """Pad numeric durations by two minutes; textual ranges pass through."""
    if extended_breaks and _is_numeric(value):
        return value + EXTENDED_BREAK_MINUTES
    return value


def is_complex(activity: ActivityTemplate) -> bool:
    text = f"{activity.name} {activity.description}".lower()
    if any(keyword in text for keyword in PRESERVE_KEYWORDS):
        return False
    return any(keyword in text for keyword in COMPLEX_KEYWORDS)


def filter_complex_activities(
    activities: Sequence[ActivityTemplate], skip_complex: bool
) -> List[ActivityTemplate]:
    if not skip_complex:
        return list(activities)
    return [activity for activity in activities if not is_complex(activity)]


def adapt_activities(activities: Iterable[ActivityTemplate], preferences: UserPreferences) -> List[AdaptedActivity]:
    kept = filter_complex_activities(list(activities), preferences.skip_complex)
    return [
        AdaptedActivity(
            type=activity.type,
            name=activity.name,
            description=activity.description,
            duration=adjust_duration(activity.duration, preferences.extended_breaks),
        )
        for activity in kept
    ]


def adapt_session(template: SessionTemplate, preferences: UserPreferences) -> AdaptedSession:
    return AdaptedSession(
        duration=adjust_duration(template.duration, preferences.extended_breaks),
        activities=tuple(adapt_activities(template.activities, preferences)),
    )


def countdown_seconds(duration: Duration) -> int:
    """Seconds to seed a countdown with; textual durations get five minutes."""
    if _is_numeric(duration):
        return int(round(duration * 60))
    return FALLBACK_COUNTDOWN_SECONDS
