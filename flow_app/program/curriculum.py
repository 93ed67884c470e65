"""The fixed 12-week curriculum and read-only lookups over it."""
from __future__ import annotations

from types import MappingProxyType
from typing import Dict, List, Sequence, Tuple

from .errors import OutOfRangeError
from .models import ActivityTemplate, Duration, SessionTemplate, WeekDefinition

FIRST_WEEK = 1
LAST_WEEK = 12

_PHASE_COLORS = {
    "Foundation": "bg-blue-500",
    "Integration": "bg-purple-500",
    "Mastery": "bg-green-500",
}


def _activity(type_: str, name: str, duration: Duration, description: str) -> ActivityTemplate:
    return ActivityTemplate(type=type_, name=name, description=description, duration=duration)


def _session(duration: Duration, *activities: ActivityTemplate) -> SessionTemplate:
    return SessionTemplate(duration=duration, activities=tuple(activities))


def _week(
    number: int, title: str, phase: str, milestone: str, sessions: Sequence[Tuple[str, SessionTemplate]]
) -> WeekDefinition:
    return WeekDefinition(
        week_number=number,
        title=title,
        phase=phase,
        phase_color=_PHASE_COLORS[phase],
        sessions=MappingProxyType(dict(sessions)),
        milestone=milestone,
    )


_WEEKS: Tuple[WeekDefinition, ...] = (
    _week(1, "Activation & Awareness", "Foundation", "Complete 3 sessions without skipping", [
        ("Mon/Wed/Fri", _session(
            15,
            _activity("movement", "Dynamic movement", 5, "Jumping jacks, arm circles, marching"),
            _activity("mindfulness", "Brain.fm focus session", 5, "Low setting with breathing awareness"),
            _activity("cognitive", "Task initiation practice", 5, "Using the '5-minute rule'"),
        )),
        ("Tue/Thu", _session(
            10,
            _activity("movement", "Walking meditation", 5, "Outdoors if possible"),
            _activity("cognitive", "Daily tracking setup", 5, "Reflection and planning"),
        )),
    ]),
    _week(2, "Building Momentum", "Foundation", "Track focus improvements using 1-10 scale", [
        ("Mon/Wed/Fri", _session(
            18,
            _activity("movement", "Moderate cardio", 7, "Brisk walk, cycling, dancing"),
            _activity("mindfulness", "Brain.fm with body scan", 6, "Medium setting"),
            _activity("cognitive", "Distractibility Delay Technique", 5, "Practice focus skills"),
        )),
        ("Tue/Thu/Sat", _session(
            15,
            _activity("movement", "Open-skill activity", 10, "Dance tutorial, shadow boxing"),
            _activity("cognitive", "STOP technique", 5, "Impulse control practice"),
        )),
    ]),
    _week(3, "Establishing Rhythms", "Foundation", "Successfully use Pomodoro for one work task", [
        ("Mon/Wed/Fri", _session(
            20,
            _activity("movement", "HIIT workout", 8, "30 seconds work, 15 seconds rest"),
            _activity("mindfulness", "Brain.fm medium setting", 7, "With mindful breathing"),
            _activity("cognitive", "Time awareness exercises", 5, "Pomodoro introduction"),
        )),
        ("Tue/Thu", _session(
            20,
            _activity("movement", "Complex movement", 10, "Yoga flow or martial arts forms"),
            _activity("mindfulness", "Walking meditation", 5, "Mindful steps"),
            _activity("cognitive", "Evening routine planning", 5, "Structure preparation"),
        )),
    ]),
    _week(4, "Foundation Consolidation", "Foundation", "Identify optimal exercise type and mindfulness approach", [
        ("Daily", _session(
            "15-20",
            _activity("review", "Review & Practice", "15-20", "Practice favorite combinations from weeks 1-3"),
        )),
    ]),
    _week(5, "Multimodal Magic", "Integration", "Complete one full workday using new strategies", [
        ("Mon/Wed/Fri", _session(
            20,
            _activity("movement", "Open-skill exercise", 10, "Tennis against wall, dance routine"),
            _activity("mindfulness", "Brain.fm with active mindfulness", 6, "Higher engagement"),
            _activity("cognitive", "Cognitive restructuring", 4, "Thought pattern work"),
        )),
        ("Tue/Thu", _session(
            20,
            _activity("movement", "Strength training circuit", 8, "Bodyweight exercises"),
            _activity("mindfulness", "Progressive muscle relaxation", 7, "Full body tension release"),
            _activity("cognitive", "Work productivity planning", 5, "Email/meeting strategies"),
        )),
    ]),
    _week(6, "Cognitive-Physical Fusion", "Integration", "Navigate one challenging situation using STOP technique", [
        ("Mon/Wed/Fri/Sat", _session(
            20,
            _activity("movement", "Exergaming", 10, "Complex movement patterns"),
            _activity("mindfulness", "Brain.fm high setting", 5, "With focus challenge"),
            _activity("cognitive", "Financial management", 5, "Impulse control check-in"),
        )),
        ("Tue/Thu", _session(
            20,
            _activity("movement", "Interval training", 12, "With cognitive tasks between sets"),
            _activity("mindfulness", "Mindful movement", 8, "Movement meditation"),
        )),
    ]),
    _week(7, "Advanced Integration", "Integration", "Successfully adapt program to energy levels", [
        ("High Energy Days", _session(
            20,
            _activity("movement", "High-intensity open-skill", 12, "Complex movement patterns"),
            _activity("mindfulness", "Quick mindfulness reset", 5, "Focused breathing"),
            _activity("cognitive", "CBT skill application", 3, "Real-world practice"),
        )),
        ("Low Energy Days", _session(
            20,
            _activity("movement", "Gentle movement", 8, "Stretching and mobility"),
            _activity("mindfulness", "Extended Brain.fm focus", 8, "Deep concentration"),
            _activity("cognitive", "Organization system", 4, "Refine daily systems"),
        )),
    ]),
    _week(8, "Integration Mastery", "Integration", "Create personalized routine combinations", [
        ("Custom Design", _session(
            20,
            _activity("review", "Design your session", 20, "Use all three modalities based on your preferences"),
        )),
    ]),
    _week(9, "Autonomous Practice", "Mastery", "Complete week without external reminders", [
        ("Self-Designed", _session(
            20,
            _activity("movement", "Physical activity (40%)", 8, "Your choice of movement"),
            _activity("mindfulness", "Mindfulness/Brain.fm (30%)", 6, "Focus practice"),
            _activity("cognitive", "CBT/Life skills (30%)", 6, "Practical application"),
        )),
    ]),
    _week(10, "Life Integration", "Mastery", "Report improved functioning in target area", [
        ("Morning", _session(
            20, _activity("movement", "Energy activation", 20, "Morning routine for optimal day start"),
        )),
        ("Afternoon", _session(
            20, _activity("cognitive", "Productivity protocols", 20, "Workday enhancement strategies"),
        )),
        ("Evening", _session(
            20, _activity("mindfulness", "Wind-down sequence", 20, "Prepare for restful sleep"),
        )),
    ]),
    _week(11, "Teaching & Refinement", "Mastery", "Successfully explain program benefits to others", [
        ("Teaching Practice", _session(
            20, _activity("review", "Teach one technique", 20, "Share your knowledge with someone else"),
        )),
    ]),
    _week(12, "Graduation & Beyond", "Mastery", "Commit to specific long-term practice schedule", [
        ("Celebration", _session(
            20, _activity("review", "Favorite routines", 20, "Practice what works best for you"),
        )),
    ]),
)

_BY_NUMBER: Dict[int, WeekDefinition] = {week.week_number: week for week in _WEEKS}


def get_week(number: int) -> WeekDefinition:
    """Return the week definition, raising ``OutOfRangeError`` outside 1..12."""
    if isinstance(number, bool) or not isinstance(number, int) or number not in _BY_NUMBER:
        raise OutOfRangeError(number, FIRST_WEEK, LAST_WEEK)
    return _BY_NUMBER[number]


def all_weeks() -> List[WeekDefinition]:
    return list(_WEEKS)


def clamp_week(number: int) -> int:
    return max(FIRST_WEEK, min(LAST_WEEK, int(number)))


def phase_progress(week: int) -> Tuple[str, float]:
    """Phase name and percentage through that phase for a week number."""
    if week <= 4:
        return "Foundation", (week / 4) * 100
    if week <= 8:
        return "Integration", ((week - 4) / 4) * 100
    return "Mastery", ((week - 8) / 4) * 100
