"""Controllers tying curriculum, preferences, timers and storage together."""
from __future__ import annotations

import logging
import tomllib
from dataclasses import asdict, dataclass
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Set, Tuple

from . import __version__
from .adapter import adapt_session
from .curriculum import FIRST_WEEK, LAST_WEEK, clamp_week, get_week, phase_progress
from .cues import Cue, CueSink, LoggingCueSink, safe_emit
from .errors import ValidationError
from .models import (
    EXERCISE_TYPES,
    THEMES,
    AdaptedActivity,
    AdaptedSession,
    CompletionRecord,
    ProgramState,
    UserPreferences,
    UserProfile,
    WeekDefinition,
    parse_flag,
)
from .notifications import Clock, NotificationScheduler, SystemClock, parse_reminder_time
from .selector import is_rest_day, select_variant
from .storage import COMPLETED_SESSIONS_KEY, PROFILE_KEY, Storage
from .timers import ActivityProgression

LOGGER = logging.getLogger(__name__)


CONFIG_DIR = Path.home() / ".focus_flow"
CONFIG_FILE_NAME = "config.toml"
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "default_config.toml"


@dataclass
class AppConfig:
    export_path: str = "focus_flow_progress.xlsx"
    database_path: str = ""
    test_notification_delay_seconds: float = 1.0
    tick_seconds: float = 1.0

    @classmethod
    def from_toml(cls, data: dict) -> "AppConfig":
        defaults = cls()

        def _float(name: str) -> float:
            try:
                value = float(data.get(name, getattr(defaults, name)))
            except (TypeError, ValueError):
                return getattr(defaults, name)
            return value if value > 0 else getattr(defaults, name)

        return cls(
            export_path=str(data.get("export_path") or defaults.export_path),
            database_path=str(data.get("database_path") or ""),
            test_notification_delay_seconds=_float("test_notification_delay_seconds"),
            tick_seconds=_float("tick_seconds"),
        )

    def to_toml(self) -> str:
        lines = [
            f"export_path = \"{self.export_path}\"",
            f"database_path = \"{self.database_path}\"",
            f"test_notification_delay_seconds = {float(self.test_notification_delay_seconds)}",
            f"tick_seconds = {float(self.tick_seconds)}",
        ]
        return "\n".join(lines) + "\n"

    def resolved_database_path(self, config_dir: Path) -> Path:
        if self.database_path:
            return Path(self.database_path).expanduser()
        return config_dir / "data.db"


class ConfigManager:
    def __init__(self, config_dir: Optional[Path] = None) -> None:
        self.config_dir = Path(config_dir) if config_dir is not None else CONFIG_DIR
        self.config_file = self.config_dir / CONFIG_FILE_NAME
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config = self._load()

    def _load(self) -> AppConfig:
        if self.config_file.exists():
            try:
                with open(self.config_file, "rb") as fh:
                    return AppConfig.from_toml(tomllib.load(fh))
            except tomllib.TOMLDecodeError:
                LOGGER.exception("Config file %s is unreadable, using defaults", self.config_file)
                return AppConfig()
        with open(DEFAULT_CONFIG_PATH, "rb") as fh:
            config = AppConfig.from_toml(tomllib.load(fh))
        self.save(config)
        return config

    def save(self, config: Optional[AppConfig] = None) -> None:
        cfg = config or self.config
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_file.write_text(cfg.to_toml(), encoding="utf-8")
        LOGGER.info("Saved configuration to %s", self.config_file)


@dataclass
class TodaySession:
    week: WeekDefinition
    variant_key: str
    session: AdaptedSession
    calendar_date: date
    rest_day: bool


class ProgramController:
    """Explicit context object for one user's program.

    Every mutation goes through a method here and is persisted by
    ``_on_change``; preference changes re-run the reminder effect.
    """

    def __init__(
        self,
        storage: Storage,
        scheduler: NotificationScheduler,
        cues: Optional[CueSink] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.storage = storage
        self.scheduler = scheduler
        self.cues = cues or LoggingCueSink()
        self.clock = clock or SystemClock()
        self.profile = self._load_profile()
        self.completed_sessions: Set[str] = set(self.storage.load(COMPLETED_SESSIONS_KEY, set()))
        self.progression: Optional[ActivityProgression] = None
        LOGGER.info("Focus & Flow v%s loaded profile %s (week %s)", __version__, self.profile.user_id, self.profile.current_week)

    @property
    def preferences(self) -> UserPreferences:
        return self.profile.preferences

    @property
    def state(self) -> ProgramState:
        return ProgramState(current_week=self.profile.current_week, completed_session_keys=set(self.completed_sessions))

    @property
    def today(self) -> date:
        return self.clock.now().date()

    def _load_profile(self) -> UserProfile:
        default = UserProfile()
        data = self.storage.load_profile(default.to_dict())
        return UserProfile.from_dict(data)

    def _on_change(self, what: str) -> bool:
        if what == "profile":
            return self.storage.save(PROFILE_KEY, self.profile.to_dict())
        return self.storage.save(COMPLETED_SESSIONS_KEY, self.completed_sessions)

    def _cue(self, cue: Cue) -> None:
        if self.preferences.sound_enabled:
            safe_emit(self.cues, cue)

    # Scheduling
    def activate(self) -> bool:
        """Run the reminder effect for the current preferences."""
        return self.scheduler.apply(self.preferences)

    # Sessions
    def today_session(self) -> TodaySession:
        day = self.today
        week = get_week(self.profile.current_week)
        variant = select_variant(week, day)
        session = adapt_session(week.sessions[variant], self.preferences)
        return TodaySession(week=week, variant_key=variant, session=session, calendar_date=day, rest_day=is_rest_day(day))

    def begin_session(
        self,
        on_tick: Callable[[int], None] | None = None,
        on_advance: Callable[[int, AdaptedActivity], None] | None = None,
        on_complete: Callable[[CompletionRecord], None] | None = None,
    ) -> ActivityProgression:
        """Build a fresh progression for today's session; never reuses old state."""
        today = self.today_session()

        def _completed(record: CompletionRecord) -> None:
            self.record_completion(record)
            if on_complete:
                on_complete(record)

        self.progression = ActivityProgression(
            week_number=today.week.week_number,
            variant_key=today.variant_key,
            session=today.session,
            calendar_date=today.calendar_date,
            on_tick=on_tick,
            on_advance=on_advance,
            on_complete=_completed,
            cues=self.cues if self.preferences.sound_enabled else None,
        )
        self._cue(Cue.SESSION_START)
        return self.progression

    def end_session(self) -> None:
        if self.progression is not None:
            self.progression.pause()
        self.progression = None

    def _refresh_progression(self) -> None:
        if self.progression is None or self.progression.is_complete:
            return
        today = self.today_session()
        progression = self.progression
        if (today.variant_key, today.calendar_date) != (progression.variant_key, progression.calendar_date):
            LOGGER.info("Session %s is no longer today's session, ending it", progression.variant_key)
            self.end_session()
            return
        if today.session != progression.session:
            LOGGER.info("Session content changed, restarting progression")
            progression.reset(today.session)

    def record_completion(self, record: CompletionRecord) -> bool:
        key = record.key
        if key in self.completed_sessions:
            LOGGER.info("Session %s already recorded today", key)
            return True
        self.completed_sessions.add(key)
        return self._on_change("ledger")

    def is_completed_today(self) -> bool:
        today = self.today_session()
        record = CompletionRecord(today.week.week_number, today.variant_key, today.calendar_date)
        return record.key in self.completed_sessions

    # Preferences
    def update_preference(self, name: str, value: Any) -> bool:
        if name not in UserPreferences.field_names():
            raise ValidationError(f"Unknown preference {name!r}")
        if name == "reminder_time":
            parse_reminder_time(str(value))
        if name == "theme" and value not in THEMES:
            raise ValidationError(f"Unknown theme {value!r}")
        if name == "exercise_type" and value not in EXERCISE_TYPES:
            raise ValidationError(f"Unknown exercise type {value!r}")
        if isinstance(getattr(self.preferences, name), bool):
            flag = parse_flag(value)
            if flag is None:
                raise ValidationError(f"{name} expects true or false, got {value!r}")
            value = flag
        values = asdict(self.preferences)
        values[name] = value
        updated = UserPreferences.from_dict(values)
        self.profile.preferences = updated
        self._cue(Cue.TOGGLE)
        saved = self._on_change("profile")
        self._refresh_progression()
        self.activate()
        return saved

    def reset_preferences(self) -> bool:
        self.profile.preferences = UserPreferences()
        saved = self._on_change("profile")
        self._refresh_progression()
        self.activate()
        return saved

    def update_profile(self, **updates: Any) -> bool:
        if "name" in updates:
            name = str(updates.pop("name")).strip()
            if not name:
                raise ValidationError("Name must not be empty")
            self.profile.name = name
        if "start_date" in updates:
            self.profile.start_date = str(updates.pop("start_date"))
        if updates:
            raise ValidationError(f"Unknown profile fields: {', '.join(sorted(updates))}")
        return self._on_change("profile")

    # Navigation
    def set_week(self, week: int) -> int:
        clamped = clamp_week(week)
        if clamped != week:
            LOGGER.warning("Week %s out of range, clamped to %s", week, clamped)
        if clamped != self.profile.current_week:
            self.profile.current_week = clamped
            self.end_session()
            self._on_change("profile")
        self._cue(Cue.NAVIGATION)
        return clamped

    def next_week(self) -> int:
        return self.set_week(min(LAST_WEEK, self.profile.current_week + 1))

    def previous_week(self) -> int:
        return self.set_week(max(FIRST_WEEK, self.profile.current_week - 1))

    # Progress
    def progress_summary(self) -> Dict[str, Any]:
        phase, percent = phase_progress(self.profile.current_week)
        return {
            "name": self.profile.name,
            "start_date": self.profile.start_date,
            "current_week": self.profile.current_week,
            "phase": phase,
            "phase_progress": percent,
            "completed_sessions": len(self.completed_sessions),
        }

    def week_status(self, week_number: int) -> Tuple[bool, bool]:
        """(completed, current) flags as shown on the program overview."""
        return week_number < self.profile.current_week, week_number == self.profile.current_week

    def reset_all(self) -> bool:
        self.scheduler.cancel()
        self.end_session()
        cleared = self.storage.clear()
        self.profile = UserProfile()
        self.completed_sessions = set()
        self._on_change("profile")
        self.activate()
        return cleared

    def close(self) -> None:
        self.end_session()
        self.scheduler.close()
        LOGGER.info("Program controller closed")
