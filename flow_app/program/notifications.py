"""Daily reminder scheduling.

The scheduler never uses a repeating timer: it arms one single-shot timer
for the next occurrence and, when that fires, computes and arms the
following one. A wake-up missed while the process was not running is not
replayed; the next ``apply`` call simply schedules the next occurrence.
"""
from __future__ import annotations

import logging
import re
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional, Protocol, Tuple

from .errors import PlatformUnavailableError, ValidationError
from .models import UserPreferences

LOGGER = logging.getLogger(__name__)

MAX_ARM_DELTA = timedelta(hours=25)
TEST_NOTIFICATION_DELAY_SECONDS = 1.0

REMINDER_TITLE = "Focus & Flow Reminder"
REMINDER_BODY = (
    "Time for your daily session! Your brain is ready for some dopamine boosting "
    "exercise and mindfulness."
)
TEST_TITLE = "Notifications Enabled"
TEST_BODY = "Daily reminders are now active! You'll receive reminders at your chosen time."

_HHMM = re.compile(r"^\s*(\d{1,2}):(\d{1,2})\s*$")


class Clock(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now()


class NotificationSurface(Protocol):
    """Host notification API. Raises PlatformUnavailableError when the API is absent."""

    def permission_granted(self) -> bool:
        ...

    def show(self, title: str, body: str) -> None:
        ...


class LogNotificationSurface:
    """Surface that writes reminders to the log; always permitted."""

    def permission_granted(self) -> bool:
        return True

    def show(self, title: str, body: str) -> None:
        LOGGER.info("%s: %s", title, body)


class Timer(Protocol):
    def start(self) -> None:
        ...

    def cancel(self) -> None:
        ...


TimerFactory = Callable[[float, Callable[[], None]], Timer]


def thread_timer(seconds: float, callback: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(seconds, callback)
    timer.daemon = True
    return timer


def parse_reminder_time(value: str) -> Tuple[int, int]:
    """Parse ``HH:MM`` into (hour, minute), raising ``ValidationError``."""
    match = _HHMM.match(value or "")
    if not match:
        raise ValidationError(f"Invalid reminder time format: {value!r}")
    hour, minute = int(match.group(1)), int(match.group(2))
    if not 0 <= hour <= 23 or not 0 <= minute <= 59:
        raise ValidationError(f"Reminder time out of range: {value!r}")
    return hour, minute


def compute_next_fire_time(hhmm: str, now: datetime) -> Optional[datetime]:
    """Next occurrence of ``hhmm`` strictly after ``now``, or None if invalid."""
    try:
        hour, minute = parse_reminder_time(hhmm)
    except ValidationError as exc:
        LOGGER.warning("%s", exc)
        return None
    scheduled = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if scheduled <= now:
        scheduled += timedelta(days=1)
    return scheduled


class NotificationScheduler:
    """Keeps at most one pending reminder timer alive."""

    def __init__(
        self,
        surface: NotificationSurface,
        clock: Optional[Clock] = None,
        timer_factory: TimerFactory = thread_timer,
        test_delay_seconds: float = TEST_NOTIFICATION_DELAY_SECONDS,
    ) -> None:
        self.surface = surface
        self.clock = clock or SystemClock()
        self.timer_factory = timer_factory
        self.test_delay_seconds = test_delay_seconds
        self.reminder_time: Optional[str] = None
        self.next_fire_time: Optional[datetime] = None
        self._timer: Optional[Timer] = None
        self._test_timer: Optional[Timer] = None
        self._test_shown = False
        self._generation = 0
        self._lock = threading.RLock()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    @property
    def test_notification_shown(self) -> bool:
        return self._test_shown

    def apply(self, preferences: UserPreferences) -> bool:
        """Re-run the reminder effect for the given preferences.

        Returns True when a reminder ended up armed.
        """
        with self._lock:
            self.cancel()
            if not preferences.notifications:
                self._test_shown = False
                return False
            if not self._permission_granted():
                LOGGER.info("Notification permission not granted; reminders inactive")
                return False
            self.reminder_time = preferences.reminder_time
            armed = self._schedule_next(self.clock.now())
            if not self._test_shown:
                self._test_shown = True
                self._test_timer = self.timer_factory(self.test_delay_seconds, self._fire_test)
                self._test_timer.start()
            return armed

    def arm(self, fire_time: datetime, now: datetime) -> bool:
        delta = fire_time - now
        if delta < timedelta(0) or delta > MAX_ARM_DELTA:
            LOGGER.warning("Invalid notification scheduling time: %s", delta)
            return False
        with self._lock:
            self.cancel()
            self._generation += 1
            generation = self._generation
            self._timer = self.timer_factory(
                delta.total_seconds(), lambda: self._fire(generation, fire_time)
            )
            self.next_fire_time = fire_time
            self._timer.start()
        LOGGER.info("Reminder armed for %s", fire_time.isoformat(timespec="minutes"))
        return True

    def cancel(self) -> None:
        with self._lock:
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                LOGGER.debug("Cancelled pending reminder")
            self._timer = None
            self.next_fire_time = None

    def close(self) -> None:
        with self._lock:
            self.cancel()
            if self._test_timer is not None:
                self._test_timer.cancel()
                self._test_timer = None
        LOGGER.debug("Notification scheduler closed")

    def _permission_granted(self) -> bool:
        try:
            return bool(self.surface.permission_granted())
        except PlatformUnavailableError as exc:
            LOGGER.info("Notifications unavailable: %s", exc)
            return False
        except Exception:  # noqa: BLE001
            LOGGER.exception("Notification permission check failed")
            return False

    def _schedule_next(self, now: datetime) -> bool:
        if self.reminder_time is None:
            return False
        fire_time = compute_next_fire_time(self.reminder_time, now)
        if fire_time is None:
            return False
        return self.arm(fire_time, now)

    def _show(self, title: str, body: str) -> None:
        try:
            self.surface.show(title, body)
        except PlatformUnavailableError as exc:
            LOGGER.warning("Cannot show notification %r: %s", title, exc)
        except Exception:  # noqa: BLE001
            LOGGER.exception("Failed to show notification %r", title)

    def _fire(self, generation: int, fire_time: datetime) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._timer = None
            self.next_fire_time = None
        self._show(REMINDER_TITLE, REMINDER_BODY)
        with self._lock:
            if generation != self._generation:
                return
            # A timer that wakes slightly early must not re-arm for the same minute.
            self._schedule_next(max(self.clock.now(), fire_time))

    def _fire_test(self) -> None:
        with self._lock:
            self._test_timer = None
        self._show(TEST_TITLE, TEST_BODY)
