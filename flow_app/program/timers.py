"""Activity-by-activity countdown for a single session."""
from __future__ import annotations

import logging
import threading
from datetime import date
from typing import Callable, List, Optional, Tuple

from .adapter import countdown_seconds
from .cues import Cue, CueSink, safe_emit
from .errors import ValidationError
from .models import AdaptedActivity, AdaptedSession, CompletionRecord

LOGGER = logging.getLogger(__name__)

IDLE = "idle"
RUNNING = "running"
PAUSED = "paused"
COMPLETE = "complete"


class ActivityProgression:
    """State machine driving one session through its activities.

    Idle -> Running -> Paused -> Running ... and, once an activity's countdown
    reaches zero or it is skipped, either Idle on the next activity or
    Complete after the last one. ``tick`` is the only time input, so the
    machine can be exercised without a clock.
    """

    def __init__(
        self,
        week_number: int,
        variant_key: str,
        session: AdaptedSession,
        calendar_date: date,
        on_tick: Callable[[int], None] | None = None,
        on_advance: Callable[[int, AdaptedActivity], None] | None = None,
        on_complete: Callable[[CompletionRecord], None] | None = None,
        cues: Optional[CueSink] = None,
    ) -> None:
        if not session.activities:
            raise ValidationError("Session has no activities to run")
        self.week_number = week_number
        self.variant_key = variant_key
        self.session = session
        self.calendar_date = calendar_date
        self.on_tick = on_tick
        self.on_advance = on_advance
        self.on_complete = on_complete
        self.cues = cues
        self.state = IDLE
        self._index = 0
        self._remaining = countdown_seconds(session.activities[0].duration)
        self._lock = threading.RLock()

    @property
    def activity_index(self) -> int:
        return self._index

    @property
    def time_remaining(self) -> int:
        return self._remaining

    @property
    def is_running(self) -> bool:
        return self.state == RUNNING

    @property
    def is_complete(self) -> bool:
        return self.state == COMPLETE

    @property
    def current_activity(self) -> AdaptedActivity:
        return self.session.activities[self._index]

    @property
    def activity_count(self) -> int:
        return len(self.session.activities)

    @property
    def formatted_remaining(self) -> str:
        minutes, seconds = divmod(max(self._remaining, 0), 60)
        return f"{minutes}:{seconds:02d}"

    def start(self) -> bool:
        with self._lock:
            if self.state not in (IDLE, PAUSED) or self._remaining <= 0:
                return False
            self.state = RUNNING
            LOGGER.debug("Started activity %s of %s", self._index + 1, self.activity_count)
            return True

    def pause(self) -> bool:
        with self._lock:
            if self.state != RUNNING:
                return False
            self.state = PAUSED
            return True

    def toggle(self) -> bool:
        """Start when idle or paused, pause when running."""
        if self.is_running:
            return self.pause()
        return self.start()

    def tick(self) -> None:
        events: List[Tuple[str, object]] = []
        with self._lock:
            if self.state != RUNNING:
                return
            self._remaining = max(self._remaining - 1, 0)
            events.append(("tick", self._remaining))
            if self._remaining == 0:
                self.state = IDLE
                events.extend(self._finish_activity())
        self._dispatch(events)

    def skip(self) -> None:
        with self._lock:
            if self.state == COMPLETE:
                return
            events = self._finish_activity()
        self._dispatch(events)

    def reset(self, session: Optional[AdaptedSession] = None) -> None:
        """Return to the first activity, optionally for a different session."""
        with self._lock:
            if session is not None:
                if not session.activities:
                    raise ValidationError("Session has no activities to run")
                self.session = session
            self.state = IDLE
            self._index = 0
            self._remaining = countdown_seconds(self.session.activities[0].duration)

    def _finish_activity(self) -> List[Tuple[str, object]]:
        if self._index < self.activity_count - 1:
            self._index += 1
            self._remaining = countdown_seconds(self.current_activity.duration)
            self.state = IDLE
            LOGGER.debug("Advanced to activity %s of %s", self._index + 1, self.activity_count)
            return [("cue", Cue.CLICK), ("advance", (self._index, self.current_activity))]
        record = CompletionRecord(self.week_number, self.variant_key, self.calendar_date)
        self.state = COMPLETE
        self._index = 0
        self._remaining = countdown_seconds(self.session.activities[0].duration)
        LOGGER.info("Completed session %s", record.key)
        return [("cue", Cue.SESSION_COMPLETE), ("complete", record)]

    def _dispatch(self, events: List[Tuple[str, object]]) -> None:
        for kind, payload in events:
            try:
                if kind == "tick" and self.on_tick:
                    self.on_tick(payload)
                elif kind == "advance" and self.on_advance:
                    index, activity = payload
                    self.on_advance(index, activity)
                elif kind == "complete" and self.on_complete:
                    self.on_complete(payload)
                elif kind == "cue" and self.cues is not None:
                    safe_emit(self.cues, payload)
            except Exception:  # noqa: BLE001
                LOGGER.exception("Progression %s callback failed", kind)


class CountdownDriver:
    """Ticks an ``ActivityProgression`` once per interval on a daemon thread.

    The thread only lives while the progression is running; at most one
    thread exists per driver.
    """

    def __init__(self, progression: ActivityProgression, interval: float = 1.0) -> None:
        self.progression = progression
        self.interval = interval
        self._thread: threading.Thread | None = None
        self._stop_event: threading.Event | None = None

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> bool:
        if not self.progression.start():
            return self.progression.is_running
        self._spawn()
        return True

    def pause(self) -> None:
        self.progression.pause()
        self.stop()

    def toggle(self) -> None:
        if self.progression.is_running:
            self.pause()
        else:
            self.start()

    def skip(self) -> None:
        self.stop()
        self.progression.skip()

    def stop(self) -> None:
        if self._stop_event:
            self._stop_event.set()
        thread = self._thread
        if thread and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=self.interval + 1)
        self._thread = None
        self._stop_event = None

    def close(self) -> None:
        self.progression.pause()
        self.stop()
        LOGGER.debug("Countdown driver closed")

    def _spawn(self) -> None:
        self.stop()
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._run_loop, args=(self._stop_event,), daemon=True)
        self._thread.start()

    def _run_loop(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval):
            if not self.progression.is_running:
                break
            self.progression.tick()
            if not self.progression.is_running:
                break
