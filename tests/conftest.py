from datetime import datetime, timedelta

import pytest

from flow_app.program.controllers import ProgramController
from flow_app.program.notifications import NotificationScheduler
from flow_app.program.storage import Storage


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class FakeTimer:
    def __init__(self, seconds, callback) -> None:
        self.seconds = seconds
        self.callback = callback
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def live(self) -> bool:
        return self.started and not self.cancelled

    def fire(self) -> None:
        assert self.live, "only a started, uncancelled timer can fire"
        self.cancelled = True
        self.callback()


class FakeTimerFactory:
    def __init__(self) -> None:
        self.timers = []

    def __call__(self, seconds, callback) -> FakeTimer:
        timer = FakeTimer(seconds, callback)
        self.timers.append(timer)
        return timer

    @property
    def live(self):
        return [t for t in self.timers if t.live]


class RecordingSurface:
    def __init__(self, granted: bool = True, fail: bool = False) -> None:
        self.granted = granted
        self.fail = fail
        self.shown = []

    def permission_granted(self) -> bool:
        return self.granted

    def show(self, title: str, body: str) -> None:
        if self.fail:
            raise RuntimeError("notification surface unavailable")
        self.shown.append((title, body))


class RecordingCueSink:
    def __init__(self) -> None:
        self.cues = []

    def emit(self, cue) -> None:
        self.cues.append(cue)


@pytest.fixture
def clock():
    # Monday
    return FakeClock(datetime(2026, 10, 19, 8, 0))


@pytest.fixture
def timers():
    return FakeTimerFactory()


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture
def cues():
    return RecordingCueSink()


@pytest.fixture
def storage(tmp_path):
    return Storage(tmp_path / "data.db")


@pytest.fixture
def scheduler(surface, clock, timers):
    return NotificationScheduler(surface, clock=clock, timer_factory=timers)


@pytest.fixture
def controller(storage, scheduler, cues, clock):
    ctrl = ProgramController(storage, scheduler, cues=cues, clock=clock)
    yield ctrl
    ctrl.close()
