"""Named feedback cues emitted at session and navigation transitions."""
from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol

LOGGER = logging.getLogger(__name__)


class Cue(str, Enum):
    CLICK = "click"
    SESSION_START = "session_start"
    SESSION_COMPLETE = "session_complete"
    TOGGLE = "toggle"
    NAVIGATION = "navigation"


class CueSink(Protocol):
    def emit(self, cue: Cue) -> None:
        ...


class LoggingCueSink:
    def emit(self, cue: Cue) -> None:
        LOGGER.debug("Cue %s", cue.value)


def safe_emit(sink: CueSink, cue: Cue) -> None:
    try:
        sink.emit(cue)
    except Exception:  # noqa: BLE001
        LOGGER.exception("Cue sink failed for %s", cue.value)
