"""Error taxonomy for the program engine."""
from __future__ import annotations


class ProgramError(Exception):
    """Base class for every error raised by the program engine."""


class ValidationError(ProgramError):
    """Malformed input such as a bad reminder time."""


class OutOfRangeError(ValidationError):
    """A week number outside the 12-week program."""

    def __init__(self, value: object, low: int = 1, high: int = 12) -> None:
        super().__init__(f"{value!r} is outside {low}..{high}")
        self.value = value
        self.low = low
        self.high = high


class TransientIOError(ProgramError):
    """Persistence read/write failure."""


class PlatformUnavailableError(ProgramError):
    """Notification or audio capability is missing or denied."""
