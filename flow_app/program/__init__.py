"""Focus & Flow program engine."""

__version__ = "1.0.0"
