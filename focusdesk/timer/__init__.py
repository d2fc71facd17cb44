"""Timer package."""

from .engine import (
    TimerEngine,
    TimerMode,
    TimerSnapshot,
    CompletedSession,
    CompletionEvent,
    DEFAULT_DURATIONS,
    MODE_LABELS,
    LONG_BREAK_EVERY,
    format_remaining,
    next_mode_after,
)
from .clock import ClockDriver

__all__ = [
    "TimerEngine",
    "TimerMode",
    "TimerSnapshot",
    "CompletedSession",
    "CompletionEvent",
    "DEFAULT_DURATIONS",
    "MODE_LABELS",
    "LONG_BREAK_EVERY",
    "format_remaining",
    "next_mode_after",
    "ClockDriver",
]
