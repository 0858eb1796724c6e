"""Timer package."""

from .engine import (
    TimerEngine,
    TimerStatus,
    MAX_SECONDS,
    TICK_INTERVAL_MS,
)
from .records import TimerState, StoppedSession
from .store import TimerStore, TIMER_KEY
from .controller import (
    TimerController,
    TimerError,
    UnknownProjectError,
    InactiveProjectError,
)

__all__ = [
    "TimerEngine",
    "TimerStatus",
    "MAX_SECONDS",
    "TICK_INTERVAL_MS",
    "TimerState",
    "StoppedSession",
    "TimerStore",
    "TIMER_KEY",
    "TimerController",
    "TimerError",
    "UnknownProjectError",
    "InactiveProjectError",
]
