"""Shared test helpers for WorkTracker."""

from datetime import datetime, timedelta, timezone

from worktracker.storage import StorageArea
from worktracker.timer.engine import TimerEngine
from worktracker.timer.records import TimerState
from worktracker.timer.store import TimerStore


T0 = datetime(2026, 10, 19, 9, 0, 0, tzinfo=timezone.utc)


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeClock:
    """Callable clock for ``TimerEngine(clock=...)``."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def persist_running(area: StorageArea, project_id: str, started_at: datetime,
                    **kwargs) -> TimerState:
    """Write a running timer record straight into ``area``, as a previous
    run of the app would have left it."""
    state = TimerState(project_id=project_id, started_at=started_at, **kwargs)
    ctx = area.context()
    TimerStore(ctx).write(state)
    ctx.close()
    return state


def open_tab(area: StorageArea, clock, **kwargs) -> TimerEngine:
    """New engine on a new context of ``area``, like a second browser tab."""
    return TimerEngine(TimerStore(area.context()), clock=clock, **kwargs)
