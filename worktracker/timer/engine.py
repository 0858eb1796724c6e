"""Stopwatch state machine for WorkTracker.

States
------
IDLE      No timer record persisted.
RUNNING   A record is persisted; the 1 s tick refreshes the elapsed
          time and enforces the 12-hour ceiling.
STOPPED   The session just ended and a :class:`StoppedSession` waits
          to be logged.  Otherwise identical to IDLE.

Transitions
-----------
IDLE → RUNNING              (start)
RUNNING → STOPPED           (stop, ceiling reached, project deleted)
RUNNING → IDLE              (another context stopped the timer)
STOPPED → IDLE              (clear_stopped_session)

Elapsed time is never counted tick by tick: it is always derived from
the persisted ``started_at``, so throttled or suspended ticks, reloads
and sleeping devices cannot make it drift.  On construction the engine
picks up a record left by an earlier run and carries on from the right
offset, or stops it straight away if it already passed the ceiling.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .records import StoppedSession, TimerState
from .store import TimerStore


logger = logging.getLogger(__name__)


# ── enums ─────────────────────────────────────────────────────────────────


class TimerStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


# ── constants ─────────────────────────────────────────────────────────────

MAX_SECONDS = 12 * 60 * 60  # auto-stop ceiling
TICK_INTERVAL_MS = 1000


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _truncate_to_millis(moment: datetime) -> datetime:
    # the persisted record only keeps milliseconds
    return moment.replace(microsecond=moment.microsecond // 1000 * 1000)


# ── engine ────────────────────────────────────────────────────────────────


class TimerEngine(QObject):
    """Persisted, resumable project stopwatch.

    Signals
    -------
    tick(elapsed_seconds: int)
        Emitted on start and every tick while running, and with 0 when
        the timer stops here or in another context.
    state_changed(new_status: TimerStatus)
        Emitted on every status transition.
    session_stopped(session: StoppedSession)
        Emitted when a running session ends in this context (user stop,
        ceiling, orphaned project, or expiry found while resuming).
    """

    tick = pyqtSignal(int)
    state_changed = pyqtSignal(object)
    session_stopped = pyqtSignal(object)

    def __init__(
        self,
        store: TimerStore,
        parent: QObject | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
        max_seconds: int = MAX_SECONDS,
        tick_interval_ms: int = TICK_INTERVAL_MS,
    ) -> None:
        super().__init__(parent)

        # ── configuration ─────────────────────────────────────────────
        self._store = store
        self._clock = clock or _utcnow
        self._max_seconds = max_seconds

        # ── session state ─────────────────────────────────────────────
        self._status: TimerStatus = TimerStatus.IDLE
        self._current: TimerState | None = None
        self._stopped: StoppedSession | None = None

        # ── Qt timer ──────────────────────────────────────────────────
        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(tick_interval_ms)
        self._qt_timer.timeout.connect(self._on_tick)

        # ── other contexts ────────────────────────────────────────────
        self._unsubscribe: Callable[[], None] | None = store.subscribe(
            self._on_external_change
        )

        self._resume()

    @classmethod
    def from_settings(
        cls,
        store: TimerStore,
        settings,
        parent: QObject | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> TimerEngine:
        """Build an engine using the ceiling and tick interval from
        :class:`~worktracker.settings.Settings`."""
        return cls(
            store,
            parent,
            clock=clock,
            max_seconds=settings.max_session_seconds,
            tick_interval_ms=settings.tick_interval_ms,
        )

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def status(self) -> TimerStatus:
        return self._status

    @property
    def is_running(self) -> bool:
        return self._current is not None

    @property
    def project_id(self) -> str | None:
        return self._current.project_id if self._current else None

    @property
    def task_id(self) -> str | None:
        return self._current.task_id if self._current else None

    @property
    def task_description(self) -> str | None:
        return self._current.task_description if self._current else None

    @property
    def started_at(self) -> datetime | None:
        return self._current.started_at if self._current else None

    @property
    def elapsed_seconds(self) -> int:
        """Seconds since start, capped at the ceiling; 0 when not running."""
        if self._current is None:
            return 0
        return min(self._current.elapsed(self._clock()), self._max_seconds)

    @property
    def remaining(self) -> int:
        """Seconds until the automatic stop (the full ceiling when idle)."""
        return self._max_seconds - self.elapsed_seconds

    @property
    def max_seconds(self) -> int:
        return self._max_seconds

    @property
    def stopped_session(self) -> StoppedSession | None:
        return self._stopped

    def get_stopped_session(self) -> StoppedSession | None:
        return self._stopped

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(
        self,
        project_id: str,
        task_id: str | None = None,
        task_description: str | None = None,
    ) -> bool:
        """Start timing ``project_id``.  Returns ``False`` without changing
        anything if a timer is already running or a stopped session has
        not been cleared yet."""
        existing = self._store.read()
        if existing is not None and existing.is_running:
            if existing.elapsed(self._clock()) >= self._max_seconds:
                # expired record left by another context
                self.stop()
                return False
            logger.debug(
                "start(%s) ignored: already timing %s", project_id, existing.project_id
            )
            return False
        if self._stopped is not None:
            logger.debug("start(%s) ignored: stopped session not cleared", project_id)
            return False

        state = TimerState(
            project_id=project_id,
            started_at=_truncate_to_millis(self._clock()),
            task_id=task_id,
            task_description=task_description,
        )
        if not self._store.write(state):
            return False

        logger.info("Timer started for project %s", project_id)
        self._adopt(state)
        return True

    def stop(self) -> StoppedSession | None:
        """End the running session and return it.

        Works from the persisted record rather than the in-memory copy.
        Returns ``None`` when nothing was persisted.
        """
        self._qt_timer.stop()
        current = self._store.read()
        if current is None:
            if self._current is not None:
                # our record vanished without a notification; just go idle
                self._current = None
                self._set_state(TimerStatus.IDLE)
                self.tick.emit(0)
            return None

        elapsed = min(current.elapsed(self._clock()), self._max_seconds)
        session = StoppedSession.from_state(current, elapsed)
        self._store.write(None)
        self._current = None
        self._stopped = session

        logger.info(
            "Timer stopped for project %s after %ss", session.project_id, elapsed
        )
        self._set_state(TimerStatus.STOPPED)
        self.tick.emit(0)
        self.session_stopped.emit(session)
        return session

    def clear_stopped_session(self) -> None:
        """Acknowledge the stopped session.  Idempotent."""
        if self._stopped is None:
            return
        self._stopped = None
        if self._status == TimerStatus.STOPPED:
            self._set_state(TimerStatus.IDLE)

    def shutdown(self) -> None:
        """Cancel the tick and stop listening to other contexts.

        The persisted record is left alone, so a new engine resumes it.
        """
        self._qt_timer.stop()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _resume(self) -> None:
        saved = self._store.read()
        if saved is None or not saved.is_running:
            return
        if saved.elapsed(self._clock()) >= self._max_seconds:
            logger.info(
                "Timer for project %s passed the ceiling while closed; stopping",
                saved.project_id,
            )
            self.stop()
            return
        logger.info("Resuming timer for project %s", saved.project_id)
        self._adopt(saved)

    def _adopt(self, state: TimerState) -> None:
        self._current = state
        self._set_state(TimerStatus.RUNNING)
        self._qt_timer.start()
        self.tick.emit(self.elapsed_seconds)

    def _on_tick(self) -> None:
        if self._current is None:
            self._qt_timer.stop()
            return
        elapsed = self.elapsed_seconds
        self.tick.emit(elapsed)
        if elapsed >= self._max_seconds:
            logger.info("Timer reached the %ss ceiling; stopping", self._max_seconds)
            self.stop()

    def _on_external_change(self, removed: bool) -> None:
        if not removed:
            logger.debug("Timer record replaced by another context")
            return
        self._qt_timer.stop()
        if self._current is None:
            return
        logger.info("Timer stopped in another context")
        self._current = None
        self._set_state(TimerStatus.IDLE if self._stopped is None else TimerStatus.STOPPED)
        self.tick.emit(0)

    def _set_state(self, new_status: TimerStatus) -> None:
        if new_status == self._status:
            return
        self._status = new_status
        self.state_changed.emit(new_status)
