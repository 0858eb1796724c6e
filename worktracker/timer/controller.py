"""Owner of the timer engine.

Connects the engine to the project registry and to point logging:

* starting is only allowed for registered, active projects;
* when the timed project disappears from the registry the session is
  stopped, so the time accrued so far can still be saved;
* the pending stopped session is saved or discarded through here, which
  acknowledges it on the engine.
"""

from __future__ import annotations

import logging

from PyQt6.QtCore import QObject

from ..database.models import Point
from ..points.sessions import save_session
from ..projects.registry import ProjectRegistry
from .engine import TimerEngine
from .records import StoppedSession


logger = logging.getLogger(__name__)


class TimerError(Exception):
    """Base class for timer requests the controller refuses."""


class UnknownProjectError(TimerError):
    def __init__(self, project_id: str) -> None:
        self.project_id = project_id
        super().__init__(f"no project with id {project_id!r}")


class InactiveProjectError(TimerError):
    def __init__(self, project_id: str, status: str) -> None:
        self.project_id = project_id
        self.status = status
        super().__init__(f"project {project_id!r} is {status}, not Active")


class TimerController(QObject):
    """Glue between :class:`TimerEngine` and :class:`ProjectRegistry`."""

    def __init__(
        self,
        engine: TimerEngine,
        registry: ProjectRegistry,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._engine = engine
        self._registry = registry
        self._registry.changed.connect(self._on_projects_changed)
        # a resumed timer may point at a project deleted while we were closed
        self._on_projects_changed()

    @property
    def engine(self) -> TimerEngine:
        return self._engine

    @property
    def registry(self) -> ProjectRegistry:
        return self._registry

    # ── controls ──────────────────────────────────────────────────────

    def start_timer(
        self,
        project_id: str,
        task_id: str | None = None,
        task_description: str | None = None,
    ) -> bool:
        project = self._registry.get(project_id)
        if project is None:
            raise UnknownProjectError(project_id)
        if project.status != "Active":
            raise InactiveProjectError(project_id, project.status)
        return self._engine.start(project_id, task_id, task_description)

    def stop_timer(self) -> StoppedSession | None:
        return self._engine.stop()

    def pending_session(self) -> StoppedSession | None:
        return self._engine.get_stopped_session()

    def save_pending_session(
        self,
        *,
        points,
        activity_type: str,
        hours=None,
        comment: str = "",
    ) -> Point | None:
        """Log the pending session and clear it.

        Returns ``None`` if there is nothing pending.  On validation
        errors the session stays pending so the caller can retry.
        """
        session = self._engine.get_stopped_session()
        if session is None:
            return None
        entry = save_session(
            session,
            points=points,
            activity_type=activity_type,
            hours=hours,
            comment=comment,
        )
        self._engine.clear_stopped_session()
        return entry

    def discard_pending_session(self) -> None:
        self._engine.clear_stopped_session()

    def shutdown(self) -> None:
        try:
            self._registry.changed.disconnect(self._on_projects_changed)
        except TypeError:
            pass  # already disconnected
        self._engine.shutdown()

    # ── reactions ─────────────────────────────────────────────────────

    def _on_projects_changed(self) -> None:
        project_id = self._engine.project_id
        if not self._engine.is_running or project_id is None:
            return
        if project_id not in self._registry:
            logger.info("Project %s was deleted while timing; stopping", project_id)
            self._engine.stop()
