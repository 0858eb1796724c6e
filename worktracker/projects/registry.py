"""Project registry: the set of projects that can be timed.

Backed by the ``projects`` table.  Every mutation emits ``changed`` so
owners (the timer controller) can react to membership changes without
polling.
"""

from __future__ import annotations

import logging
import secrets
import time

from PyQt6.QtCore import QObject, pyqtSignal

from ..database.db import get_session
from ..database.models import Project, Point


logger = logging.getLogger(__name__)

PROJECT_STATUSES = ("Active", "On Hold", "Completed")

_EDITABLE_FIELDS = {"name", "customer_id", "status"}


def new_id() -> str:
    """Short, roughly time-ordered random id (base-36 millis + random)."""
    millis = int(time.time() * 1000)
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    stamp = ""
    while millis:
        millis, rem = divmod(millis, 36)
        stamp = digits[rem] + stamp
    return stamp + secrets.token_hex(5)


def _check_status(status: str) -> None:
    if status not in PROJECT_STATUSES:
        raise ValueError(
            f"unknown project status {status!r}; expected one of {PROJECT_STATUSES}"
        )


class ProjectRegistry(QObject):
    """In-memory view of the projects table with a change signal.

    Signals
    -------
    changed()
        Emitted after any add / update / remove / reload.
    """

    changed = pyqtSignal()

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._projects: dict[str, Project] = {}
        self._load()

    # ── queries ───────────────────────────────────────────────────────

    def __contains__(self, project_id: object) -> bool:
        return project_id in self._projects

    def __len__(self) -> int:
        return len(self._projects)

    def get(self, project_id: str) -> Project | None:
        return self._projects.get(project_id)

    def project_ids(self) -> frozenset[str]:
        return frozenset(self._projects)

    def projects(self) -> list[Project]:
        return list(self._projects.values())

    def active_projects(self) -> list[Project]:
        """Projects that a new timer may be started against."""
        return [p for p in self.projects() if p.status == "Active"]

    # ── mutations ─────────────────────────────────────────────────────

    def add(
        self,
        name: str,
        customer_id: str | None = None,
        status: str = "Active",
    ) -> Project:
        name = name.strip()
        if not name:
            raise ValueError("project name must not be empty")
        _check_status(status)

        with get_session() as db:
            project = Project(
                id=new_id(), name=name, customer_id=customer_id, status=status
            )
            db.add(project)
            db.flush()
        self._projects[project.id] = project
        logger.debug("Added project %s (%s)", project.id, name)
        self.changed.emit()
        return project

    def update(self, project_id: str, **values) -> Project:
        unknown = set(values) - _EDITABLE_FIELDS
        if unknown:
            raise TypeError(f"cannot update project fields: {sorted(unknown)}")
        if "status" in values:
            _check_status(values["status"])
        if "name" in values:
            values["name"] = values["name"].strip()
            if not values["name"]:
                raise ValueError("project name must not be empty")

        with get_session() as db:
            project = db.get(Project, project_id)
            if project is None:
                raise KeyError(project_id)
            for field, value in values.items():
                setattr(project, field, value)
        self._projects[project_id] = project
        self.changed.emit()
        return project

    def remove(self, project_id: str) -> bool:
        """Delete a project and the points logged against it."""
        with get_session() as db:
            project = db.get(Project, project_id)
            if project is None:
                return False
            db.query(Point).filter(Point.project_id == project_id).delete()
            db.delete(project)
        self._projects.pop(project_id, None)
        logger.debug("Removed project %s", project_id)
        self.changed.emit()
        return True

    def reload(self) -> None:
        """Re-read the table (e.g. after another process changed it)."""
        self._load()
        self.changed.emit()

    def _load(self) -> None:
        with get_session() as db:
            rows = db.query(Project).order_by(Project.created_at, Project.id).all()
        self._projects = {p.id: p for p in rows}
