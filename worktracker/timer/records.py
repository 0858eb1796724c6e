"""Timer records: the persisted ``TimerState`` and the in-memory
``StoppedSession`` handed to whoever logs the finished work.

The persisted JSON uses camelCase keys and an ISO-8601 ``startedAt`` with
millisecond precision and a ``Z`` suffix::

    {"projectId": "p1", "taskId": null, "taskDescription": null,
     "startedAt": "2026-10-19T09:30:00.000Z", "isRunning": true}
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone


def format_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with milliseconds, e.g. ``2026-10-19T09:30:00.000Z``."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp.  Naive values are taken as UTC.

    Raises ``ValueError`` for anything unparseable.
    """
    if not isinstance(value, str):
        raise ValueError(f"timestamp must be a string, got {type(value).__name__}")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    try:
        return moment.astimezone(timezone.utc)
    except OverflowError as exc:
        # e.g. 0001-01-01 with a positive offset falls before datetime.min
        raise ValueError(f"timestamp out of range: {value!r}") from exc


def elapsed_between(started_at: datetime, now: datetime) -> int:
    """Whole seconds from ``started_at`` to ``now``; never negative."""
    seconds = (now - started_at).total_seconds()
    return max(0, math.floor(seconds))


@dataclass(frozen=True)
class TimerState:
    """The running-timer record.  Never edited in place: a session either
    exists (``is_running``) or its record is deleted."""

    project_id: str
    started_at: datetime
    task_id: str | None = None
    task_description: str | None = None
    is_running: bool = True

    def elapsed(self, now: datetime) -> int:
        return elapsed_between(self.started_at, now)

    def to_dict(self) -> dict:
        return {
            "projectId": self.project_id,
            "taskId": self.task_id,
            "taskDescription": self.task_description,
            "startedAt": format_timestamp(self.started_at),
            "isRunning": self.is_running,
        }

    @classmethod
    def from_dict(cls, data: dict) -> TimerState:
        """Build from the persisted mapping.

        Raises ``ValueError`` / ``KeyError`` / ``TypeError`` on malformed
        input; callers treat any of those as "no timer".
        """
        project_id = data["projectId"]
        if not isinstance(project_id, str) or not project_id:
            raise ValueError("projectId must be a non-empty string")
        return cls(
            project_id=project_id,
            started_at=parse_timestamp(data["startedAt"]),
            task_id=data.get("taskId"),
            task_description=data.get("taskDescription"),
            is_running=bool(data.get("isRunning", False)),
        )


@dataclass(frozen=True)
class StoppedSession:
    """A finished session waiting to be logged.  Never persisted."""

    project_id: str
    started_at: datetime
    elapsed_seconds: int
    task_id: str | None = None
    task_description: str | None = None

    @classmethod
    def from_state(cls, state: TimerState, elapsed_seconds: int) -> StoppedSession:
        return cls(
            project_id=state.project_id,
            started_at=state.started_at,
            elapsed_seconds=elapsed_seconds,
            task_id=state.task_id,
            task_description=state.task_description,
        )
