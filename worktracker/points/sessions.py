"""Turning stopped timer sessions into logged point entries.

The save flow mirrors the "Save Session" form: hours are pre-filled from
the elapsed time and stay editable, points and an activity type must be
supplied by the user.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from sqlalchemy import func

from ..database.db import get_session
from ..database.models import Point

if TYPE_CHECKING:
    from ..timer.records import StoppedSession


logger = logging.getLogger(__name__)

ACTIVITY_TYPES = (
    "Sending Email",
    "Joining Meeting",
    "Troubleshoot / Firefighting",
    "Configuration",
    "Reporting",
    "Task Review",
)


class SessionValidationError(ValueError):
    """Raised by :func:`save_session` with a ``{field: message}`` dict."""

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = errors
        super().__init__(
            "; ".join(f"{field}: {msg}" for field, msg in errors.items())
        )


# ── helpers ──────────────────────────────────────────────────────────────


def format_hms(total_seconds: int) -> str:
    """``3661`` → ``"01:01:01"``."""
    total_seconds = max(0, int(total_seconds))
    h, rem = divmod(total_seconds, 3600)
    m, s = divmod(rem, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


def prefill_hours(elapsed_seconds: int) -> float:
    return round(elapsed_seconds / 3600, 2)


def _as_number(value) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def validate_entry(points, hours, activity_type) -> dict[str, str]:
    """Return field errors; an empty dict means the entry is valid."""
    errors: dict[str, str] = {}
    p = _as_number(points)
    if p is None or p <= 0:
        errors["points"] = "Enter a valid positive number"
    h = _as_number(hours)
    if h is None or h < 0:
        errors["hours"] = "Enter a valid number"
    if activity_type not in ACTIVITY_TYPES:
        errors["activity_type"] = "Select an activity type"
    return errors


# ── persistence ──────────────────────────────────────────────────────────


def save_session(
    session: StoppedSession,
    *,
    points,
    activity_type: str,
    hours=None,
    comment: str = "",
) -> Point:
    """Log ``session`` as a point entry and return the stored row."""
    if hours is None:
        hours = prefill_hours(session.elapsed_seconds)
    errors = validate_entry(points, hours, activity_type)
    if errors:
        raise SessionValidationError(errors)

    comment = comment.strip() or (session.task_description or "")
    with get_session() as db:
        entry = Point(
            project_id=session.project_id,
            task_id=session.task_id,
            points=float(points),
            hours=float(hours),
            activity_type=activity_type,
            comment=comment,
        )
        db.add(entry)
        db.flush()
    logger.info(
        "Logged %s points / %sh for project %s", entry.points, entry.hours,
        entry.project_id,
    )
    return entry


def project_totals(project_id: str) -> tuple[float, float]:
    """Sum of ``(points, hours)`` logged against a project."""
    with get_session() as db:
        total_points, total_hours = (
            db.query(
                func.coalesce(func.sum(Point.points), 0.0),
                func.coalesce(func.sum(Point.hours), 0.0),
            )
            .filter(Point.project_id == project_id)
            .one()
        )
    return float(total_points), float(total_hours)
