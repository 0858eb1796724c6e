"""Point logging package."""

from .sessions import (
    ACTIVITY_TYPES,
    SessionValidationError,
    format_hms,
    prefill_hours,
    project_totals,
    save_session,
    validate_entry,
)

__all__ = [
    "ACTIVITY_TYPES",
    "SessionValidationError",
    "format_hms",
    "prefill_hours",
    "project_totals",
    "save_session",
    "validate_entry",
]
