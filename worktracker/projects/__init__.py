"""Projects package."""

from .registry import ProjectRegistry, PROJECT_STATUSES

__all__ = ["ProjectRegistry", "PROJECT_STATUSES"]
