"""Database package."""

from .db import configure_engine, configure_from_settings, get_session, init_db
from .models import Project, Point, StorageItem

__all__ = [
    "configure_engine", "configure_from_settings", "get_session", "init_db",
    "Project", "Point", "StorageItem",
]
