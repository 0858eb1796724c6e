"""Database connection and session management."""

from pathlib import Path
from contextlib import contextmanager

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import sessionmaker, Session as OrmSession

from .models import Base

# ── paths ────────────────────────────────────────────────────────────────────

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "WorkTracker"
DB_PATH = APP_SUPPORT_DIR / "worktracker.db"

# ── engine & session factory (created lazily) ─────────────────────────────

_engine = None
_SessionFactory = None


def _get_engine():
    global _engine
    if _engine is None:
        APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
        _engine = create_engine(
            f"sqlite:///{DB_PATH}",
            connect_args={"check_same_thread": False},
            echo=False,
        )
    return _engine


def _get_session_factory():
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=_get_engine(), expire_on_commit=False)
    return _SessionFactory


# ── public API ────────────────────────────────────────────────────────────


def configure_engine(url: str) -> None:
    """Override the database connection URL.  Used by tests to point at
    an in-memory SQLite database instead of the real one on disk."""
    global _engine, _SessionFactory
    _SessionFactory = None
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    _engine = create_engine(url, connect_args=connect_args, echo=False)


def _run_migrations(engine) -> None:
    """Schema migrations for existing databases.

    Runs after ``create_all`` so new columns exist in fresh installs.
    Each migration is idempotent.
    """
    insp = inspect(engine)
    table_names = set(insp.get_table_names())

    with engine.connect() as conn:
        # ── M1: points gained a task_id column (task-level timers) ─────
        if "points" in table_names:
            columns = {c["name"] for c in insp.get_columns("points")}
            if "task_id" not in columns:
                conn.execute(text(
                    "ALTER TABLE points ADD COLUMN task_id VARCHAR(32)"
                ))

        # ── M2: normalise legacy lower-case project statuses ───────────
        if "projects" in table_names:
            _status_renames = {
                "active": "Active",
                "on hold": "On Hold",
                "on_hold": "On Hold",
                "completed": "Completed",
            }
            for old, new in _status_renames.items():
                conn.execute(text(
                    "UPDATE projects SET status = :new WHERE status = :old"
                ), {"old": old, "new": new})

        conn.commit()


def init_db() -> None:
    """Create all tables and run migrations."""
    engine = _get_engine()
    Base.metadata.create_all(engine)
    _run_migrations(engine)


@contextmanager
def get_session():
    """Yield a SQLAlchemy session; commit on success, rollback on error."""
    factory = _get_session_factory()
    session: OrmSession = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def configure_from_settings(settings) -> None:
    """Use ``settings.database_url`` when set; otherwise keep the default
    file under Application Support."""
    if settings.database_url:
        configure_engine(settings.database_url)
