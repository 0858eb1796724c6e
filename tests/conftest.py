"""Shared pytest fixtures for WorkTracker tests."""

import sys
import pytest

from PyQt6.QtCore import QCoreApplication

from worktracker.database.db import configure_engine, init_db
from worktracker.projects.registry import ProjectRegistry
from worktracker.storage import MemoryStorageArea
from worktracker.timer.engine import TimerEngine
from worktracker.timer.store import TimerStore

from helpers import FakeClock


@pytest.fixture(scope="session")
def qapp():
    """A single QCoreApplication instance shared across the entire test run."""
    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def clock():
    """Simulated wall clock, advanced by hand."""
    return FakeClock()


@pytest.fixture
def area():
    """Shared storage area, one per test."""
    return MemoryStorageArea()


@pytest.fixture
def store(qapp, area):
    """Timer store on the first context ("tab") of the area."""
    return TimerStore(area.context())


@pytest.fixture
def engine(qapp, store, clock):
    """Fresh TimerEngine on an empty store."""
    eng = TimerEngine(store, clock=clock)
    yield eng
    eng.shutdown()


@pytest.fixture
def registry(qapp):
    """Project registry on the fresh test database."""
    return ProjectRegistry()
