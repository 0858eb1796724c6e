"""Tests for the project registry."""

import pytest

from worktracker.database.db import get_session
from worktracker.database.models import Point, Project
from worktracker.projects.registry import ProjectRegistry, PROJECT_STATUSES, new_id

from helpers import SignalCollector


class TestMembership:

    def test_starts_empty(self, registry):
        assert len(registry) == 0
        assert registry.project_ids() == frozenset()

    def test_add(self, registry):
        project = registry.add("Website revamp", customer_id="c1")
        assert project.id in registry
        assert registry.get(project.id).name == "Website revamp"
        assert project.customer_id == "c1"
        assert project.status == "Active"

    def test_add_strips_name(self, registry):
        assert registry.add("  Infra  ").name == "Infra"

    def test_add_rejects_blank_name(self, registry):
        with pytest.raises(ValueError):
            registry.add("   ")

    def test_add_rejects_unknown_status(self, registry):
        with pytest.raises(ValueError):
            registry.add("Infra", status="Paused")

    def test_statuses(self):
        assert PROJECT_STATUSES == ("Active", "On Hold", "Completed")

    def test_active_projects(self, registry):
        a = registry.add("A")
        registry.add("B", status="On Hold")
        c = registry.add("C")
        registry.add("D", status="Completed")
        assert [p.id for p in registry.active_projects()] == [a.id, c.id]

    def test_ids_are_unique(self):
        assert len({new_id() for _ in range(200)}) == 200


class TestMutations:

    def test_update(self, registry):
        project = registry.add("A")
        registry.update(project.id, status="On Hold", name="A2")
        assert registry.get(project.id).status == "On Hold"
        assert registry.get(project.id).name == "A2"
        with get_session() as db:
            assert db.get(Project, project.id).status == "On Hold"

    def test_update_unknown_project(self, registry):
        with pytest.raises(KeyError):
            registry.update("missing", name="X")

    def test_update_rejects_unknown_field(self, registry):
        project = registry.add("A")
        with pytest.raises(TypeError):
            registry.update(project.id, id="hijack")

    def test_update_rejects_bad_status(self, registry):
        project = registry.add("A")
        with pytest.raises(ValueError):
            registry.update(project.id, status="Archived")

    def test_remove(self, registry):
        project = registry.add("A")
        assert registry.remove(project.id) is True
        assert project.id not in registry
        with get_session() as db:
            assert db.get(Project, project.id) is None

    def test_remove_deletes_points(self, registry):
        keep = registry.add("Keep")
        drop = registry.add("Drop")
        with get_session() as db:
            db.add(Point(project_id=keep.id, points=1, hours=1, activity_type="Reporting"))
            db.add(Point(project_id=drop.id, points=2, hours=1, activity_type="Reporting"))

        registry.remove(drop.id)

        with get_session() as db:
            assert [p.project_id for p in db.query(Point).all()] == [keep.id]

    def test_remove_missing_returns_false(self, registry):
        c = SignalCollector()
        registry.changed.connect(c)
        assert registry.remove("missing") is False
        assert len(c) == 0


class TestChangedSignal:

    def test_every_mutation_emits(self, registry):
        c = SignalCollector()
        registry.changed.connect(c)

        project = registry.add("A")
        registry.update(project.id, name="B")
        registry.remove(project.id)
        registry.reload()

        assert len(c) == 4

    def test_reload_sees_external_rows(self, registry):
        with get_session() as db:
            db.add(Project(id="ext1", name="Imported", status="Active"))

        assert "ext1" not in registry
        registry.reload()
        assert "ext1" in registry

    def test_new_registry_loads_existing(self, qapp, registry):
        project = registry.add("A")
        assert project.id in ProjectRegistry()
