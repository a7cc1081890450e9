"""Tests for SQLite plan storage."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from unittest.mock import patch

import pytest

from folio.core.exceptions import PersistenceError
from folio.core.models import AssetClass
from folio.portfolio.plan import (
    AllocationPlan,
    PlanTargetType,
    create_plan,
    upsert_distribution,
)
from folio.portfolio.registry import PlanRegistry
from folio.storage.database import SQLitePlanStore, get_plan_store


class TestSQLitePlanStore:
    """Tests for SQLitePlanStore."""

    def test_empty_store(self, plan_store: SQLitePlanStore) -> None:
        """Test that a new database has no plans."""
        assert plan_store.load_plans() == []

    def test_creates_parent_directory(self, tmp_path: Path) -> None:
        """Test that missing directories are created."""
        store = SQLitePlanStore(tmp_path / "nested" / "dir" / "folio.db")
        assert store.db_path.parent.exists()

    def test_round_trip(
        self, plan_store: SQLitePlanStore, risk_plan: AllocationPlan
    ) -> None:
        """Test that saved plans load back unchanged."""
        asset_plan = create_plan(
            "Equities", PlanTargetType.ASSET_CLASS, ["Stocks", "ETFs"]
        )
        asset_plan = upsert_distribution(asset_plan, "ETFs", 33.333333333333336)

        plan_store.save_plans([risk_plan, asset_plan])
        loaded = plan_store.load_plans()

        assert loaded == [risk_plan, asset_plan]
        assert loaded[1].keys == ["Stocks", "ETFs"]
        assert loaded[0].created_at == risk_plan.created_at

    def test_save_replaces_previous(
        self, plan_store: SQLitePlanStore, risk_plan: AllocationPlan
    ) -> None:
        """Test that saving rewrites the whole list."""
        other = create_plan("Other", PlanTargetType.RISK_CLASS)
        plan_store.save_plans([risk_plan, other])
        plan_store.save_plans([other])

        assert plan_store.load_plans() == [other]

    def test_preserves_order(self, plan_store: SQLitePlanStore) -> None:
        """Test that plans load in saved order."""
        plans = [
            create_plan(f"Plan {i}", PlanTargetType.RISK_CLASS) for i in range(5)
        ]
        plan_store.save_plans(list(reversed(plans)))

        assert [p.name for p in plan_store.load_plans()] == [
            f"Plan {i}" for i in reversed(range(5))
        ]

    def test_save_error_raises_persistence_error(
        self, plan_store: SQLitePlanStore, risk_plan: AllocationPlan
    ) -> None:
        """Test that database errors are wrapped."""
        with (
            patch(
                "folio.storage.database.sqlite3.connect",
                side_effect=sqlite3.OperationalError("database is locked"),
            ),
            pytest.raises(PersistenceError, match="database is locked"),
        ):
            plan_store.save_plans([risk_plan])

    def test_enabled_classes_default_empty(self, plan_store: SQLitePlanStore) -> None:
        """Test that unsaved settings load as empty."""
        assert plan_store.load_enabled_classes() == []

    def test_enabled_classes_round_trip(self, plan_store: SQLitePlanStore) -> None:
        """Test saving and loading enabled asset classes."""
        plan_store.save_enabled_classes([AssetClass.STOCKS, AssetClass.ETFS])
        assert plan_store.load_enabled_classes() == [
            AssetClass.STOCKS,
            AssetClass.ETFS,
        ]

        plan_store.save_enabled_classes([AssetClass.CRYPTOCURRENCIES])
        assert plan_store.load_enabled_classes() == [AssetClass.CRYPTOCURRENCIES]

    def test_registry_survives_restart(
        self, plan_store: SQLitePlanStore, risk_plan: AllocationPlan
    ) -> None:
        """Test that registry changes are visible to a new registry."""
        registry = PlanRegistry(plan_store)
        registry.create(risk_plan)
        registry.update(upsert_distribution(risk_plan, "Low Risk", 45.0))

        reopened = PlanRegistry(SQLitePlanStore(plan_store.db_path))
        plan = reopened.get(risk_plan.id)

        assert plan is not None
        assert plan.get_distribution("Low Risk").percentage == 45.0
        assert plan.is_valid is False

    def test_duplicate_create_does_not_block_later_saves(
        self, plan_store: SQLitePlanStore, risk_plan: AllocationPlan
    ) -> None:
        """Test that a rejected duplicate leaves the store writable."""
        registry = PlanRegistry(plan_store)
        registry.create(risk_plan)
        with pytest.raises(ValueError):
            registry.create(risk_plan)

        other = registry.create(create_plan("Other", PlanTargetType.RISK_CLASS))

        assert plan_store.load_plans() == [risk_plan, other]


class TestGetPlanStore:
    """Tests for get_plan_store."""

    def test_custom_path(self, tmp_path: Path) -> None:
        """Test that a custom path creates a new store."""
        store = get_plan_store(tmp_path / "a.db")
        assert store.db_path == tmp_path / "a.db"

    def test_cached_instance(self, tmp_path: Path) -> None:
        """Test that the store is reused when no path is given."""
        store = get_plan_store(tmp_path / "b.db")
        assert get_plan_store() is store

    def test_same_path_reuses_instance(self, tmp_path: Path) -> None:
        """Test that asking again for the same path returns the same store."""
        store = get_plan_store(tmp_path / "c.db")

        assert get_plan_store(tmp_path / "c.db") is store
        assert get_plan_store(str(tmp_path / "c.db")) is store
        assert get_plan_store(tmp_path / "d.db") is not store
