"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from folio.core.models import Asset, AssetClass, RiskClass
from folio.portfolio.holdings import AssetClassSettings, Holdings
from folio.portfolio.plan import (
    AllocationPlan,
    PlanTargetType,
    create_plan,
    upsert_distribution,
)
from folio.storage.database import SQLitePlanStore


@pytest.fixture
def sample_assets() -> list[Asset]:
    """Create sample holdings worth 10,000 in total."""
    return [
        Asset(
            asset_class=AssetClass.CRYPTOCURRENCIES,
            code="BTC",
            name="Bitcoin",
            amount=0.05,
            risk_class=RiskClass.HIGH,
            current_price=40_000.0,
        ),  # 2,000
        Asset(
            asset_class=AssetClass.STOCKS,
            code="US0378331005",
            name="Apple",
            amount=20,
            risk_class=RiskClass.MEDIUM,
            current_price=150.0,
        ),  # 3,000
        Asset(
            asset_class=AssetClass.ETFS,
            code="IE00B5BMR087",
            name="iShares Core S&P 500",
            amount=10,
            risk_class=RiskClass.LOW,
            current_price=400.0,
        ),  # 4,000
        Asset(
            asset_class=AssetClass.RAW_MATERIALS,
            code="XAU",
            name="Gold",
            amount=0.5,
            risk_class=RiskClass.LOW,
            current_price=2_000.0,
        ),  # 1,000
    ]


@pytest.fixture
def sample_holdings(sample_assets: list[Asset]) -> Holdings:
    """Create holdings with every asset class enabled."""
    return Holdings(sample_assets, AssetClassSettings())


@pytest.fixture
def risk_plan() -> AllocationPlan:
    """Create a valid 20/30/50 risk plan."""
    plan = create_plan("Balanced", PlanTargetType.RISK_CLASS)
    plan = upsert_distribution(plan, "High Risk", 20.0)
    plan = upsert_distribution(plan, "Medium Risk", 30.0)
    return upsert_distribution(plan, "Low Risk", 50.0)


@pytest.fixture
def plan_store(tmp_path: Path) -> SQLitePlanStore:
    """Create a plan store in a temporary directory."""
    return SQLitePlanStore(tmp_path / "folio.db")
