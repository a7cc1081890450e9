"""Portfolio plans, valuation and rebalancing."""

from folio.portfolio.holdings import AssetClassSettings, Holdings
from folio.portfolio.plan import (
    AllocationPlan,
    PlanDistribution,
    PlanTargetType,
    create_plan,
    enabled_distributions,
    upsert_distribution,
)
from folio.portfolio.rebalance import (
    PlanAnalysis,
    RebalancingDiscrepancy,
    analyze,
    analyze_plan,
)
from folio.portfolio.registry import PlanRegistry, PlanStore

__all__ = [
    "AllocationPlan",
    "AssetClassSettings",
    "Holdings",
    "PlanAnalysis",
    "PlanDistribution",
    "PlanRegistry",
    "PlanStore",
    "PlanTargetType",
    "RebalancingDiscrepancy",
    "analyze",
    "analyze_plan",
    "create_plan",
    "enabled_distributions",
    "upsert_distribution",
]
