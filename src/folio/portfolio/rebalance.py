"""Additions-only rebalancing engine for allocation plans."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from loguru import logger

from folio.portfolio.plan import enabled_distributions

if TYPE_CHECKING:
    from folio.core.models import AssetClass
    from folio.portfolio.plan import AllocationPlan, PlanDistribution

# Percentage-point change below which a category is considered balanced
REBALANCE_TOLERANCE = 0.01


@dataclass(frozen=True)
class RebalancingDiscrepancy:
    """Gap between current and target allocation for one category.

    Attributes:
        key: Category key
        current_percentage: Current share of the portfolio (0-100)
        target_percentage: Target share from the plan (0-100)
        current_value: Current value of the category
        target_value: Value the category should reach in the projected portfolio
        discrepancy_value: Amount to add (never negative, nothing is sold)
        discrepancy_percentage: Projected share minus current share
    """

    key: str
    current_percentage: float
    target_percentage: float
    current_value: float
    target_value: float
    discrepancy_value: float
    discrepancy_percentage: float

    @property
    def needs_rebalancing(self) -> bool:
        """Check if the category moves by more than the tolerance."""
        return abs(self.discrepancy_percentage) > REBALANCE_TOLERANCE


@dataclass
class PlanAnalysis:
    """Result of analyzing a plan against the current portfolio.

    Attributes:
        plan: The analyzed plan
        discrepancies: One entry per participating category, in plan order
        total_portfolio_value: Portfolio value before any additions
        projected_total_value: Portfolio value after the suggested additions
    """

    plan: AllocationPlan
    discrepancies: list[RebalancingDiscrepancy] = field(default_factory=list)
    total_portfolio_value: float = 0.0
    projected_total_value: float = 0.0

    @property
    def is_rebalancing_needed(self) -> bool:
        """Check if any category needs rebalancing."""
        return any(d.needs_rebalancing for d in self.discrepancies)

    @property
    def total_rebalancing_amount(self) -> float:
        """Total amount to add across all categories."""
        return sum(d.discrepancy_value for d in self.additions)

    @property
    def additions(self) -> list[RebalancingDiscrepancy]:
        """Get categories that receive money."""
        return [d for d in self.discrepancies if d.discrepancy_value > 0]


def analyze(
    distributions: Sequence[PlanDistribution],
    current_distribution: Mapping[str, float],
    total_value: float,
) -> tuple[list[RebalancingDiscrepancy], float]:
    """Compute the additions that bring a portfolio closest to its targets.

    Money is only ever added to underfunded categories. The new total N is
    chosen so that every underfunded category reaches exactly its target
    share of N. With P the summed target fraction and C the summed current
    value of the underfunded categories, and X the amount added:

        X = N * P - C  and  N = total_value + X
        =>  X * (1 - P) = total_value * P - C
        =>  X = (total_value * P - C) / (1 - P)

    When no non-negative X exists (P >= 1, or the numerator is negative) the
    targets cannot be met by additions alone and N falls back to total_value.

    Args:
        distributions: Target entries (key, percentage 0-100), keys unique
        current_distribution: Current percentage per key; missing keys are 0
        total_value: Current portfolio value (>= 0)

    Returns:
        Tuple of (discrepancies in input order, projected total value)
    """
    current_values = {
        d.key: total_value * current_distribution.get(d.key, 0.0) / 100.0
        for d in distributions
    }

    underfunded_target = 0.0
    underfunded_value = 0.0
    underfunded_count = 0
    overfunded_value = 0.0

    for distribution in distributions:
        current_pct = current_distribution.get(distribution.key, 0.0)
        if current_pct < distribution.percentage:
            underfunded_target += distribution.percentage / 100.0
            underfunded_value += current_values[distribution.key]
            underfunded_count += 1
        else:
            overfunded_value += current_values[distribution.key]

    if underfunded_count == 0:
        discrepancies = []
        for distribution in distributions:
            current_pct = current_distribution.get(distribution.key, 0.0)
            current_value = current_values[distribution.key]
            discrepancies.append(
                RebalancingDiscrepancy(
                    key=distribution.key,
                    current_percentage=current_pct,
                    target_percentage=distribution.percentage,
                    current_value=current_value,
                    target_value=current_value,
                    discrepancy_value=0.0,
                    discrepancy_percentage=distribution.percentage - current_pct,
                )
            )
        return discrepancies, total_value

    new_total = total_value
    if underfunded_target < 1.0:
        numerator = total_value * underfunded_target - underfunded_value
        denominator = 1.0 - underfunded_target
        if denominator > 0 and numerator >= 0:
            new_total = total_value + numerator / denominator
        else:
            logger.debug(
                f"Targets unreachable by additions (numerator {numerator:.4f}), "
                "keeping current total"
            )
    else:
        logger.debug(
            f"Underfunded targets sum to {underfunded_target * 100:.2f}%, "
            "keeping current total"
        )

    logger.debug(
        f"Rebalance: {underfunded_count} underfunded, "
        f"overfunded value {overfunded_value:.2f}, "
        f"total {total_value:.2f} -> {new_total:.2f}"
    )

    discrepancies = []
    for distribution in distributions:
        current_pct = current_distribution.get(distribution.key, 0.0)
        current_value = current_values[distribution.key]

        target_value = new_total * distribution.percentage / 100.0
        discrepancy_value = max(0.0, target_value - current_value)

        final_value = current_value + discrepancy_value
        if new_total > 0:
            final_pct = final_value / new_total * 100.0
        else:
            final_pct = current_pct

        discrepancies.append(
            RebalancingDiscrepancy(
                key=distribution.key,
                current_percentage=current_pct,
                target_percentage=distribution.percentage,
                current_value=current_value,
                target_value=target_value,
                discrepancy_value=discrepancy_value,
                discrepancy_percentage=final_pct - current_pct,
            )
        )

    return discrepancies, new_total


def analyze_plan(
    plan: AllocationPlan,
    current_distribution: Mapping[str, float],
    total_value: float,
    enabled_asset_classes: Iterable[AssetClass] | None = None,
) -> PlanAnalysis:
    """Analyze a plan against the current distribution.

    Args:
        plan: Plan to analyze
        current_distribution: Current percentage per category key
        total_value: Current portfolio value
        enabled_asset_classes: If given, asset-class plans only consider these

    Returns:
        PlanAnalysis with one discrepancy per participating category
    """
    if enabled_asset_classes is not None:
        distributions = enabled_distributions(
            plan, (a.value for a in enabled_asset_classes)
        )
    else:
        distributions = list(plan.distributions)

    discrepancies, projected_total = analyze(
        distributions, current_distribution, total_value
    )

    return PlanAnalysis(
        plan=plan,
        discrepancies=discrepancies,
        total_portfolio_value=total_value,
        projected_total_value=projected_total,
    )
