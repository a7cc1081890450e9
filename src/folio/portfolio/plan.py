"""Target allocation plans."""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from folio.core.models import AssetClass, RiskClass

# Plans whose percentages sum to 100 within this tolerance are valid
VALIDITY_TOLERANCE = 0.01


class PlanTargetType(str, Enum):
    """Which category universe a plan distributes over."""

    RISK_CLASS = "Risk Class"
    ASSET_CLASS = "Asset Class"

    def default_universe(self) -> list[str]:
        """All category keys for this target type, in canonical order."""
        if self is PlanTargetType.RISK_CLASS:
            return [r.value for r in RiskClass]
        return [a.value for a in AssetClass]


@dataclass(frozen=True)
class PlanDistribution:
    """Target percentage for one category key.

    Attributes:
        key: Risk class or asset class label
        percentage: Target share of the portfolio (0-100)
    """

    key: str
    percentage: float = 0.0


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class AllocationPlan:
    """A named set of target percentages per category.

    Attributes:
        name: Display label
        target_type: Whether keys are risk classes or asset classes
        distributions: Ordered target entries, keys unique
        id: Unique identifier
        created_at: Creation timestamp (UTC)
        modified_at: Last distribution change (UTC)
    """

    name: str
    target_type: PlanTargetType
    distributions: tuple[PlanDistribution, ...] = ()
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=_now)
    modified_at: datetime = field(default_factory=_now)

    @property
    def total_percentage(self) -> float:
        """Sum of all target percentages."""
        return sum(d.percentage for d in self.distributions)

    @property
    def is_valid(self) -> bool:
        """Check whether the targets add up to 100%."""
        return abs(self.total_percentage - 100.0) < VALIDITY_TOLERANCE

    @property
    def keys(self) -> list[str]:
        return [d.key for d in self.distributions]

    def get_distribution(self, key: str) -> PlanDistribution | None:
        """Get the distribution entry for a key."""
        for distribution in self.distributions:
            if distribution.key == key:
                return distribution
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to plain JSON-compatible types."""
        return {
            "id": self.id,
            "name": self.name,
            "target_type": self.target_type.value,
            "distributions": [
                {"key": d.key, "percentage": d.percentage} for d in self.distributions
            ],
            "created_at": self.created_at.isoformat(),
            "modified_at": self.modified_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AllocationPlan:
        """Rebuild a plan serialized with to_dict()."""
        return cls(
            id=data["id"],
            name=data["name"],
            target_type=PlanTargetType(data["target_type"]),
            distributions=tuple(
                PlanDistribution(key=d["key"], percentage=float(d["percentage"]))
                for d in data["distributions"]
            ),
            created_at=datetime.fromisoformat(data["created_at"]),
            modified_at=datetime.fromisoformat(data["modified_at"]),
        )


def create_plan(
    name: str,
    target_type: PlanTargetType,
    universe: Sequence[str] | None = None,
) -> AllocationPlan:
    """Create a plan with a zero-percent entry for every category key.

    Args:
        name: Display label
        target_type: Risk-class or asset-class plan
        universe: Category keys to seed, in order. Defaults to every key of
            the target type (e.g. the enabled asset classes can be passed here).

    Returns:
        New AllocationPlan
    """
    if universe is None:
        universe = target_type.default_universe()

    seen: set[str] = set()
    distributions = []
    for key in universe:
        if key in seen:
            raise ValueError(f"Duplicate category key: {key}")
        seen.add(key)
        distributions.append(PlanDistribution(key=key))

    now = _now()
    return AllocationPlan(
        name=name,
        target_type=target_type,
        distributions=tuple(distributions),
        created_at=now,
        modified_at=now,
    )


def upsert_distribution(
    plan: AllocationPlan, key: str, percentage: float
) -> AllocationPlan:
    """Return a copy of the plan with the target for ``key`` replaced.

    The entry set is fixed when the plan is created, so an unknown key leaves
    the plan untouched rather than adding an entry.
    """
    if plan.get_distribution(key) is None:
        return plan

    distributions = tuple(
        PlanDistribution(key=key, percentage=percentage) if d.key == key else d
        for d in plan.distributions
    )
    return replace(plan, distributions=distributions, modified_at=_now())


def enabled_distributions(
    plan: AllocationPlan, enabled_keys: Iterable[str]
) -> list[PlanDistribution]:
    """Get the distribution entries that take part in analysis.

    Risk classes cannot be disabled, so risk plans always return every entry.
    """
    if plan.target_type is PlanTargetType.RISK_CLASS:
        return list(plan.distributions)

    enabled = set(enabled_keys)
    return [d for d in plan.distributions if d.key in enabled]
