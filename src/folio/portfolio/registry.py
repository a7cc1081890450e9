"""Registry of allocation plans backed by a plan store."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Protocol

from loguru import logger

from folio.core.exceptions import PersistenceError
from folio.portfolio.plan import PlanTargetType
from folio.portfolio.rebalance import PlanAnalysis, analyze_plan

if TYPE_CHECKING:
    from folio.portfolio.holdings import Holdings
    from folio.portfolio.plan import AllocationPlan


class PlanStore(Protocol):
    """Persistence collaborator for plans."""

    def load_plans(self) -> list[AllocationPlan]: ...

    def save_plans(self, plans: list[AllocationPlan]) -> None: ...


class PlanRegistry:
    """
    Ordered collection of plans that saves itself after every change.

    Mutations and saves run under one lock. If a save fails the change stays
    in memory and PersistenceError is raised; the next successful save
    writes it out.

    Example:
        registry = PlanRegistry(get_plan_store())
        plan = create_plan("Balanced", PlanTargetType.RISK_CLASS)
        registry.create(plan)
        analysis = registry.analyze(plan, holdings)
    """

    def __init__(self, store: PlanStore) -> None:
        """Initialize the registry and load existing plans.

        Args:
            store: Plan store used for loading and saving
        """
        self.store = store
        self._lock = threading.Lock()
        self._plans: list[AllocationPlan] = list(store.load_plans())
        logger.debug(f"Loaded {len(self._plans)} plans")

    @property
    def plans(self) -> list[AllocationPlan]:
        """Snapshot of all plans in creation order."""
        with self._lock:
            return list(self._plans)

    def get(self, plan_id: str) -> AllocationPlan | None:
        """Get a plan by id."""
        with self._lock:
            for plan in self._plans:
                if plan.id == plan_id:
                    return plan
        return None

    def create(self, plan: AllocationPlan) -> AllocationPlan:
        """Append a plan and save.

        Raises:
            ValueError: If a plan with the same id is already registered
        """
        with self._lock:
            if any(p.id == plan.id for p in self._plans):
                raise ValueError(f"Plan {plan.id} already exists")
            self._plans.append(plan)
            self._save()
        logger.info(f"Created plan '{plan.name}' ({plan.id})")
        return plan

    def update(self, plan: AllocationPlan) -> bool:
        """Replace the plan with the same id and save.

        Returns:
            True if the plan was found, False otherwise (nothing is saved)
        """
        with self._lock:
            for i, existing in enumerate(self._plans):
                if existing.id == plan.id:
                    self._plans[i] = plan
                    self._save()
                    break
            else:
                logger.warning(f"Plan {plan.id} not found, update ignored")
                return False
        logger.info(f"Updated plan '{plan.name}' ({plan.id})")
        return True

    def delete(self, plan_id: str) -> bool:
        """Remove a plan by id and save.

        Returns:
            True if a plan was removed
        """
        with self._lock:
            before = len(self._plans)
            self._plans = [p for p in self._plans if p.id != plan_id]
            deleted = len(self._plans) < before
            self._save()
        if deleted:
            logger.info(f"Deleted plan {plan_id}")
        return deleted

    def _save(self) -> None:
        """Write the full plan list. Caller must hold the lock."""
        try:
            self.store.save_plans(list(self._plans))
        except PersistenceError:
            logger.error("Failed to save plans")
            raise
        except Exception as e:
            logger.error(f"Failed to save plans: {e}")
            raise PersistenceError(f"Failed to save plans: {e}") from e

    def analyze(self, plan: AllocationPlan, holdings: Holdings) -> PlanAnalysis:
        """Analyze a plan against the current holdings.

        Risk plans use the risk-class distribution of the holdings. Asset
        plans use the enabled asset classes only.

        Args:
            plan: Plan to analyze
            holdings: Holdings providing current values and enabled classes

        Returns:
            PlanAnalysis for the plan
        """
        total_value = holdings.total_value

        if plan.target_type is PlanTargetType.RISK_CLASS:
            current_distribution = holdings.risk_class_distribution()
            enabled = None
        else:
            current_distribution = holdings.asset_class_distribution()
            enabled = holdings.settings.enabled_classes

        return analyze_plan(plan, current_distribution, total_value, enabled)
