"""Holdings valuation and enabled asset classes."""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from folio.core.models import Asset, AssetClass, RiskClass


class AssetClassSettings:
    """Set of asset classes that take part in valuation and analysis.

    An empty set is never kept: it resets to every class enabled.
    """

    def __init__(self, enabled: Iterable[AssetClass] | None = None) -> None:
        self._enabled: set[AssetClass] = set(enabled or ())
        self._ensure_not_empty()

    def _ensure_not_empty(self) -> None:
        if not self._enabled:
            self._enabled = set(AssetClass)

    def is_enabled(self, asset_class: AssetClass) -> bool:
        return asset_class in self._enabled

    def toggle(self, asset_class: AssetClass) -> None:
        """Flip whether an asset class is enabled."""
        self.set_enabled(asset_class, not self.is_enabled(asset_class))

    def set_enabled(self, asset_class: AssetClass, enabled: bool) -> None:
        """Enable or disable an asset class."""
        if enabled:
            self._enabled.add(asset_class)
        else:
            self._enabled.discard(asset_class)
            if not self._enabled:
                logger.warning("All asset classes disabled, re-enabling all")
        self._ensure_not_empty()

    @property
    def enabled_classes(self) -> list[AssetClass]:
        """Enabled asset classes in canonical order."""
        return [a for a in AssetClass if a in self._enabled]


class Holdings:
    """
    Collection of assets with valuation helpers.

    Only assets of enabled asset classes count towards values and
    percentages. Percentages are on a 0-100 scale and are 0 when the
    portfolio has no value.

    Example:
        holdings = Holdings(settings=AssetClassSettings())
        holdings.add(Asset(AssetClass.STOCKS, "US0378331005", "Apple", 10))
        holdings.risk_class_distribution()
    """

    def __init__(
        self,
        assets: Iterable[Asset] | None = None,
        settings: AssetClassSettings | None = None,
    ) -> None:
        self.assets: list[Asset] = list(assets) if assets is not None else []
        self.settings = settings or AssetClassSettings()

    def add(self, asset: Asset) -> Asset:
        """Add an asset, merging into an existing one with the same code and class.

        Returns:
            The stored asset (the existing one if merged)
        """
        for existing in self.assets:
            if (existing.code, existing.asset_class) == (asset.code, asset.asset_class):
                existing.amount += asset.amount
                logger.info(
                    f"Updated {existing.name} ({existing.code}): "
                    f"added {asset.amount}, new total {existing.amount}"
                )
                return existing

        self.assets.append(asset)
        logger.info(f"Added {asset.name} ({asset.code}) with amount {asset.amount}")
        return asset

    def update(self, asset: Asset) -> bool:
        """Replace the asset with the same id. Returns False if not found."""
        for i, existing in enumerate(self.assets):
            if existing.id == asset.id:
                self.assets[i] = asset
                return True
        return False

    def remove(self, asset_id: str) -> bool:
        """Remove an asset by id. Returns False if not found."""
        before = len(self.assets)
        self.assets = [a for a in self.assets if a.id != asset_id]
        return len(self.assets) < before

    def assets_for_class(self, asset_class: AssetClass) -> list[Asset]:
        if not self.settings.is_enabled(asset_class):
            return []
        return [a for a in self.assets if a.asset_class == asset_class]

    def assets_for_risk(self, risk_class: RiskClass) -> list[Asset]:
        return [
            a
            for a in self.assets
            if a.risk_class == risk_class and self.settings.is_enabled(a.asset_class)
        ]

    @property
    def total_value(self) -> float:
        """Value of all assets in enabled classes."""
        return sum(
            a.value for a in self.assets if self.settings.is_enabled(a.asset_class)
        )

    def value_for_class(self, asset_class: AssetClass) -> float:
        return sum(a.value for a in self.assets_for_class(asset_class))

    def value_for_risk(self, risk_class: RiskClass) -> float:
        return sum(a.value for a in self.assets_for_risk(risk_class))

    def _percentage(self, value: float) -> float:
        total = self.total_value
        return value / total * 100.0 if total > 0 else 0.0

    def percentage_for_class(self, asset_class: AssetClass) -> float:
        return self._percentage(self.value_for_class(asset_class))

    def percentage_for_risk(self, risk_class: RiskClass) -> float:
        return self._percentage(self.value_for_risk(risk_class))

    def percentage_for_asset(self, asset: Asset) -> float:
        return self._percentage(asset.value)

    def asset_class_distribution(self) -> dict[str, float]:
        """Current percentage per enabled asset class, keyed by label."""
        return {
            a.value: self.percentage_for_class(a) for a in self.settings.enabled_classes
        }

    def risk_class_distribution(self) -> dict[str, float]:
        """Current percentage per risk class, keyed by label."""
        return {r.value: self.percentage_for_risk(r) for r in RiskClass}
