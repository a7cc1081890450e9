"""YAML-based holdings file."""

from __future__ import annotations

from pathlib import Path

import yaml
from loguru import logger
from pydantic import BaseModel, Field, field_validator

from folio.core.models import Asset, AssetClass, Currency, RiskClass
from folio.data.prices import StaticPriceSource


class AssetEntry(BaseModel):
    """A single holding as written in the holdings file."""

    asset_class: AssetClass
    code: str
    name: str = ""
    amount: float = Field(ge=0)
    risk_class: RiskClass = RiskClass.MEDIUM
    price: float | None = Field(default=None, ge=0)

    @field_validator("asset_class", mode="before")
    @classmethod
    def _parse_asset_class(cls, value: object) -> object:
        if isinstance(value, str):
            return AssetClass.from_label(value)
        return value

    @field_validator("risk_class", mode="before")
    @classmethod
    def _parse_risk_class(cls, value: object) -> object:
        if isinstance(value, str):
            return RiskClass.from_label(value)
        return value

    def to_asset(self) -> Asset:
        return Asset(
            asset_class=self.asset_class,
            code=self.code,
            name=self.name or self.code,
            amount=self.amount,
            risk_class=self.risk_class,
        )


class HoldingsFile(BaseModel):
    """Root object of a holdings file."""

    currency: Currency | None = None  # Falls back to the configured currency
    assets: list[AssetEntry] = Field(default_factory=list)

    def to_assets(self) -> list[Asset]:
        return [entry.to_asset() for entry in self.assets]

    def price_source(
        self, default_currency: Currency = Currency.EUR
    ) -> StaticPriceSource:
        """Price source serving the prices written in the file.

        Prices are quoted in the file's currency, or ``default_currency`` if
        the file does not name one.
        """
        currency = self.currency or default_currency
        source = StaticPriceSource()
        for entry in self.assets:
            if entry.price is not None:
                source.set_price(entry.code, entry.asset_class, entry.price, currency)
        return source


def load_holdings(path: Path | str) -> HoldingsFile:
    """Load a holdings file.

    Args:
        path: Path to the YAML file

    Returns:
        HoldingsFile (empty if the file does not exist)

    Raises:
        ValueError: If the file is not valid YAML or has invalid entries
    """
    path = Path(path)

    if not path.exists():
        logger.debug(f"Holdings file not found at {path}, using empty holdings")
        return HoldingsFile()

    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse holdings file {path}: {e}") from e

    holdings = HoldingsFile.model_validate(data)
    logger.info(f"Loaded {len(holdings.assets)} holdings from {path}")
    return holdings


def save_holdings(holdings: HoldingsFile, path: Path | str) -> None:
    """Save a holdings file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.dump(
            holdings.model_dump(mode="json"),
            f,
            default_flow_style=False,
            sort_keys=False,
        )

    logger.info(f"Saved holdings to {path}")
