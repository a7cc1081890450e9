"""Core domain models for holdings and allocation categories."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum


class AssetClass(str, Enum):
    """Asset class a holding belongs to.

    The value doubles as the category key used by asset-class plans.
    """

    RAW_MATERIALS = "Raw Materials"
    CRYPTOCURRENCIES = "Cryptocurrencies"
    STOCKS = "Stocks"
    ETFS = "ETFs"

    @classmethod
    def from_label(cls, label: str) -> AssetClass:
        """Look up an asset class by its label (case-insensitive)."""
        for asset_class in cls:
            if asset_class.value.lower() == label.strip().lower():
                return asset_class
        available = ", ".join(a.value for a in cls)
        raise ValueError(f"Unknown asset class: {label}. Available: {available}")


class RiskClass(str, Enum):
    """Risk bucket a holding belongs to."""

    HIGH = "High Risk"
    MEDIUM = "Medium Risk"
    LOW = "Low Risk"

    @classmethod
    def from_label(cls, label: str) -> RiskClass:
        """Look up a risk class by label, accepting "High" as well as "High Risk"."""
        cleaned = label.strip().lower()
        for risk_class in cls:
            value = risk_class.value.lower()
            if cleaned in (value, value.replace(" risk", "")):
                return risk_class
        available = ", ".join(r.value for r in cls)
        raise ValueError(f"Unknown risk class: {label}. Available: {available}")


class Currency(str, Enum):
    """Quote currency for prices."""

    USD = "USD"
    EUR = "EUR"


@dataclass
class Asset:
    """A single holding in the portfolio.

    Attributes:
        asset_class: Asset class of the holding
        code: Ticker, ISIN or commodity code used for price lookups
        name: Display name
        amount: Quantity held
        risk_class: Risk bucket (defaults to medium)
        current_price: Last known price, None until fetched
    """

    asset_class: AssetClass
    code: str
    name: str
    amount: float
    risk_class: RiskClass = RiskClass.MEDIUM
    current_price: float | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def value(self) -> float:
        """Market value of the holding (0 if the price is unknown)."""
        return self.amount * (self.current_price or 0.0)
