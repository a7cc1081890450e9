"""Core domain models and types."""

from folio.core.exceptions import FolioError, PersistenceError
from folio.core.models import Asset, AssetClass, Currency, RiskClass

__all__ = [
    "Asset",
    "AssetClass",
    "Currency",
    "FolioError",
    "PersistenceError",
    "RiskClass",
]
