"""Price lookup sources and price refreshing for holdings."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from loguru import logger

from folio.core.models import AssetClass, Currency

if TYPE_CHECKING:
    from folio.portfolio.holdings import Holdings


class BasePriceSource(ABC):
    """Abstract base class for price lookups."""

    @abstractmethod
    async def fetch_price(
        self,
        code: str,
        asset_class: AssetClass,
        currency: Currency,
    ) -> float | None:
        """
        Fetch the latest price for an asset.

        Args:
            code: Ticker, ISIN or commodity code
            asset_class: Asset class, selects the upstream feed
            currency: Quote currency

        Returns:
            Latest price, or None if the source has no quote
        """
        pass


class StaticPriceSource(BasePriceSource):
    """In-memory price table, e.g. for tests or prices read from a file."""

    def __init__(self) -> None:
        self._prices: dict[tuple[str, AssetClass, Currency], float] = {}

    def set_price(
        self,
        code: str,
        asset_class: AssetClass,
        price: float,
        currency: Currency = Currency.EUR,
    ) -> None:
        """Set the price for a code of an asset class in a currency."""
        self._prices[(code.upper(), asset_class, currency)] = float(price)

    async def fetch_price(
        self,
        code: str,
        asset_class: AssetClass,
        currency: Currency,
    ) -> float | None:
        return self._prices.get((code.upper(), asset_class, currency))


async def refresh_prices(
    holdings: Holdings,
    source: BasePriceSource,
    currency: Currency = Currency.EUR,
) -> int:
    """Update current prices of all holdings from a price source.

    A lookup that raises is logged and leaves the asset's price as it was.
    A lookup that returns None clears the price.

    Args:
        holdings: Holdings to update in place
        source: Price source to query
        currency: Quote currency

    Returns:
        Number of assets whose price was updated
    """
    updated = 0
    for asset in holdings.assets:
        try:
            price = await source.fetch_price(asset.code, asset.asset_class, currency)
        except Exception as e:
            logger.error(f"Error fetching price for {asset.name}: {e}")
            continue

        asset.current_price = price
        if price is None:
            logger.warning(f"No {currency.value} price for {asset.name} ({asset.code})")
        else:
            updated += 1

    logger.info(f"Refreshed {updated}/{len(holdings.assets)} prices")
    return updated
