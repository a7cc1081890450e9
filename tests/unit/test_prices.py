"""Tests for price sources and price refreshing."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from folio.core.models import Asset, AssetClass, Currency
from folio.data.prices import BasePriceSource, StaticPriceSource, refresh_prices
from folio.portfolio.holdings import Holdings


class TestStaticPriceSource:
    """Tests for StaticPriceSource."""

    @pytest.mark.asyncio
    async def test_set_and_fetch(self) -> None:
        """Test fetching a price that was set."""
        source = StaticPriceSource()
        crypto = AssetClass.CRYPTOCURRENCIES
        source.set_price("btc", crypto, 40_000.0, Currency.USD)

        assert await source.fetch_price("BTC", crypto, Currency.USD) == 40_000.0
        assert await source.fetch_price("BTC", crypto, Currency.EUR) is None

    @pytest.mark.asyncio
    async def test_unknown_code(self) -> None:
        """Test that unknown codes return None."""
        source = StaticPriceSource()
        price = await source.fetch_price("XAU", AssetClass.RAW_MATERIALS, Currency.EUR)
        assert price is None

    @pytest.mark.asyncio
    async def test_same_code_in_different_classes(self) -> None:
        """Test that prices are kept apart per asset class."""
        source = StaticPriceSource()
        source.set_price("GOLD", AssetClass.RAW_MATERIALS, 2_000.0)
        source.set_price("GOLD", AssetClass.STOCKS, 20.0)

        raw = await source.fetch_price("GOLD", AssetClass.RAW_MATERIALS, Currency.EUR)
        stock = await source.fetch_price("GOLD", AssetClass.STOCKS, Currency.EUR)
        assert (raw, stock) == (2_000.0, 20.0)


class TestRefreshPrices:
    """Tests for refresh_prices."""

    @pytest.fixture
    def holdings(self) -> Holdings:
        """Create holdings without prices."""
        return Holdings(
            [
                Asset(AssetClass.CRYPTOCURRENCIES, "BTC", "Bitcoin", 0.5),
                Asset(AssetClass.STOCKS, "US0378331005", "Apple", 10),
            ]
        )

    @pytest.mark.asyncio
    async def test_updates_prices(self, holdings: Holdings) -> None:
        """Test that prices are set from the source."""
        source = StaticPriceSource()
        source.set_price("BTC", AssetClass.CRYPTOCURRENCIES, 40_000.0)
        source.set_price("US0378331005", AssetClass.STOCKS, 150.0)

        updated = await refresh_prices(holdings, source, Currency.EUR)

        assert updated == 2
        assert holdings.total_value == pytest.approx(21_500.0)

    @pytest.mark.asyncio
    async def test_missing_price_clears_value(self, holdings: Holdings) -> None:
        """Test that a missing quote leaves the price unset."""
        holdings.assets[0].current_price = 39_000.0
        source = StaticPriceSource()
        source.set_price("US0378331005", AssetClass.STOCKS, 150.0)

        updated = await refresh_prices(holdings, source)

        assert updated == 1
        assert holdings.assets[0].current_price is None
        assert holdings.assets[1].current_price == 150.0

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_price(self, holdings: Holdings) -> None:
        """Test that a failing lookup keeps the old price and continues."""
        holdings.assets[0].current_price = 39_000.0
        source = AsyncMock(spec=BasePriceSource)
        source.fetch_price.side_effect = [ConnectionError("timeout"), 155.0]

        updated = await refresh_prices(holdings, source, Currency.USD)

        assert updated == 1
        assert holdings.assets[0].current_price == 39_000.0
        assert holdings.assets[1].current_price == 155.0
        source.fetch_price.assert_any_await(
            "US0378331005", AssetClass.STOCKS, Currency.USD
        )
