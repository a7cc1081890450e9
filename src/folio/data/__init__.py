"""Price data sources."""

from folio.data.prices import BasePriceSource, StaticPriceSource, refresh_prices

__all__ = ["BasePriceSource", "StaticPriceSource", "refresh_prices"]
