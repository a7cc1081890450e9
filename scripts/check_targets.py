#!/usr/bin/env python
"""
Check a holdings file against ad-hoc asset class targets.

This script can be run directly without installing the package:
    python scripts/check_targets.py holdings.yaml Stocks=60 ETFs=40

Or, with saved plans, after installing:
    folio plans analyze <plan-id> --holdings holdings.yaml
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from folio.config.holdings_config import load_holdings
from folio.config.settings import get_settings
from folio.data.prices import refresh_prices
from folio.portfolio import Holdings, PlanDistribution, analyze


def parse_target(text: str) -> PlanDistribution:
    """Parse a "Class=percent" argument.

    Raises:
        ValueError: If the argument has no "=", no class or no number
    """
    key, sep, pct = text.partition("=")
    if not sep or not key.strip():
        raise ValueError(f"expected Class=percent, got '{text}'")
    try:
        percentage = float(pct)
    except ValueError:
        raise ValueError(f"invalid percentage in '{text}'") from None
    return PlanDistribution(key.strip(), percentage)


def parse_args(argv: list[str] | None = None) -> tuple[str, list[PlanDistribution]]:
    """Parse the command line, exiting with a usage error on bad targets."""
    import argparse

    parser = argparse.ArgumentParser(description="Check holdings against targets")
    parser.add_argument("holdings", help="Holdings YAML file")
    parser.add_argument("targets", nargs="+", help="Targets as Class=percent")

    args = parser.parse_args(argv)

    distributions = []
    for target in args.targets:
        try:
            distributions.append(parse_target(target))
        except ValueError as e:
            parser.error(str(e))

    return args.holdings, distributions


async def main(holdings_file: str, distributions: list[PlanDistribution]) -> None:
    """Print the additions needed to reach the given targets."""
    holdings_data = load_holdings(holdings_file)
    currency = holdings_data.currency or get_settings().currency

    holdings = Holdings(holdings_data.to_assets())
    await refresh_prices(holdings, holdings_data.price_source(currency), currency)

    total = sum(d.percentage for d in distributions)
    if abs(total - 100.0) > 0.01:
        print(f"Warning: targets sum to {total:.2f}%")

    discrepancies, new_total = analyze(
        distributions, holdings.asset_class_distribution(), holdings.total_value
    )

    print(f"\n{'='*50}")
    print(f"Portfolio: {holdings.total_value:,.2f} {currency.value}")
    print(f"{'='*50}")
    for d in discrepancies:
        print(
            f"{d.key:<18} {d.current_percentage:6.2f}% -> "
            f"{d.target_percentage:6.2f}%  add {d.discrepancy_value:,.2f}"
        )
    print(f"\nNew total: {new_total:,.2f} {currency.value}")


if __name__ == "__main__":
    holdings_file, distributions = parse_args()
    asyncio.run(main(holdings_file=holdings_file, distributions=distributions))
