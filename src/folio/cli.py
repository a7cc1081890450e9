"""Command-line interface for portfolio plans."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from folio.config.holdings_config import load_holdings
from folio.config.settings import get_settings, setup_logging
from folio.core.exceptions import PersistenceError
from folio.core.models import AssetClass
from folio.data.prices import refresh_prices
from folio.portfolio import (
    AllocationPlan,
    AssetClassSettings,
    Holdings,
    PlanAnalysis,
    PlanRegistry,
    PlanTargetType,
    create_plan,
    upsert_distribution,
)
from folio.storage import get_plan_store

app = typer.Typer(
    name="folio",
    help="Personal portfolio tracker with target allocation plans",
    add_completion=False,
)
plans_app = typer.Typer(help="Create, edit and analyze allocation plans")
classes_app = typer.Typer(help="Enable or disable asset classes")
app.add_typer(plans_app, name="plans")
app.add_typer(classes_app, name="classes")

console = Console()

TARGET_TYPES = {
    "risk": PlanTargetType.RISK_CLASS,
    "asset": PlanTargetType.ASSET_CLASS,
}


@app.callback()
def main_callback() -> None:
    """Initialize logging on startup."""
    setup_logging(get_settings())


def _get_registry() -> PlanRegistry:
    settings = get_settings()
    return PlanRegistry(get_plan_store(settings.database_path))


def _get_class_settings() -> AssetClassSettings:
    store = get_plan_store(get_settings().database_path)
    return AssetClassSettings(store.load_enabled_classes())


def _find_plan(registry: PlanRegistry, plan_id: str) -> AllocationPlan:
    """Find a plan by id or unique id prefix."""
    matches = [p for p in registry.plans if p.id.startswith(plan_id)]
    if len(matches) != 1:
        reason = "not found" if not matches else "is ambiguous"
        console.print(f"[red]Error: plan {plan_id} {reason}[/red]")
        raise typer.Exit(1)
    return matches[0]


def _print_plan(plan: AllocationPlan) -> None:
    table = Table(
        title=f"{plan.name} ({plan.target_type.value})",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Category", style="bold")
    table.add_column("Target", justify="right")

    for distribution in plan.distributions:
        table.add_row(distribution.key, f"{distribution.percentage:.2f}%")

    console.print(table)
    total = plan.total_percentage
    if plan.is_valid:
        console.print(f"Total: [green]{total:.2f}%[/green]")
    else:
        console.print(f"Total: [yellow]{total:.2f}%[/yellow] (should be 100%)")


@plans_app.command("list")
def list_plans() -> None:
    """List all saved plans."""
    registry = _get_registry()

    if not registry.plans:
        console.print("[dim]No plans yet. Create one with 'folio plans create'.[/dim]")
        return

    table = Table(title="Plans", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Type")
    table.add_column("Total", justify="right")
    table.add_column("Modified")

    for plan in registry.plans:
        total = f"{plan.total_percentage:.2f}%"
        table.add_row(
            plan.id[:8],
            plan.name,
            plan.target_type.value,
            f"[green]{total}[/green]" if plan.is_valid else f"[yellow]{total}[/yellow]",
            plan.modified_at.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


@plans_app.command("create")
def create(
    name: str = typer.Argument(..., help="Plan name"),
    target_type: str = typer.Option(
        "risk", "--type", "-t", help="Target type: risk or asset"
    ),
) -> None:
    """Create a plan with every category at 0%."""
    name = name.strip()
    if not name:
        console.print("[red]Error: plan name must not be empty[/red]")
        raise typer.Exit(1)

    plan_type = TARGET_TYPES.get(target_type.lower())
    if plan_type is None:
        console.print(f"[red]Error: unknown target type {target_type}[/red]")
        raise typer.Exit(1)

    universe = None
    if plan_type is PlanTargetType.ASSET_CLASS:
        universe = [a.value for a in _get_class_settings().enabled_classes]

    plan = create_plan(name, plan_type, universe)
    try:
        _get_registry().create(plan)
    except PersistenceError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None

    console.print(f"[green]Created plan {plan.id[:8]}[/green]")
    _print_plan(plan)


@plans_app.command("show")
def show(plan_id: str = typer.Argument(..., help="Plan id or prefix")) -> None:
    """Show the targets of a plan."""
    _print_plan(_find_plan(_get_registry(), plan_id))


@plans_app.command("set")
def set_target(
    plan_id: str = typer.Argument(..., help="Plan id or prefix"),
    key: str = typer.Argument(..., help="Category, e.g. 'High Risk' or 'Stocks'"),
    percentage: float = typer.Argument(..., help="Target percentage (0-100)"),
) -> None:
    """Set the target percentage of one category."""
    registry = _get_registry()
    plan = _find_plan(registry, plan_id)

    if plan.get_distribution(key) is None:
        console.print(
            f"[red]Error: {key} is not part of this plan "
            f"({', '.join(plan.keys)})[/red]"
        )
        raise typer.Exit(1)

    updated = upsert_distribution(plan, key, percentage)
    try:
        registry.update(updated)
    except PersistenceError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None

    _print_plan(updated)


@plans_app.command("delete")
def delete(plan_id: str = typer.Argument(..., help="Plan id or prefix")) -> None:
    """Delete a plan."""
    registry = _get_registry()
    plan = _find_plan(registry, plan_id)

    try:
        registry.delete(plan.id)
    except PersistenceError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None

    console.print(f"Deleted plan [bold]{plan.name}[/bold]")


@plans_app.command("analyze")
def analyze_command(
    plan_id: str = typer.Argument(..., help="Plan id or prefix"),
    holdings_file: Path | None = typer.Option(
        None, "--holdings", "-f", help="Holdings YAML file"
    ),
) -> None:
    """Show how much to add to each category to reach the plan."""
    settings = get_settings()
    registry = _get_registry()
    plan = _find_plan(registry, plan_id)

    path = holdings_file or settings.holdings_path
    try:
        holdings_data = load_holdings(path)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None

    currency = holdings_data.currency or settings.currency
    holdings = Holdings(holdings_data.to_assets(), _get_class_settings())
    asyncio.run(
        refresh_prices(holdings, holdings_data.price_source(currency), currency)
    )

    analysis = registry.analyze(plan, holdings)
    _print_analysis(analysis, currency.value)


def _print_analysis(analysis: PlanAnalysis, currency: str) -> None:
    plan = analysis.plan
    if not plan.is_valid:
        console.print(
            f"[yellow]Warning: targets sum to {plan.total_percentage:.2f}%, "
            "results are less meaningful[/yellow]"
        )

    table = Table(
        title=f"{plan.name} | {analysis.total_portfolio_value:,.2f} {currency}",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Category", style="bold")
    table.add_column("Current", justify="right")
    table.add_column("Target", justify="right")
    table.add_column("Value", justify="right")
    table.add_column("Add", justify="right")
    table.add_column("Change", justify="right")

    for d in analysis.discrepancies:
        if d.discrepancy_value > 0:
            add = f"[green]+{d.discrepancy_value:,.2f}[/green]"
        else:
            add = "[dim]-[/dim]"

        change = f"{d.discrepancy_percentage:+.2f}pp"
        if not d.needs_rebalancing:
            change = f"[dim]{change}[/dim]"

        table.add_row(
            d.key,
            f"{d.current_percentage:.2f}%",
            f"{d.target_percentage:.2f}%",
            f"{d.current_value:,.2f}",
            add,
            change,
        )

    console.print(table)

    if analysis.is_rebalancing_needed:
        console.print(
            f"Add [bold]{analysis.total_rebalancing_amount:,.2f} {currency}[/bold] "
            f"(new total {analysis.projected_total_value:,.2f})"
        )
    else:
        console.print("[green]Portfolio matches the plan[/green]")


@classes_app.command("list")
def list_classes() -> None:
    """List asset classes and whether they are enabled."""
    class_settings = _get_class_settings()
    for asset_class in AssetClass:
        if class_settings.is_enabled(asset_class):
            console.print(f"[green]✓[/green] {asset_class.value}")
        else:
            console.print(f"[dim]✗ {asset_class.value}[/dim]")


def _set_class(name: str, enabled: bool) -> None:
    try:
        asset_class = AssetClass.from_label(name)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None

    class_settings = _get_class_settings()
    class_settings.set_enabled(asset_class, enabled)

    store = get_plan_store(get_settings().database_path)
    try:
        store.save_enabled_classes(class_settings.enabled_classes)
    except PersistenceError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None

    enabled_names = ", ".join(a.value for a in class_settings.enabled_classes)
    logger.debug(f"Enabled classes: {enabled_names}")
    list_classes()


@classes_app.command("enable")
def enable(name: str = typer.Argument(..., help="Asset class, e.g. 'Stocks'")) -> None:
    """Enable an asset class."""
    _set_class(name, True)


@classes_app.command("disable")
def disable(name: str = typer.Argument(..., help="Asset class, e.g. 'ETFs'")) -> None:
    """Disable an asset class."""
    _set_class(name, False)


def main() -> None:
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
