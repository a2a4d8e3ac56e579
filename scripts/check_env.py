"""Script to check environment configuration."""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from liquidity_engine.core.config import Settings, StrategyKind
from liquidity_engine.core.exceptions import EngineError
from liquidity_engine.strategy.pricing import optimal_spread
from liquidity_engine.utils.fixed_point import UFixed
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

console = Console()


def main():
    """Check and display environment configuration."""
    console.print(Panel.fit("Environment Configuration Check", style="bold blue"))

    try:
        settings = Settings.from_env()
    except ValueError as e:
        console.print(f"[red]Error loading configuration: {e}[/red]")
        sys.exit(1)

    table = Table(title="Main Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="magenta")
    table.add_row("Environment", settings.environment)
    table.add_row("Market", f"{settings.market.market_id} (width {settings.market.width})")
    table.add_row("Oracle Pair", settings.market.pair_id)
    table.add_row("Strategy", settings.strategy.kind.value)
    table.add_row("Owner", settings.strategy.owner)
    table.add_row("Public Deposits", "Yes" if settings.strategy.public else "No")
    console.print(table)

    model = settings.strategy.model
    model_table = Table(title="Model Parameters")
    model_table.add_column("Parameter", style="cyan")
    model_table.add_column("Value", style="magenta")
    model_table.add_column("Status", style="yellow")
    for name, value in model.model_dump().items():
        model_table.add_row(name, str(value), "OK")
    console.print(model_table)

    warnings = []
    if settings.strategy.kind == StrategyKind.MODEL:
        try:
            spread = optimal_spread(
                UFixed.from_decimal(model.volatility_sq),
                UFixed.from_decimal(model.risk_aversion),
                UFixed.from_decimal(model.arrival_intensity),
            )
            console.print(f"\nModel spread at these parameters: [magenta]{spread}[/magenta] (price units)")
            if spread >= UFixed.one():
                warnings.append("WARNING: Model spread exceeds the unit price - bids will hit the grid floor")
        except EngineError as e:
            warnings.append(f"WARNING: Model parameters are unusable: {e}")
    if settings.strategy.min_interval == 0:
        warnings.append("WARNING: min_interval is 0 - every trigger will re-quote")
    if settings.strategy.public:
        warnings.append("WARNING: Public deposits enabled - anyone may mint shares")

    if warnings:
        console.print("\n[bold yellow]Warnings:[/bold yellow]")
        for warning in warnings:
            console.print(f"  {warning}")
    else:
        console.print("\n[bold green]Configuration looks good![/bold green]")


if __name__ == "__main__":
    main()
