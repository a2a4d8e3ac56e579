"""Main CLI application for the liquidity engine.

Usage:
    python -m liquidity_engine.apps.main quote --curr-limit 0 --base 1000 --quote 1500
    python -m liquidity_engine.apps.main simulate --blocks 50 --kind model
    python -m liquidity_engine.apps.main config
"""

import logging
import sys
from typing import Optional
import typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from liquidity_engine.apps.simulation import SimulationConfig, run_simulation
from liquidity_engine.core.config import ModelConfig, Settings, StrategyKind
from liquidity_engine.core.exceptions import EngineError
from liquidity_engine.data.price_grid import limit_to_price
from liquidity_engine.strategy.quoting import ModelQuoteEngine, QuoteContext
from liquidity_engine.utils.logging import level_from_name, setup_logging

logger = logging.getLogger(__name__)

app = typer.Typer(help="Liquidity Engine CLI - quote, simulate and inspect the liquidity strategy")
console = Console()


def _load_settings(log_level: Optional[str] = None) -> Settings:
    settings = Settings.from_env()
    if log_level:
        settings.log_level = log_level.upper()
    setup_logging(level=level_from_name(settings.log_level), log_file=settings.log_file)
    return settings


@app.command(help="Compute one model quote. Example:\n  python -m liquidity_engine.apps.main quote --curr-limit 0 --base 1000 --quote 1500")
def quote(
    curr_limit: int = typer.Option(0, "--curr-limit", "-l", help="Current traded limit"),
    base: int = typer.Option(1_000, "--base", "-b", help="Pool base holdings"),
    quote_amount: int = typer.Option(1_000, "--quote", "-q", help="Pool quote holdings"),
    width: Optional[int] = typer.Option(None, "--width", "-w", help="Override market width"),
    risk_aversion: Optional[str] = typer.Option(None, "--risk-aversion", help="Override risk aversion (gamma)"),
    volatility_sq: Optional[str] = typer.Option(None, "--volatility-sq", help="Override squared volatility"),
    arrival_intensity: Optional[str] = typer.Option(None, "--arrival-intensity", help="Override arrival intensity (k)"),
    target_ratio: Optional[str] = typer.Option(None, "--target-ratio", help="Override target quote share"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level: DEBUG|INFO|WARNING|ERROR"),
):
    """Print the Avellaneda-Stoikov quote for the given inventory."""
    try:
        settings = _load_settings(log_level)

        overrides = {
            "risk_aversion": risk_aversion,
            "volatility_sq": volatility_sq,
            "arrival_intensity": arrival_intensity,
            "target_ratio": target_ratio,
        }
        params = settings.strategy.model.model_dump()
        params.update({k: v for k, v in overrides.items() if v is not None})
        engine = ModelQuoteEngine(ModelConfig(**params))

        context = QuoteContext(
            curr_limit=curr_limit,
            width=width or settings.market.width,
            base_amount=base,
            quote_amount=quote_amount,
        )
        result = engine.compute_quote(context)

        table = Table(title="Model Quote", show_header=True)
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="magenta")
        table.add_row("Current Limit", str(curr_limit))
        table.add_row("Current Price", str(limit_to_price(curr_limit)))
        table.add_row("Bid Limit", str(result.bid_limit))
        table.add_row("Bid Price", str(limit_to_price(result.bid_limit)))
        table.add_row("Ask Limit", str(result.ask_limit))
        table.add_row("Ask Price", str(limit_to_price(result.ask_limit)))
        table.add_row("Spread (limits)", str(result.spread))
        console.print(table)
    except (EngineError, ValueError) as e:
        console.print(f"[red]Quote error: {e}[/red]")
        sys.exit(1)


@app.command(help="Run a paper simulation. Example:\n  python -m liquidity_engine.apps.main simulate --blocks 50 --kind fixed")
def simulate(
    blocks: int = typer.Option(50, "--blocks", "-n", help="Number of blocks to simulate"),
    seed: int = typer.Option(7, "--seed", help="Random walk seed"),
    step: int = typer.Option(5, "--step", help="Maximum walk step per block, in widths"),
    kind: Optional[str] = typer.Option(None, "--kind", "-k", help="Strategy kind: fixed|oracle|model"),
    base: int = typer.Option(1_000, "--base", "-b", help="Base seeded into the pool"),
    quote_amount: int = typer.Option(1_000, "--quote", "-q", help="Quote seeded into the pool"),
    journal: bool = typer.Option(False, "--journal/--no-journal", help="Write an event journal"),
    show_ticks: bool = typer.Option(True, "--ticks/--no-ticks", help="Print one row per block"),
    log_level: Optional[str] = typer.Option("WARNING", "--log-level", help="Log level: DEBUG|INFO|WARNING|ERROR"),
):
    """Run the strategy against a random-walk simulated order book."""
    console.print(Panel.fit("Paper Simulation - Random Walk + Simulated Order Book", style="bold green"))

    try:
        settings = _load_settings(log_level)
        if kind:
            try:
                settings.strategy.kind = StrategyKind(kind.lower())
            except ValueError:
                console.print(f"[red]Invalid kind: {kind}. Use: fixed, oracle, or model[/red]")
                sys.exit(1)

        config = SimulationConfig(
            blocks=blocks,
            seed=seed,
            step=step,
            base_amount=base,
            quote_amount=quote_amount,
            journal=journal,
        )
        result = run_simulation(settings, config)
    except EngineError as e:
        console.print(f"[red]Simulation error: {e}[/red]")
        sys.exit(1)

    if show_ticks:
        ticks_table = Table(title="Blocks", show_header=True)
        ticks_table.add_column("Block", style="cyan")
        ticks_table.add_column("Limit")
        ticks_table.add_column("Status")
        ticks_table.add_column("Bid")
        ticks_table.add_column("Ask")
        ticks_table.add_column("Base Reserve", style="magenta")
        ticks_table.add_column("Quote Reserve", style="magenta")
        for tick in result.ticks:
            ticks_table.add_row(
                str(tick.block),
                str(tick.curr_limit),
                tick.status,
                "-" if tick.bid_limit is None else str(tick.bid_limit),
                "-" if tick.ask_limit is None else str(tick.ask_limit),
                str(tick.base_reserves),
                str(tick.quote_reserves),
            )
        console.print(ticks_table)

    summary = Table(title="Simulation Summary", show_header=True)
    summary.add_column("Metric", style="cyan")
    summary.add_column("Value", style="magenta")
    summary.add_row("Strategy", settings.strategy.kind.value)
    summary.add_row("Blocks", str(result.blocks))
    summary.add_row("Cycles", str(result.cycles))
    summary.add_row("Skipped", str(result.skipped))
    if result.faults:
        summary.add_row("Faults", f"[red]{result.faults}[/red]")
    summary.add_row("Batches Filled", str(result.fills))
    summary.add_row("Final Limit", str(result.final_limit))
    summary.add_row("Pool Base", str(result.pool_base))
    summary.add_row("Pool Quote", str(result.pool_quote))
    summary.add_row("Total Shares", str(result.total_shares))
    if result.run_dir:
        summary.add_row("Journal", result.run_dir)
    console.print(summary)


@app.command(help="Show effective configuration (after environment overrides).")
def config():
    try:
        settings = Settings.from_env()
    except ValueError as e:
        console.print(f"[red]Error loading config: {e}[/red]")
        sys.exit(1)

    table = Table(title="Effective Configuration", show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="magenta")
    table.add_row("Environment", settings.environment)
    table.add_row("Market", settings.market.market_id)
    table.add_row("Width", str(settings.market.width))
    table.add_row("Oracle Pair", settings.market.pair_id)
    table.add_row("Strategy", settings.strategy.kind.value)
    table.add_row("Owner", settings.strategy.owner)
    table.add_row("Public", "Yes" if settings.strategy.public else "No")
    table.add_row("Min Interval", f"{settings.strategy.min_interval} blocks")
    if settings.strategy.kind == StrategyKind.MODEL:
        for name, value in settings.strategy.model.model_dump().items():
            table.add_row(f"Model {name}", str(value))
    elif settings.strategy.kind == StrategyKind.ORACLE:
        table.add_row("Oracle Min Spread", f"{settings.strategy.oracle.min_spread} limits")
    else:
        table.add_row("Fixed Bid", str(settings.strategy.fixed.bid_limit))
        table.add_row("Fixed Ask", str(settings.strategy.fixed.ask_limit))
    table.add_row("Log Level", settings.log_level)
    table.add_row("Journal Dir", settings.journal_dir or "-")
    console.print(table)


if __name__ == "__main__":
    app()
