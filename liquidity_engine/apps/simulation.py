"""Paper simulation of the liquidity strategy.

This module runs the strategy against the simulated order book:
- The traded limit follows a seeded random walk
- Resting orders crossed by the walk fill at their limit
- One cycle is triggered per block
"""

import logging
import random
from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, Field

from liquidity_engine.core.config import Settings
from liquidity_engine.core.exceptions import ArithmeticFault
from liquidity_engine.core.models import Side
from liquidity_engine.data.price_grid import limit_to_price
from liquidity_engine.execution.simulated_orderbook import SimulatedOrderBook, StaticPriceOracle
from liquidity_engine.monitoring.journal import EventJournal, JournalConfig
from liquidity_engine.strategy.liquidity_strategy import LiquidityStrategy

logger = logging.getLogger(__name__)


class SimulationConfig(BaseModel):
    """Parameters of a paper simulation run."""

    blocks: int = Field(100, gt=0, description="Number of blocks to simulate")
    seed: int = Field(7, description="Random walk seed")
    start_limit: int = Field(0, description="Initial traded limit")
    step: int = Field(5, ge=0, description="Maximum walk step per block, in widths")
    base_amount: int = Field(1_000, gt=0, description="Base seeded into the pool")
    quote_amount: int = Field(1_000, gt=0, description="Quote seeded into the pool")
    journal: bool = Field(False, description="Write an event journal under the journal directory")


class TickRecord(BaseModel):
    """State after one simulated block."""

    block: int
    curr_limit: int
    status: str = Field(..., description="cycled, skipped or fault")
    bid_limit: Optional[int] = None
    ask_limit: Optional[int] = None
    base_reserves: int
    quote_reserves: int


class SimulationResult(BaseModel):
    """Outcome of a paper simulation run."""

    blocks: int
    cycles: int
    skipped: int
    faults: int
    fills: int
    final_limit: int
    base_reserves: int
    quote_reserves: int
    pool_base: int
    pool_quote: int
    total_shares: int
    run_dir: Optional[str] = None
    ticks: List[TickRecord] = Field(default_factory=list, description="Per-block records")


def run_simulation(settings: Settings, config: SimulationConfig) -> SimulationResult:
    """Run a deterministic paper simulation.

    Args:
        settings: Application settings
        config: Simulation parameters

    Returns:
        Simulation result
    """
    market_id = settings.market.market_id
    width = settings.market.width
    start = config.start_limit - config.start_limit % width
    book = SimulatedOrderBook(market_id=market_id, curr_limit=start, width=width)

    # Oracle strategies replicate the walk's current price
    oracle = StaticPriceOracle()
    oracle.set_price(settings.market.pair_id, limit_to_price(start), limit_to_price(start + width))

    strategy = LiquidityStrategy(settings, book, oracle=oracle)
    owner = settings.strategy.owner

    run_dir = None
    journal = None
    if config.journal:
        run_dir = f"{settings.journal_dir or 'runs'}/{datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')}"
        journal = EventJournal(JournalConfig(run_dir=run_dir))
        strategy.events.subscribe(journal)

    strategy.seed(owner, config.base_amount, config.quote_amount)

    rng = random.Random(config.seed)
    limit = start
    cycles = 0
    fills = 0
    skipped = 0
    faults = 0
    ticks = []
    for block in range(1, config.blocks + 1):
        limit += rng.randint(-config.step, config.step) * width
        fills += len(book.move_to(market_id, limit))
        oracle.set_price(settings.market.pair_id, limit_to_price(limit), limit_to_price(limit + width))

        try:
            report = strategy.trigger_cycle(block)
        except ArithmeticFault as e:
            faults += 1
            logger.warning(f"Cycle {block} aborted: {e}", extra={"market": market_id})
            ticks.append(_tick(strategy, block, limit, "fault"))
            continue
        if report is None:
            skipped += 1
            ticks.append(_tick(strategy, block, limit, "skipped"))
        else:
            cycles += 1
            ticks.append(_tick(strategy, block, limit, "cycled"))

    pool_base, pool_quote = strategy.pool_balances()
    if journal is not None:
        journal.snapshot(strategy.state)
        journal.write_summary(strategy.state)

    reserves = strategy.reserves
    return SimulationResult(
        blocks=config.blocks,
        cycles=cycles,
        skipped=skipped,
        faults=faults,
        fills=fills,
        final_limit=limit,
        base_reserves=reserves.base,
        quote_reserves=reserves.quote,
        pool_base=pool_base,
        pool_quote=pool_quote,
        total_shares=strategy.total_shares,
        run_dir=run_dir,
        ticks=ticks,
    )


def _tick(strategy: LiquidityStrategy, block: int, curr_limit: int, status: str) -> TickRecord:
    orders = strategy.resting_orders
    reserves = strategy.reserves
    bid = orders.get(Side.BID)
    ask = orders.get(Side.ASK)
    return TickRecord(
        block=block,
        curr_limit=curr_limit,
        status=status,
        bid_limit=bid.limit if bid else None,
        ask_limit=ask.limit if ask else None,
        base_reserves=reserves.base,
        quote_reserves=reserves.quote,
    )
