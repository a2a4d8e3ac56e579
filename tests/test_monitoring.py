"""Tests for events and the event journal."""

import csv
import json
import shutil

from liquidity_engine.core.config import FixedConfig, Settings, StrategyConfig
from liquidity_engine.core.models import EngineState, Reserves, Side
from liquidity_engine.execution.simulated_orderbook import SimulatedOrderBook
from liquidity_engine.monitoring.events import CycleCompleted, EventBus, Paused
from liquidity_engine.monitoring.journal import CYCLE_COLUMNS, EventJournal, JournalConfig
from liquidity_engine.strategy.liquidity_strategy import LiquidityStrategy


def make_cycle(block=1):
    return CycleCompleted(
        market_id="ETH-USDC",
        block=block,
        bid_limit=-10,
        ask_limit=10,
        curr_limit=0,
        collected_base=0,
        collected_quote=0,
        bid_order_id="1",
        bid_amount=1000,
        ask_order_id="2",
        ask_amount=1000,
    )


def test_event_bus_delivers_and_records():
    """Test subscription, history and type filtering."""
    bus = EventBus(history_size=2)
    received = []
    bus.subscribe(received.append)

    bus.emit(make_cycle(1))
    bus.emit(Paused(market_id="ETH-USDC", caller="owner"))
    bus.emit(make_cycle(2))

    assert len(received) == 3
    assert len(bus.history) == 2
    assert [e.block for e in bus.of_type(CycleCompleted)] == [2]

    bus.unsubscribe(received.append)
    bus.emit(make_cycle(3))
    assert len(received) == 3


def test_journal_writes_artifacts(tmp_path):
    """Test JSON lines, cycle CSV, state snapshot and summary."""
    journal = EventJournal(JournalConfig(run_dir=str(tmp_path / "run")))
    bus = EventBus()
    bus.subscribe(journal)

    bus.emit(make_cycle(1))
    bus.emit(Paused(market_id="ETH-USDC", caller="owner"))

    lines = (tmp_path / "run" / "events.jsonl").read_text().splitlines()
    assert [json.loads(line)["event"] for line in lines] == ["cycle_completed", "paused"]

    with open(tmp_path / "run" / "cycles.csv", newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0] == CYCLE_COLUMNS
    assert rows[1][:4] == ["1", "0", "-10", "10"]
    assert len(rows) == 2

    state = EngineState(owner="owner", reserves=Reserves(base=5, quote=7))
    journal.snapshot(state)
    saved = json.loads((tmp_path / "run" / "state.json").read_text())
    assert saved["state"]["reserves"] == {"base": 5, "quote": 7}
    assert saved["event_counts"] == {"cycle_completed": 1, "paused": 1}

    journal.write_summary(state)
    summary = (tmp_path / "run" / "summary.md").read_text()
    assert "Reserves: base=5 quote=7" in summary
    assert "- paused: 1" in summary


def test_journal_write_failure_does_not_fail_cycle(tmp_path):
    """Test that a missing run directory is logged, not raised."""
    settings = Settings(strategy=StrategyConfig(kind="fixed", fixed=FixedConfig(bid_limit=-10, ask_limit=10)))
    strategy = LiquidityStrategy(settings, SimulatedOrderBook(market_id="ETH-USDC"))
    journal = EventJournal(JournalConfig(run_dir=str(tmp_path / "run")))
    strategy.events.subscribe(journal)
    strategy.seed(settings.strategy.owner, 1000, 1000)

    shutil.rmtree(tmp_path / "run")
    report = strategy.trigger_cycle(5)

    assert report is not None
    assert strategy.last_trigger == 5
    assert set(strategy.resting_orders) == {Side.BID, Side.ASK}
    assert journal.counts["cycle_completed"] == 1
