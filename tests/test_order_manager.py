"""Tests for the order lifecycle manager."""

import pytest
from liquidity_engine.core.exceptions import OrderBookError
from liquidity_engine.core.models import EngineState, OrderBatch, Quote, Reserves, Side
from liquidity_engine.execution.order_manager import OrderLifecycleManager
from liquidity_engine.execution.simulated_orderbook import SimulatedOrderBook

MARKET = "ETH-USDC"


@pytest.fixture
def book():
    """Create simulated order book for testing."""
    return SimulatedOrderBook(market_id=MARKET, curr_limit=0, width=1)


@pytest.fixture
def manager(book):
    """Create lifecycle manager for testing."""
    return OrderLifecycleManager(book, MARKET)


class AskCollectionRejectingBook(SimulatedOrderBook):
    """Simulated book that refuses to collect ask orders."""

    def collect_order(self, order_id):
        if not self.orders[order_id].is_bid:
            raise OrderBookError("Collection rejected", {"order_id": order_id})
        return super().collect_order(order_id)


def make_state(base=1000, quote=1000):
    return EngineState(owner="owner", reserves=Reserves(base=base, quote=quote))


def test_guard_limit():
    """Test that targets at the traded limit are nudged outward."""
    assert OrderLifecycleManager.guard_limit(Side.BID, 0, 0, 5) == -5
    assert OrderLifecycleManager.guard_limit(Side.ASK, 0, 0, 5) == 5
    assert OrderLifecycleManager.guard_limit(Side.BID, -10, 0, 5) == -10


def test_is_stale():
    """Test staleness by limit and by fill."""
    batch = OrderBatch(batch_id="b", limit=10, is_bid=False, amount_in=100, base_amount=40, quote_amount=60)
    assert not OrderLifecycleManager.is_stale(batch, 10)
    assert OrderLifecycleManager.is_stale(batch, 11)

    filled = batch.model_copy(update={"base_amount": 0})
    assert OrderLifecycleManager.is_stale(filled, 10)


def test_first_cycle_places_full_reserves(manager):
    """Test that an empty strategy places its whole reserves."""
    state = make_state()
    report = manager.run_cycle(state, Quote(bid_limit=-10, ask_limit=10), curr_limit=0, width=1)

    assert set(report.placed) == {Side.BID, Side.ASK}
    assert state.orders[Side.BID].limit == -10
    assert state.orders[Side.BID].amount == 1000
    assert state.orders[Side.ASK].limit == 10
    assert state.orders[Side.ASK].amount == 1000
    assert state.reserves.base == 0
    assert state.reserves.quote == 0


def test_unchanged_quote_keeps_orders(manager):
    """Test that fresh orders are left alone."""
    state = make_state()
    quote = Quote(bid_limit=-10, ask_limit=10)
    manager.run_cycle(state, quote, curr_limit=0, width=1)
    orders = dict(state.orders)

    report = manager.run_cycle(state, quote, curr_limit=0, width=1)
    assert report.placed == {}
    assert set(report.kept) == {Side.BID, Side.ASK}
    assert state.orders == orders


def test_moved_quote_replaces_one_side(manager):
    """Test that only the side whose limit moved is replaced."""
    state = make_state()
    manager.run_cycle(state, Quote(bid_limit=-10, ask_limit=10), curr_limit=0, width=1)

    report = manager.run_cycle(state, Quote(bid_limit=-5, ask_limit=10), curr_limit=0, width=1)
    assert report.collected_quote == 1000
    assert list(report.placed) == [Side.BID]
    assert report.kept == [Side.ASK]
    assert state.orders[Side.BID].limit == -5
    assert state.orders[Side.BID].amount == 1000


def test_partially_filled_order_kept(manager, book):
    """Test that a partial fill at the target limit does not trigger a replace."""
    state = make_state()
    manager.run_cycle(state, Quote(bid_limit=-10, ask_limit=10), curr_limit=0, width=1)
    book.fill(state.orders[Side.ASK].batch_id, 400)

    report = manager.run_cycle(state, Quote(bid_limit=-10, ask_limit=10), curr_limit=0, width=1)
    assert Side.ASK in report.kept
    assert report.collected_base == 0


def test_filled_ask_at_traded_limit(manager, book):
    """Test that a filled ask at the traded limit is collected and not replaced without base."""
    state = make_state(base=1000, quote=0)
    quote = Quote(bid_limit=-10, ask_limit=5)
    manager.run_cycle(state, quote, curr_limit=0, width=1)
    assert Side.BID not in state.orders
    assert state.orders[Side.ASK].limit == 5

    book.move_to(MARKET, 5)
    report = manager.run_cycle(state, quote, curr_limit=5, width=1)

    assert report.collected_base == 0
    assert report.collected_quote == 1000
    assert Side.ASK not in state.orders
    assert state.orders[Side.BID].limit == -10
    assert state.orders[Side.BID].amount == 1000
    assert state.reserves.base == 0
    assert state.reserves.quote == 0


def test_ask_at_traded_limit_is_nudged(manager):
    """Test that an ask targeted at the traded limit is placed one width above."""
    state = make_state()
    manager.run_cycle(state, Quote(bid_limit=-3, ask_limit=0), curr_limit=0, width=1)
    assert state.orders[Side.ASK].limit == 1

    report = manager.run_cycle(state, Quote(bid_limit=-3, ask_limit=0), curr_limit=0, width=1)
    assert Side.ASK in report.kept
    assert report.placed == {}


def test_placement_failure_keeps_reserves(manager, book):
    """Test that failed placements leave funds in reserves."""
    state = make_state()
    book.reject_placements = True

    report = manager.run_cycle(state, Quote(bid_limit=-10, ask_limit=10), curr_limit=0, width=1)
    assert set(report.errors) == {Side.BID, Side.ASK}
    assert state.orders == {}
    assert state.reserves.base == 1000
    assert state.reserves.quote == 1000


def test_collection_failure_leaves_order_resting(manager, book):
    """Test that a failed collection skips the side."""
    state = make_state()
    manager.run_cycle(state, Quote(bid_limit=-10, ask_limit=10), curr_limit=0, width=1)
    bid = state.orders[Side.BID]
    book.reject_collections = True

    report = manager.run_cycle(state, Quote(bid_limit=-5, ask_limit=10), curr_limit=0, width=1)
    assert Side.BID in report.errors
    assert state.orders[Side.BID] == bid
    assert state.reserves.quote == 0


def test_collect_all(manager):
    """Test unconditional collection."""
    state = make_state()
    manager.run_cycle(state, Quote(bid_limit=-10, ask_limit=10), curr_limit=0, width=1)

    report = manager.collect_all(state)
    assert set(report.collected) == {Side.BID, Side.ASK}
    assert report.collected_base == 1000
    assert report.collected_quote == 1000
    assert state.orders == {}
    assert state.reserves.base == 1000
    assert state.reserves.quote == 1000


def test_collect_all_or_none(manager):
    """Test that a clean collection empties both sides."""
    state = make_state()
    manager.run_cycle(state, Quote(bid_limit=-10, ask_limit=10), curr_limit=0, width=1)

    report = manager.collect_all_or_none(state)
    assert report.errors == {}
    assert report.restored == []
    assert state.orders == {}
    assert (state.reserves.base, state.reserves.quote) == (1000, 1000)


def test_collect_all_or_none_restores_collected_side():
    """Test that a rejected ask puts the collected bid back on the book."""
    book = AskCollectionRejectingBook(market_id=MARKET, curr_limit=0, width=1)
    manager = OrderLifecycleManager(book, MARKET)
    state = make_state()
    manager.run_cycle(state, Quote(bid_limit=-10, ask_limit=10), curr_limit=0, width=1)
    ask_id = state.orders[Side.ASK].order_id

    report = manager.collect_all_or_none(state)

    assert set(report.errors) == {Side.ASK}
    assert report.collected == [Side.BID]
    assert report.restored == [Side.BID]
    assert state.orders[Side.BID].limit == -10
    assert state.orders[Side.BID].amount == 1000
    assert state.orders[Side.ASK].order_id == ask_id
    assert (state.reserves.base, state.reserves.quote) == (0, 0)
