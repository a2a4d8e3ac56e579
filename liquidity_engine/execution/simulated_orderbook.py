"""Simulated order book for paper trading and tests.

This module implements a local limit order book that tracks batches of
resting orders and fills them as the traded limit moves, without talking
to any real venue. A companion static oracle serves fixed bid/ask prices.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
from liquidity_engine.core.exceptions import InvalidState, OrderBookError
from liquidity_engine.core.models import OrderBatch
from liquidity_engine.core.orderbook import IOrderBook, IPriceOracle
from liquidity_engine.data.price_grid import base_quote_exchange_rate
from liquidity_engine.utils.fixed_point import UFixed

logger = logging.getLogger(__name__)


@dataclass
class SimulatedOrder:
    order_id: str
    batch_id: str
    market_id: str
    is_bid: bool
    amount: int


@dataclass
class SimulatedMarket:
    market_id: str
    curr_limit: int
    width: int


class SimulatedOrderBook(IOrderBook):
    """In-memory order book.

    Orders at the same market, side and limit join one batch until that
    batch sees a fill; later orders at the limit open a new batch with the
    next nonce. Moving the traded limit fully fills every bid batch at or
    above it and every ask batch at or below it.
    """

    def __init__(self, market_id: str = "ETH-USDC", curr_limit: int = 0, width: int = 1):
        """Initialize simulated order book.

        Args:
            market_id: Initial market ID
            curr_limit: Initial traded limit
            width: Market width
        """
        self.markets: Dict[str, SimulatedMarket] = {}
        self.batches: Dict[str, OrderBatch] = {}
        self.orders: Dict[str, SimulatedOrder] = {}

        # (market_id, is_bid, limit) -> nonce of the batch accepting orders
        self._nonces: Dict[Tuple[str, bool, int], int] = {}
        self._batch_market: Dict[str, str] = {}
        self._next_order = 1

        # Failure injection
        self.reject_placements = False
        self.reject_collections = False

        self.add_market(market_id, curr_limit, width)

    def add_market(self, market_id: str, curr_limit: int = 0, width: int = 1) -> None:
        if width <= 0:
            raise InvalidState("Width must be positive", {"width": width})
        self.markets[market_id] = SimulatedMarket(market_id=market_id, curr_limit=curr_limit, width=width)

    def _market(self, market_id: str) -> SimulatedMarket:
        if market_id not in self.markets:
            raise OrderBookError("Unknown market", {"market_id": market_id})
        return self.markets[market_id]

    def current_traded_limit(self, market_id: str) -> int:
        return self._market(market_id).curr_limit

    def width(self, market_id: str) -> int:
        return self._market(market_id).width

    def batch_info(self, batch_id: str) -> OrderBatch:
        if batch_id not in self.batches:
            raise OrderBookError("Unknown batch", {"batch_id": batch_id})
        return self.batches[batch_id].model_copy()

    def place_order(self, market_id: str, is_bid: bool, amount: int, limit: int) -> Tuple[str, str]:
        """Place a limit order and match it against the traded limit.

        Args:
            market_id: Market ID
            is_bid: True to offer quote, False to offer base
            amount: Amount of the offered asset
            limit: Price limit

        Returns:
            Tuple of (order_id, batch_id)
        """
        market = self._market(market_id)
        if self.reject_placements:
            raise OrderBookError("Placement rejected", {"market_id": market_id, "limit": limit})
        if amount <= 0:
            raise OrderBookError("Order amount must be positive", {"amount": amount})
        if limit % market.width != 0:
            raise OrderBookError("Limit not aligned to width", {"limit": limit, "width": market.width})

        key = (market_id, is_bid, limit)
        nonce = self._nonces.get(key, 0)
        batch_id = f"{market_id}:{'bid' if is_bid else 'ask'}:{limit}:{nonce}"
        batch = self.batches.get(batch_id)
        if batch is None:
            batch = OrderBatch(batch_id=batch_id, limit=limit, is_bid=is_bid)
            self.batches[batch_id] = batch
            self._batch_market[batch_id] = market_id

        batch.amount_in += amount
        if is_bid:
            batch.quote_amount += amount
        else:
            batch.base_amount += amount

        order_id = str(self._next_order)
        self._next_order += 1
        self.orders[order_id] = SimulatedOrder(
            order_id=order_id, batch_id=batch_id, market_id=market_id, is_bid=is_bid, amount=amount
        )
        logger.info(
            f"Simulated order placed: {order_id} {'BID' if is_bid else 'ASK'} {amount} @ {limit}",
            extra={"market": market_id},
        )

        # Orders crossing the traded limit fill immediately
        if self._crosses(batch, market.curr_limit):
            self.fill(batch_id, batch.remaining_offered)

        return order_id, batch_id

    def collect_order(self, order_id: str) -> Tuple[int, int]:
        """Cancel an order and pay out its share of its batch.

        Args:
            order_id: Order ID

        Returns:
            Tuple of (base_amount, quote_amount)
        """
        if self.reject_collections:
            raise OrderBookError("Collection rejected", {"order_id": order_id})
        order = self.orders.get(order_id)
        if order is None:
            raise OrderBookError("Unknown order", {"order_id": order_id})

        batch = self.batches[order.batch_id]
        base = batch.base_amount * order.amount // batch.amount_in
        quote = batch.quote_amount * order.amount // batch.amount_in
        filled = batch.amount_filled * order.amount // batch.amount_in

        batch.amount_in -= order.amount
        batch.amount_filled -= filled
        batch.base_amount -= base
        batch.quote_amount -= quote
        del self.orders[order_id]

        logger.info(
            f"Simulated order collected: {order_id} base={base} quote={quote}",
            extra={"market": order.market_id},
        )
        return base, quote

    def fill(self, batch_id: str, amount: int) -> None:
        """Fill part of a batch at its limit price.

        Args:
            batch_id: Batch ID
            amount: Offered amount to fill (capped at what remains)
        """
        batch = self.batches.get(batch_id)
        if batch is None:
            raise OrderBookError("Unknown batch", {"batch_id": batch_id})
        amount = min(amount, batch.remaining_offered)
        if amount <= 0:
            return

        market = self.markets[self._batch_market[batch_id]]
        rate = base_quote_exchange_rate(batch.limit, market.width)
        if batch.is_bid:
            batch.quote_amount -= amount
            batch.base_amount += rate.quote_to_base(amount)
        else:
            batch.base_amount -= amount
            batch.quote_amount += rate.base_to_quote(amount)
        batch.amount_filled += amount

        # A touched batch stops accepting new orders
        key = (market.market_id, batch.is_bid, batch.limit)
        self._nonces[key] = self._nonces.get(key, 0) + 1
        logger.debug(f"Simulated fill: {batch_id} {amount}", extra={"market": market.market_id})

    def move_to(self, market_id: str, limit: int) -> List[str]:
        """Move the traded limit and fill every batch it crosses.

        Args:
            market_id: Market ID
            limit: New traded limit

        Returns:
            IDs of batches filled by the move
        """
        market = self._market(market_id)
        market.curr_limit = limit
        filled = []
        for batch_id, batch in self.batches.items():
            if self._batch_market[batch_id] != market_id or batch.is_filled:
                continue
            if self._crosses(batch, limit):
                self.fill(batch_id, batch.remaining_offered)
                filled.append(batch_id)
        return filled

    @staticmethod
    def _crosses(batch: OrderBatch, curr_limit: int) -> bool:
        if batch.is_bid:
            return batch.limit >= curr_limit
        return batch.limit <= curr_limit

    def open_orders(self, market_id: Optional[str] = None) -> List[SimulatedOrder]:
        if market_id is None:
            return list(self.orders.values())
        return [o for o in self.orders.values() if o.market_id == market_id]


class StaticPriceOracle(IPriceOracle):
    """Oracle serving prices set by the caller."""

    def __init__(self):
        self.prices: Dict[str, Tuple[UFixed, UFixed]] = {}

    def set_price(self, pair_id: str, bid: UFixed, ask: UFixed) -> None:
        self.prices[pair_id] = (bid, ask)

    def bid_ask_price(self, pair_id: str) -> Tuple[UFixed, UFixed]:
        if pair_id not in self.prices:
            raise OrderBookError("No oracle price", {"pair_id": pair_id})
        return self.prices[pair_id]
