"""Order lifecycle management for the liquidity strategy.

This module reconciles the resting bid and ask against each cycle's
quote: stale orders are collected into reserves, and empty sides are
re-quoted with the full reserve of the asset they offer.

An order is stale when its batch sits at a different limit than the
target, or when the batch has no unfilled offered amount left. Order book
failures never lose collected funds: proceeds are credited before any
replacement is attempted, and a failed placement leaves the side empty.
"""

import logging
from typing import Dict, Optional, Tuple
from liquidity_engine.core.exceptions import OrderBookError
from liquidity_engine.core.models import (
    CollectionReport,
    CycleReport,
    EngineState,
    OrderBatch,
    Quote,
    RestingOrder,
    Side,
)
from liquidity_engine.core.orderbook import IOrderBook

logger = logging.getLogger(__name__)

SIDES = (Side.BID, Side.ASK)


class OrderLifecycleManager:
    """Runs the cancel/replace cycle for one strategy's two resting orders."""

    def __init__(self, orderbook: IOrderBook, market_id: str):
        """Initialize lifecycle manager.

        Args:
            orderbook: Order book (real or simulated)
            market_id: Market the strategy quotes
        """
        self.orderbook = orderbook
        self.market_id = market_id
        self._log_extra = {"market": market_id}

    @staticmethod
    def guard_limit(side: Side, limit: int, curr_limit: int, width: int) -> int:
        """Move a target off the traded limit.

        A bid at the traded limit moves down one width, an ask moves up one.

        Args:
            side: Order side
            limit: Target limit
            curr_limit: Current traded limit
            width: Market width

        Returns:
            Effective placement limit
        """
        if limit != curr_limit:
            return limit
        return limit - width if side is Side.BID else limit + width

    @staticmethod
    def is_stale(batch: OrderBatch, target_limit: int) -> bool:
        """Check whether a resting batch must be collected."""
        return batch.limit != target_limit or batch.is_filled

    def run_cycle(
        self,
        state: EngineState,
        quote: Quote,
        curr_limit: int,
        width: int,
    ) -> CycleReport:
        """Reconcile both sides against a new quote.

        Staleness is judged against the guarded target, so an order already
        nudged off the traded limit is kept while the quote is unchanged.

        Args:
            state: Engine state (mutated in place)
            quote: Target quote
            curr_limit: Traded limit read at cycle start
            width: Market width

        Returns:
            Cycle report with collected amounts and new orders
        """
        report = CycleReport(quote=quote, curr_limit=curr_limit)
        targets = {
            side: self.guard_limit(side, quote.limit_for(side), curr_limit, width) for side in SIDES
        }

        # Collect every stale side first so proceeds can fund either replacement
        for side in SIDES:
            order = state.orders.get(side)
            if order is None:
                continue
            try:
                batch = self.orderbook.batch_info(order.batch_id)
            except OrderBookError as e:
                logger.warning(f"Batch lookup failed for {side.value} {order.batch_id}: {e}", extra=self._log_extra)
                report.errors[side] = str(e)
                continue

            if not self.is_stale(batch, targets[side]):
                report.kept.append(side)
                continue

            try:
                base, quote_amount = self.collect(state, side)
            except OrderBookError as e:
                logger.warning(f"Collection failed for {side.value} {order.order_id}: {e}", extra=self._log_extra)
                report.errors[side] = str(e)
                continue
            report.collected_base += base
            report.collected_quote += quote_amount

        for side in SIDES:
            if side in state.orders or side in report.errors:
                continue
            placed = self._place(state, side, targets[side], report.errors)
            if placed is not None:
                report.placed[side] = placed

        return report

    def collect(self, state: EngineState, side: Side) -> Tuple[int, int]:
        """Collect one side's resting order into reserves.

        Args:
            state: Engine state
            side: Side to collect

        Returns:
            Tuple of (base_amount, quote_amount) collected
        """
        order = state.orders[side]
        base, quote = self.orderbook.collect_order(order.order_id)
        state.reserves.credit(base=base, quote=quote)
        del state.orders[side]
        logger.info(
            f"Collected {side.value} {order.order_id} @ {order.limit}: base={base} quote={quote}",
            extra=self._log_extra,
        )
        return base, quote

    def collect_all(self, state: EngineState) -> CollectionReport:
        """Collect both sides unconditionally without re-quoting.

        Args:
            state: Engine state

        Returns:
            Collection report
        """
        report = CollectionReport()
        for side in SIDES:
            if side not in state.orders:
                continue
            try:
                base, quote = self.collect(state, side)
            except OrderBookError as e:
                logger.error(f"Manual collection failed for {side.value}: {e}", extra=self._log_extra)
                report.errors[side] = str(e)
                continue
            report.collected.append(side)
            report.collected_base += base
            report.collected_quote += quote
        return report

    def collect_all_or_none(self, state: EngineState) -> CollectionReport:
        """Collect both sides, or leave both resting.

        When a collection is rejected after another side was already
        collected, the collected side is placed again at its previous limit
        with the offered amount it returned. Proceeds from fills stay in
        reserves.

        Args:
            state: Engine state

        Returns:
            Collection report; ``errors`` is empty only if every side was collected
        """
        previous = dict(state.orders)
        report = CollectionReport()
        returned: Dict[Side, int] = {}
        for side in SIDES:
            if side not in state.orders:
                continue
            try:
                base, quote = self.collect(state, side)
            except OrderBookError as e:
                logger.error(f"Collection failed for {side.value}: {e}", extra=self._log_extra)
                report.errors[side] = str(e)
                break
            report.collected.append(side)
            report.collected_base += base
            report.collected_quote += quote
            returned[side] = quote if side.is_bid else base

        if not report.errors:
            return report

        for side, amount in returned.items():
            if amount == 0:
                continue
            order = previous[side]
            if self._place(state, side, order.limit, report.errors, amount) is not None:
                report.restored.append(side)
                logger.warning(f"Restored {side.value} @ {order.limit} after failed collection", extra=self._log_extra)
        return report

    def _place(
        self,
        state: EngineState,
        side: Side,
        limit: int,
        errors: Dict[Side, str],
        amount: Optional[int] = None,
    ) -> Optional[RestingOrder]:
        asset = side.offered_asset
        if amount is None:
            amount = state.reserves.amount(asset)
        if amount == 0:
            logger.debug(f"No {asset} reserves, {side.value} stays empty", extra=self._log_extra)
            return None

        try:
            order_id, batch_id = self.orderbook.place_order(self.market_id, side.is_bid, amount, limit)
        except OrderBookError as e:
            logger.error(f"Placement failed for {side.value} {amount} @ {limit}: {e}", extra=self._log_extra)
            errors[side] = str(e)
            return None

        state.reserves.debit(**{asset: amount})
        order = RestingOrder(order_id=order_id, side=side, batch_id=batch_id, limit=limit, amount=amount)
        state.orders[side] = order
        logger.info(f"Placed {side.value} {order_id} {amount} {asset} @ {limit}", extra=self._log_extra)
        return order
