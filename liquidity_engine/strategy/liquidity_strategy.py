"""Liquidity strategy engine.

This module wires the quote engine, the order lifecycle manager and the
share ledger into the strategy's outer call surface. One instance owns
one ``EngineState``; callers must serialize calls against it.
"""

import logging
from typing import Any, Dict, Optional, Tuple
from pydantic import BaseModel, Field

from liquidity_engine.accounting.shares import ShareLedger
from liquidity_engine.core.config import Settings
from liquidity_engine.core.exceptions import InvalidState, OrderBookError
from liquidity_engine.core.models import (
    CollectionReport,
    CycleReport,
    EngineState,
    Reserves,
    RestingOrder,
    Side,
    Timer,
)
from liquidity_engine.core.orderbook import IOrderBook, IPriceOracle
from liquidity_engine.execution.order_manager import OrderLifecycleManager
from liquidity_engine.monitoring.events import (
    CycleCompleted,
    Deposited,
    EventBus,
    ManualCollected,
    OwnershipTransferred,
    Paused,
    PublicChanged,
    QuoteParametersChanged,
    SharesTransferred,
    Unpaused,
    Withdrawn,
)
from liquidity_engine.risk.guardian import StrategyGuardian
from liquidity_engine.strategy.quoting import QuoteContext, QuoteEngine, build_quote_engine

logger = logging.getLogger(__name__)


class DepositResult(BaseModel):
    """Shares minted and amounts pulled by a deposit."""

    shares: int = Field(..., description="Shares minted")
    base_amount: int = Field(..., description="Base taken from the depositor")
    quote_amount: int = Field(..., description="Quote taken from the depositor")


class LiquidityStrategy:
    """Quoting strategy over a pooled two-asset reserve."""

    def __init__(
        self,
        settings: Settings,
        orderbook: IOrderBook,
        quote_engine: Optional[QuoteEngine] = None,
        oracle: Optional[IPriceOracle] = None,
        events: Optional[EventBus] = None,
        state: Optional[EngineState] = None,
    ):
        """Initialize strategy.

        Args:
            settings: Application settings
            orderbook: Order book (real or simulated)
            quote_engine: Quote source (built from settings if omitted)
            oracle: Price oracle for oracle strategies
            events: Event bus (a private one is created if omitted)
            state: Existing engine state to resume from
        """
        self.settings = settings
        self.market_id = settings.market.market_id
        self.orderbook = orderbook
        self.quote_engine = quote_engine or build_quote_engine(settings.strategy, settings.market, oracle)
        self.events = events or EventBus()

        self.state = state or EngineState(
            owner=settings.strategy.owner,
            public=settings.strategy.public,
            timer=Timer(min_interval=settings.strategy.min_interval),
        )
        self.guardian = StrategyGuardian(self.state)
        self.order_manager = OrderLifecycleManager(orderbook, self.market_id)
        self.ledger = ShareLedger(self.state.shares)
        self._log_extra = {"market": self.market_id}

    # Read accessors

    @property
    def reserves(self) -> Reserves:
        return self.state.reserves.model_copy()

    @property
    def resting_orders(self) -> Dict[Side, RestingOrder]:
        return {side: order.model_copy() for side, order in self.state.orders.items()}

    @property
    def last_trigger(self) -> Optional[int]:
        return self.state.timer.last_trigger

    @property
    def total_shares(self) -> int:
        return self.ledger.total_shares

    def shares_of(self, holder: str) -> int:
        return self.ledger.balance_of(holder)

    def pool_balances(self) -> Tuple[int, int]:
        """Reserves plus this strategy's share of its resting batches.

        Returns:
            Tuple of (base_amount, quote_amount)
        """
        base, quote = self.state.reserves.base, self.state.reserves.quote
        for order in self.state.orders.values():
            batch = self.orderbook.batch_info(order.batch_id)
            if batch.amount_in == 0:
                continue
            base += batch.base_amount * order.amount // batch.amount_in
            quote += batch.quote_amount * order.amount // batch.amount_in
        return base, quote

    # Quoting cycle

    def trigger_cycle(self, now: int) -> Optional[CycleReport]:
        """Run one quoting cycle.

        Skipped without touching state while paused or rate limited. The
        quote is computed before any mutation, so pricing faults abort the
        cycle with state unchanged. Batch lookups happen here only for
        quote engines that price off the pool balances; otherwise a failed
        lookup is handled per side by the lifecycle manager.

        Args:
            now: Current block

        Returns:
            Cycle report, or None if the cycle was skipped
        """
        is_allowed, reason = self.guardian.check_cycle(now)
        if not is_allowed:
            logger.debug(f"Cycle skipped at {now}: {reason}", extra=self._log_extra)
            return None

        curr_limit = self.orderbook.current_traded_limit(self.market_id)
        width = self.orderbook.width(self.market_id)
        if self.quote_engine.uses_balances:
            base, quote = self.pool_balances()
        else:
            base, quote = self.state.reserves.base, self.state.reserves.quote
        context = QuoteContext(curr_limit=curr_limit, width=width, base_amount=base, quote_amount=quote)
        target = self.quote_engine.compute_quote(context)

        report = self.order_manager.run_cycle(self.state, target, curr_limit, width)
        self.state.timer.last_trigger = now

        bid = report.placed.get(Side.BID)
        ask = report.placed.get(Side.ASK)
        self.events.emit(
            CycleCompleted(
                market_id=self.market_id,
                block=now,
                bid_limit=target.bid_limit,
                ask_limit=target.ask_limit,
                curr_limit=curr_limit,
                collected_base=report.collected_base,
                collected_quote=report.collected_quote,
                bid_order_id=bid.order_id if bid else None,
                bid_amount=bid.amount if bid else 0,
                ask_order_id=ask.order_id if ask else None,
                ask_amount=ask.amount if ask else 0,
                errors={side.value: error for side, error in report.errors.items()},
            )
        )
        logger.info(
            f"Cycle {now}: curr={curr_limit} bid={target.bid_limit} ask={target.ask_limit} "
            f"collected=({report.collected_base}, {report.collected_quote}) "
            f"reserves=({self.state.reserves.base}, {self.state.reserves.quote})",
            extra=self._log_extra,
        )
        return report

    def manual_collect(self, caller: str) -> CollectionReport:
        """Collect both resting orders without re-quoting (owner only)."""
        self.guardian.require_owner(caller, "collect")
        report = self.order_manager.collect_all(self.state)
        self.events.emit(
            ManualCollected(
                market_id=self.market_id,
                caller=caller,
                collected_base=report.collected_base,
                collected_quote=report.collected_quote,
                errors={side.value: error for side, error in report.errors.items()},
            )
        )
        return report

    # Share ledger

    def seed(self, caller: str, base_amount: int, quote_amount: int) -> int:
        """Seed an empty pool.

        Args:
            caller: Depositor
            base_amount: Base contributed
            quote_amount: Quote contributed

        Returns:
            Shares minted (base units at the current price)
        """
        self.guardian.require_depositor(caller)
        self.guardian.require_active("seed")
        curr_limit = self.orderbook.current_traded_limit(self.market_id)
        rate = self.orderbook.base_quote_exchange_rate(curr_limit, self.orderbook.width(self.market_id))

        shares = self.ledger.seed(caller, base_amount, quote_amount, rate.quote_to_base)
        self.state.reserves.credit(base=base_amount, quote=quote_amount)

        self._emit_mint(caller, shares)
        self.events.emit(
            Deposited(
                market_id=self.market_id,
                holder=caller,
                base_amount=base_amount,
                quote_amount=quote_amount,
                shares=shares,
                seeded=True,
            )
        )
        logger.info(f"Seeded by {caller}: base={base_amount} quote={quote_amount} shares={shares}", extra=self._log_extra)
        return shares

    def deposit(self, caller: str, base_amount: int, quote_amount: int) -> DepositResult:
        """Deposit into a seeded pool.

        The deposit is checked against the projected pool balances before
        anything is touched. Resting orders are then collected so the
        pro-rata ratios use the whole pool. Only the amounts backing the
        minted shares are taken, rounded up in the pool's favor.

        Args:
            caller: Depositor
            base_amount: Base offered
            quote_amount: Quote offered

        Returns:
            Shares minted and amounts taken
        """
        self.guardian.require_depositor(caller)
        self.guardian.require_active("deposit")
        if self.ledger.total_shares == 0:
            raise InvalidState("Pool not seeded")
        if base_amount <= 0 or quote_amount <= 0:
            raise InvalidState("Deposit amounts must be positive", {"base": base_amount, "quote": quote_amount})

        base_pool, quote_pool = self.pool_balances()
        self.ledger.preview_deposit(base_amount, quote_amount, base_pool, quote_pool)

        self._collect_for_ledger()
        reserves = self.state.reserves
        shares = self.ledger.preview_deposit(base_amount, quote_amount, reserves.base, reserves.quote)
        base_in, quote_in = self.ledger.amounts_for_shares(shares, reserves.base, reserves.quote, round_up=True)
        base_in, quote_in = min(base_in, base_amount), min(quote_in, quote_amount)

        self.ledger.deposit(caller, base_amount, quote_amount, reserves.base, reserves.quote)
        reserves.credit(base=base_in, quote=quote_in)

        self._emit_mint(caller, shares)
        self.events.emit(
            Deposited(
                market_id=self.market_id,
                holder=caller,
                base_amount=base_in,
                quote_amount=quote_in,
                shares=shares,
            )
        )
        logger.info(f"Deposit by {caller}: base={base_in} quote={quote_in} shares={shares}", extra=self._log_extra)
        return DepositResult(shares=shares, base_amount=base_in, quote_amount=quote_in)

    def withdraw(self, caller: str, shares: int) -> Tuple[int, int]:
        """Burn shares for a pro-rata slice of the pool.

        Checked against the projected pool balances, then resting orders
        are collected and the payout is taken from reserves.

        Args:
            caller: Share holder
            shares: Shares to burn

        Returns:
            Tuple of (base_amount, quote_amount) paid out
        """
        balance = self.ledger.balance_of(caller)
        if shares <= 0 or shares > balance:
            raise InvalidState("Invalid share amount", {"holder": caller, "shares": shares, "balance": balance})

        self.ledger.preview_withdraw(caller, shares, *self.pool_balances())

        self._collect_for_ledger()
        reserves = self.state.reserves
        base_out, quote_out = self.ledger.withdraw(caller, shares, reserves.base, reserves.quote)
        reserves.debit(base=base_out, quote=quote_out)

        self.events.emit(SharesTransferred(market_id=self.market_id, sender=caller, recipient=None, shares=shares))
        self.events.emit(
            Withdrawn(
                market_id=self.market_id,
                holder=caller,
                base_amount=base_out,
                quote_amount=quote_out,
                shares=shares,
            )
        )
        logger.info(f"Withdraw by {caller}: base={base_out} quote={quote_out} shares={shares}", extra=self._log_extra)
        return base_out, quote_out

    def transfer_shares(self, caller: str, recipient: str, shares: int) -> None:
        """Move shares to another holder."""
        self.ledger.transfer(caller, recipient, shares)
        self.events.emit(SharesTransferred(market_id=self.market_id, sender=caller, recipient=recipient, shares=shares))

    # Administration

    def set_quote_parameters(self, caller: str, **params: Any) -> Dict[str, Any]:
        """Update the quote engine's parameters (owner only)."""
        self.guardian.require_owner(caller, "set quote parameters")
        applied = self.quote_engine.set_parameters(**params)
        self.events.emit(
            QuoteParametersChanged(
                market_id=self.market_id,
                caller=caller,
                kind=self.quote_engine.kind.value,
                parameters=applied,
            )
        )
        logger.info(f"Quote parameters set by {caller}: {applied}", extra=self._log_extra)
        return applied

    def pause(self, caller: str) -> None:
        self.guardian.pause(caller)
        self.events.emit(Paused(market_id=self.market_id, caller=caller))

    def unpause(self, caller: str) -> None:
        self.guardian.unpause(caller)
        self.events.emit(Unpaused(market_id=self.market_id, caller=caller))

    def set_public(self, caller: str, public: bool) -> None:
        self.guardian.require_owner(caller, "change deposit access")
        self.state.public = public
        self.events.emit(PublicChanged(market_id=self.market_id, caller=caller, public=public))

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        self.guardian.require_owner(caller, "transfer ownership")
        previous = self.state.owner
        self.state.owner = new_owner
        self.events.emit(OwnershipTransferred(market_id=self.market_id, previous_owner=previous, new_owner=new_owner))
        logger.warning(f"Ownership transferred from {previous} to {new_owner}", extra=self._log_extra)

    def _collect_for_ledger(self) -> None:
        if not self.state.orders:
            return
        report = self.order_manager.collect_all_or_none(self.state)
        if report.errors:
            raise OrderBookError(
                "Could not collect resting orders before share accounting",
                {
                    "errors": {side.value: error for side, error in report.errors.items()},
                    "restored": [side.value for side in report.restored],
                },
            )

    def _emit_mint(self, holder: str, shares: int) -> None:
        self.events.emit(SharesTransferred(market_id=self.market_id, sender=None, recipient=holder, shares=shares))
