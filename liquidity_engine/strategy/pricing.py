"""Avellaneda-Stoikov pricing model.

This module computes, entirely in fixed point:
- Inventory delta (quote holdings relative to the target mix)
- Reservation price:  r = s - q * gamma * sigma^2
- Optimal spread:     D = gamma * sigma^2 + (2 / gamma) * log2(1 + gamma / k)
- Quotes:             bid = r - D/2, ask = r + D/2

A positive inventory delta means the pool holds more quote than its
target, so the reservation price moves down.
"""

import logging
from typing import Callable, Optional, Tuple

from liquidity_engine.core.exceptions import DomainError
from liquidity_engine.core.models import InventoryState, Quote
from liquidity_engine.data.price_grid import base_quote_exchange_rate, limit_to_price, price_to_limit
from liquidity_engine.utils.fixed_point import SFixed, UFixed

logger = logging.getLogger(__name__)


def inventory_delta(
    curr_limit: int,
    width: int,
    base_amount: int,
    quote_amount: int,
    target_ratio: UFixed,
    exchange_rate: Optional[Callable[[int], int]] = None,
) -> SFixed:
    """Quote holdings minus the target quote holdings.

    Args:
        curr_limit: Current traded limit
        width: Market width
        base_amount: Base holdings
        quote_amount: Quote holdings
        target_ratio: Target share of pool value held in quote
        exchange_rate: Base to quote conversion (defaults to the venue rate at curr_limit)

    Returns:
        Signed delta in quote units (positive = quote overexposed)
    """
    if base_amount == 0 and quote_amount == 0:
        return SFixed.zero()

    rate = exchange_rate or base_quote_exchange_rate(curr_limit, width)
    base_in_quote = rate(base_amount)
    total = base_in_quote + quote_amount
    if total == 0:
        return SFixed.zero()

    target = target_ratio.mul(UFixed.from_int(total))
    return SFixed.from_int(quote_amount).sub(SFixed.from_ufixed(target))


def reservation_price(
    curr_price: UFixed,
    inventory_delta: SFixed,
    volatility_sq: UFixed,
    risk_aversion: UFixed,
) -> UFixed:
    """Inventory-adjusted fair price.

    Args:
        curr_price: Current market price
        inventory_delta: Signed inventory delta
        volatility_sq: Squared volatility
        risk_aversion: Risk aversion

    Returns:
        Reservation price

    Raises:
        Underflow: If the downward skew exceeds the current price
    """
    skew = inventory_delta.magnitude.mul(risk_aversion).mul(volatility_sq)
    if inventory_delta.sign() > 0:
        return curr_price.sub(skew)
    return curr_price.add(skew)


def optimal_spread(volatility_sq: UFixed, risk_aversion: UFixed, arrival_intensity: UFixed) -> UFixed:
    """Optimal bid/ask distance around the reservation price.

    Args:
        volatility_sq: Squared volatility
        risk_aversion: Risk aversion
        arrival_intensity: Order arrival intensity

    Returns:
        Spread in price units

    Raises:
        DomainError: If arrival intensity or risk aversion is zero
    """
    if arrival_intensity.is_zero():
        raise DomainError("Arrival intensity must be positive")
    if risk_aversion.is_zero():
        raise DomainError("Risk aversion must be positive")

    log_arg = UFixed.one().add(risk_aversion.div(arrival_intensity))
    if log_arg.is_zero():
        raise DomainError("log2 argument must be positive", {"arg": log_arg})
    log_term = log_arg.log2()
    if log_term.sign() < 0:
        raise DomainError("Negative log term", {"log2": log_term})

    inventory_term = risk_aversion.mul(volatility_sq)
    intensity_term = UFixed.from_int(2).div(risk_aversion).mul(log_term.magnitude)
    return inventory_term.add(intensity_term)


def bid_ask_prices(reservation: UFixed, spread: UFixed) -> Tuple[UFixed, UFixed]:
    """Split the spread evenly around the reservation price."""
    half_spread = spread.half()
    return reservation.sub(half_spread), reservation.add(half_spread)


class PricingEngine:
    """Calculates bid/ask limits from the Avellaneda-Stoikov model."""

    def compute_quote(self, state: InventoryState) -> Quote:
        """Compute bid/ask limits.

        Bid prices round down and ask prices round up on the venue grid, so
        quotes are never more aggressive than the model's fair quote.

        Args:
            state: Pricing inputs

        Returns:
            Quote with width-aligned bid/ask limits
        """
        curr_price = limit_to_price(state.curr_limit)
        delta = inventory_delta(
            state.curr_limit,
            state.width,
            state.base_amount,
            state.quote_amount,
            state.target_ratio,
        )
        reservation = reservation_price(curr_price, delta, state.volatility_sq, state.risk_aversion)
        spread = optimal_spread(state.volatility_sq, state.risk_aversion, state.arrival_intensity)
        bid_price, ask_price = bid_ask_prices(reservation, spread)

        bid_limit = price_to_limit(bid_price, state.width, round_up=False)
        ask_limit = price_to_limit(ask_price, state.width, round_up=True)
        if ask_limit <= bid_limit:
            ask_limit = bid_limit + state.width

        logger.debug(
            f"Model quote: price={curr_price} delta={delta} reservation={reservation} "
            f"spread={spread} -> bid={bid_limit} ask={ask_limit}"
        )
        return Quote(bid_limit=bid_limit, ask_limit=ask_limit)
