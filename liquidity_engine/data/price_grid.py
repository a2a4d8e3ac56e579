"""Venue price grid.

Price limits are integer tick indices. The price at limit ``L`` is
``1.00001 ** L`` quote units per base unit, and resting orders may only
sit on limits that are multiples of the market width.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_FLOOR, localcontext

from liquidity_engine.core.constants import MAX_LIMIT, MIN_LIMIT, PRICE_BASE
from liquidity_engine.core.exceptions import DomainError, InvalidState, Overflow
from liquidity_engine.utils.fixed_point import FRACTION_BITS, UFixed

_PRECISION = 60


def _check_width(width: int) -> None:
    if width <= 0:
        raise InvalidState("Width must be positive", {"width": width})


def _check_range(limit: int) -> None:
    if limit < MIN_LIMIT or limit > MAX_LIMIT:
        raise Overflow("Price limit out of range", {"limit": limit})


def _power(limit: int) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return PRICE_BASE ** limit


def _grid_raw(limit: int) -> int:
    return UFixed.from_decimal(_power(limit)).raw


def limit_to_price(limit: int) -> UFixed:
    """Price at a limit, truncated to the fixed-point grid.

    Args:
        limit: Price limit

    Returns:
        Price in quote per base
    """
    _check_range(limit)
    return UFixed(_grid_raw(limit))


def price_to_limit(price: UFixed, width: int = 1, round_up: bool = False) -> int:
    """Map a price onto the width-aligned limit grid.

    Args:
        price: Price in quote per base
        width: Market width
        round_up: Round to the next limit above instead of below

    Returns:
        Aligned price limit
    """
    _check_width(width)
    if price.is_zero():
        raise DomainError("Cannot map zero price to a limit")

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        log_ratio = price.to_decimal().ln() / PRICE_BASE.ln()
        estimate = int(log_ratio.to_integral_value(rounding=ROUND_FLOOR))

    # Compare on the truncated grid so limit_to_price round-trips exactly
    while _grid_raw(estimate + 1) <= price.raw:
        estimate += 1
    while _grid_raw(estimate) > price.raw:
        estimate -= 1

    if round_up and _grid_raw(estimate) != price.raw:
        estimate += 1

    if round_up:
        aligned = -((-estimate) // width) * width
    else:
        aligned = (estimate // width) * width

    _check_range(aligned)
    return aligned


def align_limit(limit: int, width: int, round_up: bool = False) -> int:
    """Align a raw limit to a multiple of width."""
    _check_width(width)
    if round_up:
        return -((-limit) // width) * width
    return (limit // width) * width


@dataclass(frozen=True)
class ExchangeRate:
    """Base/quote conversion at a fixed limit.

    Calling the rate converts a base amount into quote units. Both
    directions truncate.
    """

    limit: int
    width: int
    price: UFixed

    def __call__(self, base_amount: int) -> int:
        return self.base_to_quote(base_amount)

    def base_to_quote(self, base_amount: int) -> int:
        return (base_amount * self.price.raw) >> FRACTION_BITS

    def quote_to_base(self, quote_amount: int) -> int:
        if self.price.is_zero():
            raise DomainError("Zero price cannot convert quote to base", {"limit": self.limit})
        return (quote_amount << FRACTION_BITS) // self.price.raw


def base_quote_exchange_rate(limit: int, width: int = 1) -> ExchangeRate:
    """Conversion function at a price limit."""
    return ExchangeRate(limit=limit, width=width, price=limit_to_price(limit))
