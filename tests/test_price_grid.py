"""Tests for the price grid."""

import pytest
from liquidity_engine.core.constants import MAX_LIMIT, MIN_LIMIT
from liquidity_engine.core.exceptions import DomainError, InvalidState, Overflow
from liquidity_engine.data.price_grid import (
    align_limit,
    base_quote_exchange_rate,
    limit_to_price,
    price_to_limit,
)
from liquidity_engine.utils.fixed_point import UFixed


def test_limit_zero_is_unit_price():
    """Test that limit 0 maps to price 1."""
    assert limit_to_price(0) == UFixed.one()
    assert price_to_limit(UFixed.one()) == 0


def test_prices_increase_with_limit():
    """Test grid monotonicity."""
    assert limit_to_price(10) > limit_to_price(9)
    assert limit_to_price(-9) > limit_to_price(-10)


@pytest.mark.parametrize("limit", [-5000, -1, 1, 7, 12345])
def test_grid_prices_round_trip(limit):
    """Test that grid prices map back to their own limit in both directions."""
    price = limit_to_price(limit)
    assert price_to_limit(price) == limit
    assert price_to_limit(price, round_up=True) == limit


def test_off_grid_price_rounding():
    """Test rounding of a price between two limits."""
    price = UFixed.from_raw(limit_to_price(5).raw + 1)
    assert price_to_limit(price) == 5
    assert price_to_limit(price, round_up=True) == 6


def test_width_alignment():
    """Test that limits snap to multiples of width."""
    assert price_to_limit(limit_to_price(7), width=5) == 5
    assert price_to_limit(limit_to_price(7), width=5, round_up=True) == 10
    assert price_to_limit(limit_to_price(-7), width=5) == -10
    assert price_to_limit(limit_to_price(-7), width=5, round_up=True) == -5
    assert align_limit(-3, 2) == -4
    assert align_limit(-3, 2, round_up=True) == -2


def test_invalid_inputs():
    """Test zero price, bad width and out-of-range limits."""
    with pytest.raises(DomainError):
        price_to_limit(UFixed.zero())
    with pytest.raises(InvalidState):
        price_to_limit(UFixed.one(), width=0)
    with pytest.raises(Overflow):
        limit_to_price(MAX_LIMIT + 1)
    with pytest.raises(Overflow):
        limit_to_price(MIN_LIMIT - 1)


def test_exchange_rate():
    """Test base/quote conversion at a limit."""
    rate = base_quote_exchange_rate(0)
    assert rate(1000) == 1000
    assert rate.quote_to_base(1000) == 1000

    rate = base_quote_exchange_rate(10)
    assert rate.base_to_quote(1_000_000) == 1_000_100
    assert rate.quote_to_base(1_000_100) <= 1_000_000
