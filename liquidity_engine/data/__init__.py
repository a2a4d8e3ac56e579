"""Data module for the liquidity engine.

This module maps price limits to fixed-point prices and back.
"""

from liquidity_engine.data.price_grid import (
    ExchangeRate,
    align_limit,
    base_quote_exchange_rate,
    limit_to_price,
    price_to_limit,
)

__all__ = [
    "ExchangeRate",
    "align_limit",
    "base_quote_exchange_rate",
    "limit_to_price",
    "price_to_limit",
]
