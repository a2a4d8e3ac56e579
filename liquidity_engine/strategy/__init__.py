"""Strategy module for the liquidity engine.

This module contains the pricing model, the quote engines and the
strategy facade.
"""

from liquidity_engine.strategy.pricing import PricingEngine
from liquidity_engine.strategy.quoting import (
    FixedQuoteEngine,
    ModelQuoteEngine,
    OracleQuoteEngine,
    QuoteContext,
    QuoteEngine,
    build_quote_engine,
)
from liquidity_engine.strategy.liquidity_strategy import DepositResult, LiquidityStrategy

__all__ = [
    "PricingEngine",
    "QuoteContext",
    "QuoteEngine",
    "FixedQuoteEngine",
    "OracleQuoteEngine",
    "ModelQuoteEngine",
    "build_quote_engine",
    "DepositResult",
    "LiquidityStrategy",
]
