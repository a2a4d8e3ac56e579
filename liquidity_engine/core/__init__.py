"""Core module for the liquidity engine.

This module contains configuration, constants and the error hierarchy.
Domain models live in ``liquidity_engine.core.models``.
"""

from liquidity_engine.core.config import (
    FixedConfig,
    MarketConfig,
    ModelConfig,
    OracleConfig,
    Settings,
    StrategyConfig,
    StrategyKind,
)
from liquidity_engine.core.constants import (
    DEFAULT_WIDTH,
    MAX_LIMIT,
    MIN_LIMIT,
    PRICE_BASE,
)
from liquidity_engine.core.exceptions import (
    ArithmeticFault,
    ConfigurationError,
    DivisionByZero,
    DomainError,
    EngineError,
    InvalidState,
    OrderBookError,
    Overflow,
    Unauthorized,
    Underflow,
)

__all__ = [
    "Settings",
    "StrategyConfig",
    "StrategyKind",
    "MarketConfig",
    "ModelConfig",
    "OracleConfig",
    "FixedConfig",
    "DEFAULT_WIDTH",
    "MAX_LIMIT",
    "MIN_LIMIT",
    "PRICE_BASE",
    "EngineError",
    "ArithmeticFault",
    "Overflow",
    "Underflow",
    "DivisionByZero",
    "DomainError",
    "InvalidState",
    "Unauthorized",
    "OrderBookError",
    "ConfigurationError",
]
