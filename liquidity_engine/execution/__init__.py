"""Execution module for the liquidity engine.

This module handles order placement, staleness checks and collection.
"""

from liquidity_engine.execution.order_manager import OrderLifecycleManager
from liquidity_engine.execution.simulated_orderbook import SimulatedOrderBook, StaticPriceOracle

__all__ = [
    "OrderLifecycleManager",
    "SimulatedOrderBook",
    "StaticPriceOracle",
]
