"""Liquidity engine: an inventory-aware two-sided quoting strategy for batch limit order books."""

__version__ = "0.1.0"
