"""Accounting module for pool shares."""

from liquidity_engine.accounting.shares import ShareLedger

__all__ = [
    "ShareLedger",
]
