"""Risk module for the liquidity engine.

This module handles authorization, the pause switch and cycle throttling.
"""

from liquidity_engine.risk.limits import CycleLimitsChecker
from liquidity_engine.risk.guardian import StrategyGuardian

__all__ = [
    "CycleLimitsChecker",
    "StrategyGuardian",
]
