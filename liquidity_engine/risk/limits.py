"""Cycle limits checking functions.

This module provides the pure checks that decide whether a triggered
cycle may act:
- Administrative pause
- Minimum interval between cycles
"""

from typing import Optional
from liquidity_engine.core.models import EngineState, Timer


class CycleLimitsChecker:
    """Checks whether a cycle is allowed to mutate state."""

    def check_paused(self, state: EngineState) -> tuple[bool, Optional[str]]:
        """Check the pause flag.

        Args:
            state: Engine state

        Returns:
            Tuple of (is_violated, reason)
        """
        if state.paused:
            return (True, "Strategy paused")
        return (False, None)

    def check_interval(self, timer: Timer, now: int) -> tuple[bool, Optional[str]]:
        """Check the minimum interval since the last acting cycle.

        Args:
            timer: Cycle timer
            now: Current block

        Returns:
            Tuple of (is_violated, reason)
        """
        if not timer.is_ready(now):
            return (
                True,
                f"Rate limited: now {now} < last {timer.last_trigger} + interval {timer.min_interval}",
            )
        return (False, None)
