"""Strategy guardian for authorization, pause and cycle throttling.

This module provides pre-operation checks: every check runs before the
operation mutates anything, and the cycle check has no side effects.
"""

import logging
from typing import Optional
from liquidity_engine.core.exceptions import InvalidState, Unauthorized
from liquidity_engine.core.models import EngineState
from liquidity_engine.risk.limits import CycleLimitsChecker

logger = logging.getLogger(__name__)


class StrategyGuardian:
    """Owner checks, pause switch and cycle rate limit."""

    def __init__(self, state: EngineState):
        """Initialize strategy guardian.

        Args:
            state: Engine state holding owner, pause flag and timer
        """
        self.state = state
        self.limits_checker = CycleLimitsChecker()

    def check_cycle(self, now: int) -> tuple[bool, Optional[str]]:
        """Check if a cycle may act.

        Args:
            now: Current block

        Returns:
            Tuple of (is_allowed, reason_if_skipped)
        """
        is_violated, reason = self.limits_checker.check_paused(self.state)
        if is_violated:
            return (False, reason)

        is_violated, reason = self.limits_checker.check_interval(self.state.timer, now)
        if is_violated:
            return (False, reason)

        return (True, None)

    def is_owner(self, caller: str) -> bool:
        return caller == self.state.owner

    def require_owner(self, caller: str, action: str) -> None:
        """Reject non-owner callers.

        Raises:
            Unauthorized: If caller is not the owner
        """
        if not self.is_owner(caller):
            raise Unauthorized(f"Only the owner may {action}", context={"caller": caller})

    def require_depositor(self, caller: str) -> None:
        """Reject deposits into a private pool from anyone but the owner.

        Raises:
            Unauthorized: If the pool is private and caller is not the owner
        """
        if not self.state.public and not self.is_owner(caller):
            raise Unauthorized("Deposits are restricted to the owner", context={"caller": caller})

    def require_active(self, action: str) -> None:
        """Reject an action while paused.

        Raises:
            InvalidState: If the strategy is paused
        """
        if self.state.paused:
            raise InvalidState(f"Cannot {action} while paused")

    def pause(self, caller: str) -> None:
        """Pause the strategy (owner only)."""
        self.require_owner(caller, "pause")
        if self.state.paused:
            raise InvalidState("Already paused")
        self.state.paused = True
        logger.warning(f"Strategy paused by {caller}")

    def unpause(self, caller: str) -> None:
        """Resume the strategy (owner only)."""
        self.require_owner(caller, "unpause")
        if not self.state.paused:
            raise InvalidState("Not paused")
        self.state.paused = False
        logger.info(f"Strategy unpaused by {caller}")

    def is_paused(self) -> bool:
        return self.state.paused
