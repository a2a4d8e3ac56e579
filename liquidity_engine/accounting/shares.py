"""Proportional share accounting over pooled reserves.

Shares are denominated in base units at seeding time. All amounts are
integers and every division truncates, so no sequence of partial
withdrawals can extract more than a single full withdrawal.
"""

import logging
from typing import Callable, Tuple
from liquidity_engine.core.exceptions import DivisionByZero, InvalidState
from liquidity_engine.core.models import SharePool

logger = logging.getLogger(__name__)


class ShareLedger:
    """Mints, burns and transfers pool shares.

    Every preview method validates without mutating; the mutating methods
    call the matching preview first, so a failed call leaves the pool
    untouched.
    """

    def __init__(self, pool: SharePool):
        """Initialize share ledger.

        Args:
            pool: Share pool to maintain (mutated in place)
        """
        self.pool = pool

    @property
    def total_shares(self) -> int:
        return self.pool.total_shares

    def balance_of(self, holder: str) -> int:
        return self.pool.balance_of(holder)

    def preview_seed(self, base_amount: int, quote_amount: int, quote_to_base: Callable[[int], int]) -> int:
        """Shares minted by seeding an empty pool.

        Args:
            base_amount: Base contributed
            quote_amount: Quote contributed
            quote_to_base: Conversion of quote into base units at the current price

        Returns:
            min(base_amount, quote_amount in base units)
        """
        if self.pool.total_shares != 0:
            raise InvalidState("Pool already seeded", {"total_shares": self.pool.total_shares})
        _check_amounts(base_amount, quote_amount)
        shares = min(base_amount, quote_to_base(quote_amount))
        if shares == 0:
            raise InvalidState("Seed mints zero shares", {"base": base_amount, "quote": quote_amount})
        return shares

    def seed(self, holder: str, base_amount: int, quote_amount: int, quote_to_base: Callable[[int], int]) -> int:
        shares = self.preview_seed(base_amount, quote_amount, quote_to_base)
        self._mint(holder, shares)
        return shares

    def preview_deposit(self, base_amount: int, quote_amount: int, base_reserves: int, quote_reserves: int) -> int:
        """Shares minted for a deposit into a seeded pool.

        Args:
            base_amount: Base offered
            quote_amount: Quote offered
            base_reserves: Pool base reserves before the deposit
            quote_reserves: Pool quote reserves before the deposit

        Returns:
            The smaller of the two pro-rata share counts

        Raises:
            InvalidState: If the pool is not seeded or the deposit mints nothing
            DivisionByZero: If either reserve is zero
        """
        total = self.pool.total_shares
        if total == 0:
            raise InvalidState("Pool not seeded")
        _check_amounts(base_amount, quote_amount)
        if base_reserves == 0 or quote_reserves == 0:
            raise DivisionByZero(
                "Deposit against empty reserve",
                {"base_reserves": base_reserves, "quote_reserves": quote_reserves},
            )
        shares = min(base_amount * total // base_reserves, quote_amount * total // quote_reserves)
        if shares == 0:
            raise InvalidState("Deposit mints zero shares", {"base": base_amount, "quote": quote_amount})
        return shares

    def deposit(self, holder: str, base_amount: int, quote_amount: int, base_reserves: int, quote_reserves: int) -> int:
        shares = self.preview_deposit(base_amount, quote_amount, base_reserves, quote_reserves)
        self._mint(holder, shares)
        return shares

    def preview_withdraw(self, holder: str, shares: int, base_reserves: int, quote_reserves: int) -> Tuple[int, int]:
        """Amounts paid out for burning shares.

        Returns:
            Tuple of (base_amount, quote_amount), truncated toward zero
        """
        if shares <= 0:
            raise InvalidState("Shares must be positive", {"shares": shares})
        balance = self.pool.balance_of(holder)
        if shares > balance:
            raise InvalidState("Insufficient shares", {"holder": holder, "shares": shares, "balance": balance})
        return self.amounts_for_shares(shares, base_reserves, quote_reserves)

    def withdraw(self, holder: str, shares: int, base_reserves: int, quote_reserves: int) -> Tuple[int, int]:
        amounts = self.preview_withdraw(holder, shares, base_reserves, quote_reserves)
        self._burn(holder, shares)
        return amounts

    def transfer(self, sender: str, recipient: str, shares: int) -> None:
        """Move shares between holders."""
        if shares <= 0:
            raise InvalidState("Shares must be positive", {"shares": shares})
        balance = self.pool.balance_of(sender)
        if shares > balance:
            raise InvalidState("Insufficient shares", {"holder": sender, "shares": shares, "balance": balance})
        self._burn(sender, shares)
        self._mint(recipient, shares)

    def amounts_for_shares(
        self,
        shares: int,
        base_reserves: int,
        quote_reserves: int,
        round_up: bool = False,
    ) -> Tuple[int, int]:
        """Reserve amounts backing a number of shares.

        Args:
            shares: Share count
            base_reserves: Pool base reserves
            quote_reserves: Pool quote reserves
            round_up: Round in the pool's favor when pulling funds in

        Returns:
            Tuple of (base_amount, quote_amount)
        """
        total = self.pool.total_shares
        if total == 0:
            raise DivisionByZero("No shares outstanding")
        if round_up:
            return -(-shares * base_reserves // total), -(-shares * quote_reserves // total)
        return shares * base_reserves // total, shares * quote_reserves // total

    def _mint(self, holder: str, shares: int) -> None:
        self.pool.balances[holder] = self.pool.balances.get(holder, 0) + shares
        self.pool.total_shares += shares
        logger.debug(f"Minted {shares} shares to {holder} (total {self.pool.total_shares})")

    def _burn(self, holder: str, shares: int) -> None:
        remaining = self.pool.balances[holder] - shares
        if remaining == 0:
            del self.pool.balances[holder]
        else:
            self.pool.balances[holder] = remaining
        self.pool.total_shares -= shares
        logger.debug(f"Burned {shares} shares from {holder} (total {self.pool.total_shares})")


def _check_amounts(base_amount: int, quote_amount: int) -> None:
    if base_amount < 0 or quote_amount < 0:
        raise InvalidState("Amounts must be non-negative", {"base": base_amount, "quote": quote_amount})
