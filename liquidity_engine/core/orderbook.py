"""Collaborator interfaces for the order book and price oracle.

The strategy talks to the venue only through these interfaces, so a real
venue adapter and the simulated order book are interchangeable. Calls are
synchronous: each either completes or raises ``OrderBookError``.
"""

from abc import ABC, abstractmethod
from typing import Tuple
from liquidity_engine.core.models import OrderBatch
from liquidity_engine.data.price_grid import ExchangeRate, base_quote_exchange_rate
from liquidity_engine.utils.fixed_point import UFixed


class IOrderBook(ABC):
    """Interface for order books (real or simulated)."""

    @abstractmethod
    def current_traded_limit(self, market_id: str) -> int:
        """Get the limit the market last traded at.

        Args:
            market_id: Market ID

        Returns:
            Current traded price limit
        """
        pass

    @abstractmethod
    def width(self, market_id: str) -> int:
        """Get the limit spacing of a market.

        Args:
            market_id: Market ID

        Returns:
            Market width
        """
        pass

    @abstractmethod
    def batch_info(self, batch_id: str) -> OrderBatch:
        """Get a snapshot of a batch.

        Args:
            batch_id: Batch ID

        Returns:
            Batch snapshot
        """
        pass

    @abstractmethod
    def place_order(self, market_id: str, is_bid: bool, amount: int, limit: int) -> Tuple[str, str]:
        """Place a limit order.

        Args:
            market_id: Market ID
            is_bid: True to offer quote for base, False to offer base for quote
            amount: Amount of the offered asset
            limit: Price limit

        Returns:
            Tuple of (order_id, batch_id)
        """
        pass

    @abstractmethod
    def collect_order(self, order_id: str) -> Tuple[int, int]:
        """Cancel an order and collect its proceeds.

        Args:
            order_id: Order ID

        Returns:
            Tuple of (base_amount, quote_amount) paid out
        """
        pass

    def base_quote_exchange_rate(self, limit: int, width: int) -> ExchangeRate:
        """Get the base/quote conversion at a limit.

        Args:
            limit: Price limit
            width: Market width

        Returns:
            Conversion function from base to quote units
        """
        return base_quote_exchange_rate(limit, width)


class IPriceOracle(ABC):
    """Interface for price oracles."""

    @abstractmethod
    def bid_ask_price(self, pair_id: str) -> Tuple[UFixed, UFixed]:
        """Get the oracle bid and ask price.

        Args:
            pair_id: Oracle pair ID

        Returns:
            Tuple of (bid_price, ask_price) in quote per base
        """
        pass
