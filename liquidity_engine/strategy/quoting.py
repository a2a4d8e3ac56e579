"""Quote engines.

Each engine turns the market context into one ``Quote`` per cycle. The
three variants share the same order lifecycle manager:

- ``FixedQuoteEngine``: owner-set bid/ask limits
- ``OracleQuoteEngine``: oracle bid/ask prices mapped to the limit grid
- ``ModelQuoteEngine``: Avellaneda-Stoikov pricing model
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError

from liquidity_engine.core.config import (
    FixedConfig,
    MarketConfig,
    ModelConfig,
    OracleConfig,
    StrategyConfig,
    StrategyKind,
)
from liquidity_engine.core.exceptions import ConfigurationError, InvalidState
from liquidity_engine.core.models import InventoryState, Quote
from liquidity_engine.core.orderbook import IPriceOracle
from liquidity_engine.data.price_grid import align_limit, price_to_limit
from liquidity_engine.strategy.pricing import PricingEngine
from liquidity_engine.utils.fixed_point import UFixed

logger = logging.getLogger(__name__)


class QuoteContext(BaseModel):
    """Market and inventory snapshot handed to a quote engine."""

    curr_limit: int = Field(..., description="Current traded limit")
    width: int = Field(1, gt=0, description="Market width")
    base_amount: int = Field(0, ge=0, description="Base holdings of the pool")
    quote_amount: int = Field(0, ge=0, description="Quote holdings of the pool")


class QuoteEngine(ABC):
    """Interface for quote sources."""

    kind: StrategyKind
    # Whether compute_quote reads the pool balances in the context
    uses_balances = False

    def __init__(self, params: BaseModel):
        self.params = params

    @abstractmethod
    def compute_quote(self, context: QuoteContext) -> Quote:
        """Compute the target quote for this cycle.

        Args:
            context: Market and inventory snapshot

        Returns:
            Width-aligned quote
        """
        pass

    def parameters(self) -> Dict[str, Any]:
        return self.params.model_dump()

    def set_parameters(self, **updates: Any) -> Dict[str, Any]:
        """Validate and apply new quote parameters.

        Raises:
            InvalidState: On unknown names or invalid values (parameters unchanged)
        """
        unknown = set(updates) - set(type(self.params).model_fields)
        if unknown:
            raise InvalidState("Unknown quote parameters", {"names": sorted(unknown)})
        try:
            params = type(self.params).model_validate({**self.params.model_dump(), **updates})
        except ValidationError as e:
            raise InvalidState("Invalid quote parameters", {"errors": e.error_count(), "detail": str(e)}) from e
        self.params = params
        return self.parameters()


class FixedQuoteEngine(QuoteEngine):
    """Quotes owner-set limits."""

    kind = StrategyKind.FIXED
    params: FixedConfig

    def compute_quote(self, context: QuoteContext) -> Quote:
        return Quote(
            bid_limit=align_limit(self.params.bid_limit, context.width, round_up=False),
            ask_limit=align_limit(self.params.ask_limit, context.width, round_up=True),
        )


class OracleQuoteEngine(QuoteEngine):
    """Replicates an oracle's bid/ask on the limit grid."""

    kind = StrategyKind.ORACLE
    params: OracleConfig

    def __init__(self, params: OracleConfig, oracle: IPriceOracle, pair_id: str):
        super().__init__(params)
        self.oracle = oracle
        self.pair_id = pair_id

    def compute_quote(self, context: QuoteContext) -> Quote:
        bid_price, ask_price = self.oracle.bid_ask_price(self.pair_id)
        if bid_price > ask_price:
            raise InvalidState("Oracle quote is crossed", {"bid": bid_price, "ask": ask_price})

        bid_limit = price_to_limit(bid_price, round_up=False) - self.params.min_spread
        ask_limit = price_to_limit(ask_price, round_up=True) + self.params.min_spread
        bid_limit = align_limit(bid_limit, context.width, round_up=False)
        ask_limit = align_limit(ask_limit, context.width, round_up=True)
        if ask_limit <= bid_limit:
            ask_limit = bid_limit + context.width
        logger.debug(f"Oracle quote {self.pair_id}: bid={bid_price} ask={ask_price} -> {bid_limit}/{ask_limit}")
        return Quote(bid_limit=bid_limit, ask_limit=ask_limit)


class ModelQuoteEngine(QuoteEngine):
    """Quotes from the Avellaneda-Stoikov model."""

    kind = StrategyKind.MODEL
    uses_balances = True
    params: ModelConfig

    def __init__(self, params: ModelConfig):
        super().__init__(params)
        self.pricing_engine = PricingEngine()

    def inventory_state(self, context: QuoteContext) -> InventoryState:
        return InventoryState(
            curr_limit=context.curr_limit,
            width=context.width,
            base_amount=context.base_amount,
            quote_amount=context.quote_amount,
            target_ratio=UFixed.from_decimal(self.params.target_ratio),
            risk_aversion=UFixed.from_decimal(self.params.risk_aversion),
            volatility_sq=UFixed.from_decimal(self.params.volatility_sq),
            arrival_intensity=UFixed.from_decimal(self.params.arrival_intensity),
        )

    def compute_quote(self, context: QuoteContext) -> Quote:
        return self.pricing_engine.compute_quote(self.inventory_state(context))


def build_quote_engine(
    config: StrategyConfig,
    market: MarketConfig,
    oracle: Optional[IPriceOracle] = None,
) -> QuoteEngine:
    """Create the quote engine selected by the strategy config.

    Raises:
        ConfigurationError: If an oracle strategy has no oracle
    """
    if config.kind == StrategyKind.FIXED:
        return FixedQuoteEngine(config.fixed)
    if config.kind == StrategyKind.ORACLE:
        if oracle is None:
            raise ConfigurationError("Oracle strategy requires a price oracle")
        return OracleQuoteEngine(config.oracle, oracle, market.pair_id)
    return ModelQuoteEngine(config.model)
