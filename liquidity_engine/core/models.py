"""Domain models for the liquidity engine.

All models use Pydantic for validation. Amounts are integer token units;
prices and model parameters are fixed-point values.
"""

from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from liquidity_engine.core.exceptions import InvalidState
from liquidity_engine.utils.fixed_point import UFixed


class Side(str, Enum):
    """Order side enumeration."""

    BID = "BID"  # offers quote, buys base
    ASK = "ASK"  # offers base, sells for quote

    @property
    def is_bid(self) -> bool:
        return self is Side.BID

    @property
    def offered_asset(self) -> str:
        """Reserve that funds an order on this side."""
        return "quote" if self is Side.BID else "base"


class Reserves(BaseModel):
    """Funds held by the strategy and not locked in a resting order."""

    base: int = Field(0, ge=0, description="Base asset reserve")
    quote: int = Field(0, ge=0, description="Quote asset reserve")

    def amount(self, asset: str) -> int:
        return self.base if asset == "base" else self.quote

    def credit(self, base: int = 0, quote: int = 0) -> None:
        self.base += base
        self.quote += quote

    def debit(self, base: int = 0, quote: int = 0) -> None:
        if base > self.base or quote > self.quote:
            raise InvalidState(
                "Debit exceeds reserves",
                {"base": base, "quote": quote, "reserves": (self.base, self.quote)},
            )
        self.base -= base
        self.quote -= quote


class RestingOrder(BaseModel):
    """The live order on one side of the book."""

    order_id: str = Field(..., description="Order book order ID")
    side: Side = Field(..., description="Order side")
    batch_id: str = Field(..., description="Batch the order belongs to")
    limit: int = Field(..., description="Price limit of the order")
    amount: int = Field(0, ge=0, description="Amount of the offered asset placed")


class OrderBatch(BaseModel):
    """Aggregate of orders sharing a price limit and nonce (read-only snapshot)."""

    batch_id: str = Field(..., description="Batch ID")
    limit: int = Field(..., description="Price limit")
    is_bid: bool = Field(..., description="Whether the batch is on the bid side")
    amount_in: int = Field(0, ge=0, description="Total offered amount")
    amount_filled: int = Field(0, ge=0, description="Offered amount already filled")
    base_amount: int = Field(0, ge=0, description="Base asset currently in the batch")
    quote_amount: int = Field(0, ge=0, description="Quote asset currently in the batch")

    @property
    def remaining_offered(self) -> int:
        """Unfilled amount of the asset the batch is selling."""
        return self.quote_amount if self.is_bid else self.base_amount

    @property
    def is_filled(self) -> bool:
        return self.remaining_offered == 0


class Quote(BaseModel):
    """Target price limits for one cycle."""

    bid_limit: int = Field(..., description="Bid price limit")
    ask_limit: int = Field(..., description="Ask price limit")

    def limit_for(self, side: Side) -> int:
        return self.bid_limit if side is Side.BID else self.ask_limit

    @property
    def spread(self) -> int:
        """Distance between ask and bid in limits."""
        return self.ask_limit - self.bid_limit


class InventoryState(BaseModel):
    """Inputs to the pricing model."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    curr_limit: int = Field(..., description="Current traded limit")
    width: int = Field(1, gt=0, description="Market width")
    base_amount: int = Field(0, ge=0, description="Base holdings")
    quote_amount: int = Field(0, ge=0, description="Quote holdings")
    target_ratio: UFixed = Field(..., description="Target share of value held in quote")
    risk_aversion: UFixed = Field(..., description="Risk aversion (gamma)")
    volatility_sq: UFixed = Field(..., description="Squared volatility")
    arrival_intensity: UFixed = Field(..., description="Order arrival intensity (k)")


class SharePool(BaseModel):
    """Proportional claims on the pool's reserves."""

    total_shares: int = Field(0, ge=0, description="Total shares outstanding")
    balances: Dict[str, int] = Field(default_factory=dict, description="Holder -> shares")

    def balance_of(self, holder: str) -> int:
        return self.balances.get(holder, 0)


class Timer(BaseModel):
    """Advisory throttle on how often a cycle may act."""

    last_trigger: Optional[int] = Field(None, description="Block of the last acting cycle")
    min_interval: int = Field(0, ge=0, description="Minimum blocks between cycles")

    def is_ready(self, now: int) -> bool:
        if self.last_trigger is None:
            return True
        return now >= self.last_trigger + self.min_interval


class CycleReport(BaseModel):
    """Outcome of one lifecycle cycle."""

    quote: Quote = Field(..., description="Target quote of the cycle")
    curr_limit: int = Field(..., description="Traded limit read at cycle start")
    collected_base: int = Field(0, description="Base collected from stale orders")
    collected_quote: int = Field(0, description="Quote collected from stale orders")
    placed: Dict[Side, RestingOrder] = Field(default_factory=dict, description="Orders placed this cycle")
    kept: List[Side] = Field(default_factory=list, description="Sides whose resting order was kept")
    errors: Dict[Side, str] = Field(default_factory=dict, description="Order book failures per side")


class CollectionReport(BaseModel):
    """Outcome of a manual collection."""

    collected_base: int = Field(0, description="Base collected")
    collected_quote: int = Field(0, description="Quote collected")
    collected: List[Side] = Field(default_factory=list, description="Sides collected")
    restored: List[Side] = Field(default_factory=list, description="Sides placed again after a failed collection")
    errors: Dict[Side, str] = Field(default_factory=dict, description="Order book failures per side")


class EngineState(BaseModel):
    """Mutable state owned by one strategy instance."""

    reserves: Reserves = Field(default_factory=Reserves)
    orders: Dict[Side, RestingOrder] = Field(default_factory=dict)
    timer: Timer = Field(default_factory=Timer)
    shares: SharePool = Field(default_factory=SharePool)
    paused: bool = Field(False, description="Administrative pause flag")
    public: bool = Field(False, description="Whether anyone may deposit")
    owner: str = Field(..., description="Strategy owner")
