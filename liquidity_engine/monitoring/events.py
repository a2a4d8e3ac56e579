"""Observability events emitted by the strategy.

Every mutating operation emits one event carrying the exact amounts it
moved. Share mints and burns are reported as transfers from or to
``None``.
"""

import logging
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Literal, Optional
from pydantic import BaseModel, Field

from liquidity_engine.core.constants import DEFAULT_EVENT_HISTORY

logger = logging.getLogger(__name__)


class StrategyEvent(BaseModel):
    """Base event."""

    event: str = Field(..., description="Event name")
    market_id: str = Field(..., description="Market the strategy quotes")
    block: Optional[int] = Field(None, description="Block the event happened at, if known")


class CycleCompleted(StrategyEvent):
    event: Literal["cycle_completed"] = "cycle_completed"
    bid_limit: int
    ask_limit: int
    curr_limit: int
    collected_base: int
    collected_quote: int
    bid_order_id: Optional[str] = None
    bid_amount: int = 0
    ask_order_id: Optional[str] = None
    ask_amount: int = 0
    errors: Dict[str, str] = Field(default_factory=dict)


class ManualCollected(StrategyEvent):
    event: Literal["manual_collected"] = "manual_collected"
    caller: str
    collected_base: int
    collected_quote: int
    errors: Dict[str, str] = Field(default_factory=dict)


class QuoteParametersChanged(StrategyEvent):
    event: Literal["quote_parameters_changed"] = "quote_parameters_changed"
    caller: str
    kind: str
    parameters: Dict[str, Any]


class Paused(StrategyEvent):
    event: Literal["paused"] = "paused"
    caller: str


class Unpaused(StrategyEvent):
    event: Literal["unpaused"] = "unpaused"
    caller: str


class PublicChanged(StrategyEvent):
    event: Literal["public_changed"] = "public_changed"
    caller: str
    public: bool


class OwnershipTransferred(StrategyEvent):
    event: Literal["ownership_transferred"] = "ownership_transferred"
    previous_owner: str
    new_owner: str


class SharesTransferred(StrategyEvent):
    event: Literal["shares_transferred"] = "shares_transferred"
    sender: Optional[str] = Field(None, description="None on mint")
    recipient: Optional[str] = Field(None, description="None on burn")
    shares: int


class Deposited(StrategyEvent):
    event: Literal["deposited"] = "deposited"
    holder: str
    base_amount: int
    quote_amount: int
    shares: int
    seeded: bool = False


class Withdrawn(StrategyEvent):
    event: Literal["withdrawn"] = "withdrawn"
    holder: str
    base_amount: int
    quote_amount: int
    shares: int


EventHandler = Callable[[StrategyEvent], None]


class EventBus:
    """In-process event dispatcher with a bounded history."""

    def __init__(self, history_size: int = DEFAULT_EVENT_HISTORY):
        self._handlers: List[EventHandler] = []
        self.history: Deque[StrategyEvent] = deque(maxlen=history_size)

    def subscribe(self, handler: EventHandler) -> None:
        self._handlers.append(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def emit(self, event: StrategyEvent) -> None:
        """Record an event and deliver it to every subscriber."""
        self.history.append(event)
        logger.debug(f"Event {event.event}: {event.model_dump(exclude={'event'})}")
        for handler in list(self._handlers):
            handler(event)

    def of_type(self, event_type: type) -> List[StrategyEvent]:
        return [e for e in self.history if isinstance(e, event_type)]
