"""Monitoring module for strategy events and journaling."""

from liquidity_engine.monitoring.events import EventBus, StrategyEvent
from liquidity_engine.monitoring.journal import EventJournal, JournalConfig

__all__ = [
    "EventBus",
    "StrategyEvent",
    "EventJournal",
    "JournalConfig",
]
