"""Event journaling and session reporting.

Records strategy events during a session to JSON lines, keeps a CSV of
completed cycles and generates a final summary.
"""

from __future__ import annotations

import csv
import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List

from liquidity_engine.core.models import EngineState
from liquidity_engine.monitoring.events import CycleCompleted, StrategyEvent

logger = logging.getLogger(__name__)

CYCLE_COLUMNS = [
    "block",
    "curr_limit",
    "bid_limit",
    "ask_limit",
    "collected_base",
    "collected_quote",
    "bid_amount",
    "ask_amount",
]


@dataclass
class JournalConfig:
    run_dir: str  # directory to store artifacts


class EventJournal:
    """Event bus subscriber persisting events under a run directory."""

    def __init__(self, config: JournalConfig) -> None:
        self.config = config
        os.makedirs(self.config.run_dir, exist_ok=True)
        self.events_jsonl = os.path.join(self.config.run_dir, "events.jsonl")
        self.cycles_csv = os.path.join(self.config.run_dir, "cycles.csv")
        self.state_json = os.path.join(self.config.run_dir, "state.json")
        self.summary_md = os.path.join(self.config.run_dir, "summary.md")
        self.counts: Dict[str, int] = {}
        self._init_csv()
        self._save_state({"started_at": datetime.now(timezone.utc).isoformat()})

    def _init_csv(self) -> None:
        if not os.path.exists(self.cycles_csv):
            with open(self.cycles_csv, "w", newline="", encoding="utf-8") as f:
                writer = csv.writer(f)
                writer.writerow(CYCLE_COLUMNS)

    def _save_state(self, state: Dict) -> None:
        try:
            with open(self.state_json, "w", encoding="utf-8") as f:
                json.dump(state, f, indent=2)
        except OSError as e:
            logger.warning(f"Could not write journal state: {e}")

    def __call__(self, event: StrategyEvent) -> None:
        self.record(event)

    def record(self, event: StrategyEvent) -> None:
        """Append an event, and a cycle row for completed cycles."""
        self.counts[event.event] = self.counts.get(event.event, 0) + 1
        try:
            with open(self.events_jsonl, "a", encoding="utf-8") as f:
                f.write(event.model_dump_json() + "\n")

            if isinstance(event, CycleCompleted):
                with open(self.cycles_csv, "a", newline="", encoding="utf-8") as f:
                    writer = csv.writer(f)
                    writer.writerow([getattr(event, column) for column in CYCLE_COLUMNS])
        except OSError as e:
            logger.warning(f"Could not journal {event.event} event: {e}")

    def snapshot(self, state: EngineState) -> None:
        """Persist the current engine state."""
        self._save_state(
            {
                "saved_at": datetime.now(timezone.utc).isoformat(),
                "state": state.model_dump(mode="json"),
                "event_counts": self.counts,
            }
        )

    def write_summary(self, state: EngineState) -> None:
        """Write a human-readable session summary."""
        lines: List[str] = []
        lines.append("# Session Summary\n")
        lines.append(f"- Reserves: base={state.reserves.base} quote={state.reserves.quote}")
        lines.append(f"- Total shares: {state.shares.total_shares}")
        lines.append(f"- Paused: {state.paused}\n")

        lines.append("## Resting orders\n")
        if state.orders:
            for side, order in state.orders.items():
                lines.append(f"- {side.value}: {order.order_id} {order.amount} @ {order.limit} (batch {order.batch_id})")
        else:
            lines.append("- None")

        lines.append("\n## Events\n")
        for name, count in sorted(self.counts.items()):
            lines.append(f"- {name}: {count}")

        lines.append("\n## Notes\n- Full event list is available in events.jsonl.\n- Cycle rows are in cycles.csv.")

        try:
            with open(self.summary_md, "w", encoding="utf-8") as f:
                f.write("\n".join(lines))
        except OSError as e:
            logger.warning(f"Could not write session summary: {e}")
