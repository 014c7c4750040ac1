"""Append-only audit trail attached to each unit of work."""

from __future__ import annotations

import copy
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from comic_eater.types import JsonValue, Snapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    """Immutable record of one completed saga step."""

    action: str
    context: Snapshot
    date: str
    timestamp: int
    record_change: bool

    def to_dict(self) -> dict[str, JsonValue]:
        return {
            "action": self.action,
            "context": copy.deepcopy(self.context),
            "date": self.date,
            "timestamp": self.timestamp,
            "record_change": self.record_change,
        }


def local_date(now: datetime | None = None) -> str:
    """Format a local timestamp as ``MM/DD/YYYY-h:mm:ss AM``."""
    now = now or datetime.now()
    clock = now.strftime("%I:%M:%S %p").lstrip("0")
    return f"{now:%m/%d/%Y}-{clock}"


def create_entry(action: str, snapshot: Snapshot, record_change: bool) -> HistoryEntry:
    """Build an entry holding a deep copy of ``snapshot``."""
    detached = copy.deepcopy(dict(snapshot))
    detached.pop("history", None)
    detached.pop("record_change", None)
    return HistoryEntry(
        action=action,
        context=detached,
        date=local_date(),
        timestamp=time.time_ns() // 1_000_000,
        record_change=bool(record_change),
    )


def append(
    history: Sequence[HistoryEntry] | None,
    action: str,
    snapshot: Snapshot,
    record_change: bool,
) -> tuple[HistoryEntry, ...]:
    """Return a new history with one entry appended.

    The input sequence is never modified.
    """
    updated = (*(history or ()), create_entry(action, snapshot, record_change))
    logger.debug("History is now:\n%s", format_history(updated))
    return updated


def for_persistence(history: Sequence[HistoryEntry]) -> list[dict[str, JsonValue]]:
    """Keep entries that recorded a change, dropping the ``record_change`` flag."""
    pruned: list[dict[str, JsonValue]] = []
    for entry in history:
        if not entry.record_change:
            continue
        payload = entry.to_dict()
        del payload["record_change"]
        pruned.append(payload)
    return pruned


def format_history(history: Sequence[HistoryEntry]) -> str:
    return "\n".join(f'{entry.date}: "{entry.action}"' for entry in history)
