from __future__ import annotations

from typing import Any, Dict, Optional

from simonsays.core.events import JsonlEventLog
from simonsays.core.store import EventStore


class SessionNotes:
    """Structured session notes that write to both JSONL and SQLite."""

    def __init__(self, event_log: JsonlEventLog, store: EventStore):
        self.event_log = event_log
        self.store = store

    def note(self, kind: str, payload: Dict[str, Any], tick: Optional[int] = None) -> None:
        event = {"type": "note", "kind": kind, "payload": payload}
        if tick is not None:
            event["tick"] = tick
        self.event_log.write(event)
        self.store.write(event_type="note", tick=-1 if tick is None else tick, payload=event)

    def event(self, event_type: str, tick: int, payload: Dict[str, Any]) -> None:
        event = {"type": event_type, "tick": tick, **payload}
        self.event_log.write(event)
        self.store.write(event_type=event_type, tick=tick, payload=event)
