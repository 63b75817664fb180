from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple
import sqlite3
import json
from datetime import datetime, timezone


class EventStore:
    """SQLite-backed append-only event store for a single run.

    Table schema (created on first use):
      events(id INTEGER PK, ts TEXT, run_id TEXT, tick INTEGER, type TEXT, data TEXT)
    """

    def __init__(self, db_path: Path, run_id: str):
        self.db_path = Path(db_path)
        self.run_id = run_id
        self.conn: Optional[sqlite3.Connection] = sqlite3.connect(str(self.db_path))
        self._init_schema()

    def _init_schema(self) -> None:
        cur = self.conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS events (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              ts TEXT NOT NULL,
              run_id TEXT NOT NULL,
              tick INTEGER NOT NULL,
              type TEXT NOT NULL,
              data TEXT NOT NULL
            )
            """
        )
        cur.execute("CREATE INDEX IF NOT EXISTS idx_events_run_tick ON events(run_id, tick)")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_events_type ON events(type)")
        self.conn.commit()

    def write(self, event_type: str, tick: int, payload: Dict[str, Any]) -> None:
        ts = datetime.now(timezone.utc).isoformat()
        data = json.dumps(payload, ensure_ascii=False)
        self.conn.execute(
            "INSERT INTO events(ts, run_id, tick, type, data) VALUES(?,?,?,?,?)",
            (ts, self.run_id, tick, event_type, data),
        )
        self.conn.commit()

    def query(self, kinds: Sequence[str] = (), limit: int = 200) -> List[Tuple[int, str, Dict[str, Any]]]:
        """Events of this run ordered by tick, optionally filtered by type."""
        if kinds:
            placeholders = ",".join(["?"] * len(kinds))
            q = (
                f"SELECT tick, type, data FROM events WHERE run_id = ? AND type IN ({placeholders}) "
                "ORDER BY tick, id LIMIT ?"
            )
            params: Tuple[Any, ...] = (self.run_id, *kinds, limit)
        else:
            q = "SELECT tick, type, data FROM events WHERE run_id = ? ORDER BY tick, id LIMIT ?"
            params = (self.run_id, limit)
        rows = self.conn.execute(q, params).fetchall()
        return [(int(tick), str(etype), json.loads(data)) for tick, etype, data in rows]

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None
