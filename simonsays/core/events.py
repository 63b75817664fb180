from __future__ import annotations

from typing import IO, Any, Dict, Iterator, List
from pathlib import Path
import json


class JsonlEventLog:
    """Append-only JSONL log of circuit events (one object per line, flushed per write)."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._fh: IO[str] = self.path.open("a", encoding="utf-8")

    def write(self, event: Dict[str, Any]) -> None:
        json.dump(event, self._fh, ensure_ascii=False)
        self._fh.write("\n")
        self._fh.flush()

    def close(self) -> None:
        if not self._fh.closed:
            self._fh.close()


def read_jsonl(path: Path) -> List[Dict[str, Any]]:
    return list(iter_jsonl(path))


def iter_jsonl(path: Path) -> Iterator[Dict[str, Any]]:
    path = Path(path)
    if not path.exists():
        return
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError:
                # tolerate a partially written last line
                continue
