from __future__ import annotations

from pathlib import Path
from typing import List, Optional
import json
import typer
from rich.console import Console
from rich.table import Table

from simonsays.core.store import EventStore

app = typer.Typer(add_completion=False, no_args_is_help=True)
console = Console()


def _latest_run_dir(runs_dir: Path) -> Path:
    if not runs_dir.is_dir():
        raise typer.BadParameter(f"No runs directory at {runs_dir}")
    candidates = [p for p in runs_dir.iterdir() if p.is_dir()]
    if not candidates:
        raise typer.BadParameter(f"No runs found in {runs_dir}")
    return max(candidates, key=lambda p: p.stat().st_mtime)


def _summary(data: dict) -> str:
    payload = data.get("payload")
    if data.get("kind") == "transition" and isinstance(payload, dict):
        return f"{payload.get('from')} -> {payload.get('to')} (len {payload.get('seq_length')}, score {payload.get('score')})"
    if data.get("type") == "round":
        return f"round {data.get('round')}: len {data.get('length')} {data.get('result')}"
    return str(payload or data.get("type"))[:80]


@app.command()
def replay(
    runs_dir: Path = typer.Option(Path("runs"), help="Directory containing runs"),
    run_path: Optional[Path] = typer.Option(None, help="Specific run directory to replay"),
    kind: List[str] = typer.Option([], help="Filter by event type(s), e.g. --kind round --kind note"),
    limit: int = typer.Option(200, help="Max events to display"),
):
    """Replay events from a Simon run (reads events.sqlite)."""
    run_dir = run_path or _latest_run_dir(runs_dir)
    db = run_dir / "events.sqlite"
    if not db.exists():
        raise typer.BadParameter(f"No events.sqlite in {run_dir}")
    meta_path = run_dir / "meta.json"
    run_id = json.loads(meta_path.read_text(encoding="utf-8")).get("run_id", run_dir.name) if meta_path.exists() else run_dir.name

    store = EventStore(db_path=db, run_id=run_id)
    try:
        rows = store.query(kinds=kind, limit=limit)
    finally:
        store.close()

    table = Table(title=f"Replay — {run_dir.name}")
    table.add_column("Tick", justify="right")
    table.add_column("Type")
    table.add_column("Summary")
    for tick, etype, data in rows:
        table.add_row(str(tick), etype, _summary(data))
    console.print(table)


if __name__ == "__main__":
    app()
