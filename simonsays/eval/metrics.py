from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Any, Dict, List
import json

from simonsays.bench.probe import read_one_led
from simonsays.core.events import read_jsonl
from simonsays.core.tick import SimonCircuit

# ---------- Loading ----------

def load_meta(run_dir: Path) -> Dict[str, Any]:
    meta_path = Path(run_dir) / "meta.json"
    if not meta_path.exists():
        return {}
    return json.loads(meta_path.read_text(encoding="utf-8"))


def load_events(run_dir: Path) -> List[Dict[str, Any]]:
    return read_jsonl(Path(run_dir) / "events.jsonl")


# ---------- Helpers ----------

def note_kind(e: Dict[str, Any]) -> str:
    return str(e.get("kind", "")) if e.get("type") == "note" else ""


def transition_of(e: Dict[str, Any]) -> str:
    p = e.get("payload", {}) or {}
    return f"{p.get('from', '?')} -> {p.get('to', '?')}"


# ---------- Metric computation ----------

def compute_metrics(run_dir: Path) -> Dict[str, Any]:
    run_dir = Path(run_dir)
    meta = load_meta(run_dir)
    events = load_events(run_dir)
    notes = [e for e in events if e.get("type") == "note"]
    rounds = [e for e in events if e.get("type") == "round"]
    transitions = [e for e in notes if note_kind(e) == "transition"]
    shutdown = next((e for e in reversed(notes) if note_kind(e) == "shutdown"), None)

    cleared = [r for r in rounds if r.get("result") == "cleared"]
    missed = [r for r in rounds if r.get("result") == "missed"]
    best_length = max((int(r.get("length", 0)) for r in cleared), default=0)

    transition_counts = Counter(transition_of(e) for e in transitions)
    game_overs = sum(1 for e in transitions if (e.get("payload") or {}).get("to") == "GAME_OVER")

    return {
        "meta": meta,
        "counts": {
            "ticks": int((shutdown or {}).get("payload", {}).get("ticks", meta.get("ticks", 0))),
            "notes": len(notes),
            "rounds": len(rounds),
            "transitions": len(transitions),
        },
        "game": {
            "cleared": len(cleared),
            "missed": len(missed),
            "best_length": best_length,
            "game_overs": game_overs,
            "final_state": (shutdown or {}).get("payload", {}).get("final_state", ""),
            "final_score": (shutdown or {}).get("payload", {}).get("score", 0),
        },
        "transitions": dict(transition_counts),
        "rounds": rounds,
    }


# ---------- First-colour distribution ----------

def first_color_distribution(samples: int, ticks_per_milli: int = 50) -> List[int]:
    """Count the first colour shown after pressing start i ms after reset, for i in range(samples).

    The generator free-runs until the start button is pressed, so the delay
    before pressing selects the round seed.
    """
    circuit = SimonCircuit(ticks_per_milli=ticks_per_milli)
    bins = [0, 0, 0, 0]
    for i in range(int(samples)):
        for _ in range(100):
            circuit.tick(reset=True)
        circuit.tick()
        circuit.run_millis(i)
        circuit.run(100, button=0b0001)
        circuit.run(100)
        circuit.run_millis(510)
        index = read_one_led(circuit.outputs.led)
        if index is not None:
            bins[index] += 1
    return bins


def normalize_bins(bins: List[int]) -> List[float]:
    total = sum(bins)
    if total == 0:
        return [0.0 for _ in bins]
    return [count / total for count in bins]
