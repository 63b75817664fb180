from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
import json

from rich.console import Console
from rich.table import Table

from simonsays.blocks.controller.controller import GameController
from simonsays.blocks.controller.tables import GameState
from simonsays.blocks.lfsr.lfsr import SequenceGenerator
from simonsays.blocks.score.score import ScoreDisplay
from simonsays.blocks.tone.tone import ToneGenerator
from simonsays.bench import make_player
from .events import JsonlEventLog
from .notes import SessionNotes
from .state import CircuitSnapshot, Outputs, Pins
from .store import EventStore


console = Console()


class SimonCircuit:
    """The whole game circuit, advanced one synchronous tick at a time.

    Each tick every block reads the committed snapshot and returns its next
    registers; the new snapshot is committed only after all four have been
    evaluated, so no block sees a sibling's value from the same tick.
    """

    def __init__(
        self,
        *,
        ticks_per_milli: int = 50,
        segments_invert: bool = False,
        notes: Optional[SessionNotes] = None,
    ) -> None:
        self.pins = Pins(ticks_per_milli=ticks_per_milli, segments_invert=segments_invert)
        self.notes = notes
        self.lfsr = SequenceGenerator()
        self.tone = ToneGenerator()
        self.score = ScoreDisplay()
        self.controller = GameController()
        self.snapshot = self._reset_vector(tick=0)

    def _reset_vector(self, tick: int) -> CircuitSnapshot:
        return CircuitSnapshot(
            tick=tick,
            lfsr=self.lfsr.initial(),
            tone=self.tone.initial(),
            score=self.score.initial(),
            controller=self.controller.initial(),
        )

    @property
    def ticks_per_milli(self) -> int:
        return self.pins.ticks_per_milli

    @property
    def state(self) -> GameState:
        return self.snapshot.controller.state

    def tick(
        self,
        button: int = 0,
        *,
        reset: bool = False,
        ticks_per_milli: Optional[int] = None,
        segments_invert: Optional[bool] = None,
    ) -> Outputs:
        pins = Pins(
            reset=reset,
            button=button,
            ticks_per_milli=self.pins.ticks_per_milli if ticks_per_milli is None else ticks_per_milli,
            segments_invert=self.pins.segments_invert if segments_invert is None else segments_invert,
        )
        self.pins = pins
        cur = self.snapshot

        if pins.reset:
            self.snapshot = self._reset_vector(tick=cur.tick + 1)
            if self.notes is not None:
                self.notes.note(kind="reset", payload={"tick": cur.tick}, tick=cur.tick)
            return self.outputs

        ctl = cur.controller
        self.snapshot = cur.next(
            lfsr=self.lfsr.step(
                cur.lfsr,
                enable=ctl.lfsr_enable,
                load_enable=ctl.lfsr_load,
                load_value=ctl.seed,
            ),
            tone=self.tone.step(cur.tone, freq=ctl.tone_freq, ticks_per_milli=pins.ticks_per_milli),
            score=self.score.step(cur.score, reset=ctl.score_reset, increment=ctl.score_increment),
            controller=self.controller.step(
                ctl,
                button=pins.button,
                ticks_per_milli=pins.ticks_per_milli,
                random_value=cur.lfsr.value,
            ),
        )

        if self.notes is not None and self.snapshot.controller.state != ctl.state:
            nxt = self.snapshot.controller
            self.notes.note(
                kind="transition",
                payload={
                    "from": ctl.state.name,
                    "to": nxt.state.name,
                    "seq_length": nxt.seq_length,
                    "seq_counter": nxt.seq_counter,
                    "score": self.score.score(self.snapshot.score),
                },
                tick=cur.tick,
            )
        return self.outputs

    def run(self, ticks: int, button: int = 0) -> Outputs:
        out = self.outputs
        for _ in range(int(ticks)):
            out = self.tick(button)
        return out

    def run_millis(self, ms: int, button: int = 0) -> Outputs:
        return self.run(int(ms) * self.pins.ticks_per_milli, button)

    @property
    def outputs(self) -> Outputs:
        snap = self.snapshot
        invert = self.pins.segments_invert
        return Outputs(
            led=snap.controller.led,
            sound=snap.tone.output,
            segments=self.score.segments(snap.score, enable=snap.controller.score_enable, invert=invert),
            digit_select=self.score.digit_select(snap.score, invert=invert),
        )


def run_loop(
    ticks: int,
    seed: int,
    run_dir: Path,
    run_id: str,
    player_name: str = "echo",
    ticks_per_milli: int = 50,
    segments_invert: bool = False,
) -> Dict[str, Any]:
    """Play one session with a scripted player and record it under `run_dir`."""
    meta = {
        "created_at": datetime.now(timezone.utc).isoformat(),
        "ticks": ticks,
        "seed": seed,
        "run_id": run_id,
        "player": player_name,
        "circuit": {"ticks_per_milli": ticks_per_milli, "segments_invert": segments_invert},
    }
    (run_dir / "meta.json").write_text(json.dumps(meta, indent=2), encoding="utf-8")

    event_log = JsonlEventLog(run_dir / "events.jsonl")
    store = EventStore(db_path=run_dir / "events.sqlite", run_id=run_id)
    notes = SessionNotes(event_log=event_log, store=store)
    circuit = SimonCircuit(ticks_per_milli=ticks_per_milli, segments_invert=segments_invert, notes=notes)
    player = make_player(player_name, ticks_per_milli=ticks_per_milli, seed=seed)

    notes.note(kind="startup", payload={"message": "power on", "player": player_name}, tick=0)

    table = Table(title=f"Simon — {player_name} player, {ticks_per_milli} ticks/ms")
    table.add_column("Tick", justify="right")
    table.add_column("Round", justify="right")
    table.add_column("Length", justify="right")
    table.add_column("Expected")
    table.add_column("Pressed")
    table.add_column("Result")

    rounds: List[Dict[str, Any]] = []
    for _ in range(ticks):
        before = circuit.snapshot
        button = player.press(before)
        circuit.tick(button)
        after = circuit.snapshot.controller

        if before.controller.state == GameState.USER_INPUT and after.state in (GameState.NEXT_LEVEL, GameState.GAME_OVER):
            ctl = before.controller
            event = {
                "round": len(rounds) + 1,
                "length": ctl.seq_length,
                "position": ctl.seq_counter,
                "expected": before.lfsr.value & 0b11,
                "pressed": ctl.user_input,
                "result": "cleared" if after.state == GameState.NEXT_LEVEL else "missed",
            }
            rounds.append(event)
            notes.event("round", tick=before.tick, payload=event)
            table.add_row(
                str(before.tick),
                str(event["round"]),
                str(event["length"]),
                str(event["expected"]),
                str(event["pressed"]),
                event["result"],
            )

    summary = {
        "ticks": circuit.snapshot.tick,
        "rounds": len(rounds),
        "cleared": sum(1 for r in rounds if r["result"] == "cleared"),
        "missed": sum(1 for r in rounds if r["result"] == "missed"),
        "final_state": circuit.state.name,
        "score": circuit.score.score(circuit.snapshot.score),
    }
    notes.note(kind="shutdown", payload=summary, tick=circuit.snapshot.tick)

    console.print(table)

    event_log.close()
    store.close()
    return summary
