from __future__ import annotations
from typing import Any

from .players import EchoPlayer, IdlePlayer, RandomPlayer

PLAYERS = ["echo", "random", "idle"]

def make_player(name: str, *, ticks_per_milli: int, seed: int = 0) -> Any:
    name = (name or "").lower().strip()
    if name == "echo":
        return EchoPlayer(ticks_per_milli=ticks_per_milli)
    if name == "random":
        return RandomPlayer(ticks_per_milli=ticks_per_milli, seed=seed)
    if name == "idle":
        return IdlePlayer()
    raise ValueError(f"Unknown player name: {name}")

__all__ = ["make_player", "PLAYERS", "EchoPlayer", "RandomPlayer", "IdlePlayer"]
