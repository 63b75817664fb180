from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

from simonsays.blocks.controller.controller import ControllerState
from simonsays.blocks.lfsr.lfsr import LfsrState
from simonsays.blocks.score.score import ScoreState
from simonsays.blocks.tone.tone import ToneState


class Pins(BaseModel):
    """Inputs sampled once per tick. Integers are masked to their pin width."""

    reset: bool = False
    button: int = 0
    ticks_per_milli: int = 50
    segments_invert: bool = False

    @field_validator("button", mode="before")
    @classmethod
    def _mask_button(cls, v: Any) -> int:
        return int(v) & 0xF

    @field_validator("ticks_per_milli", mode="before")
    @classmethod
    def _mask_timebase(cls, v: Any) -> int:
        return int(v) & 0xFFFF


class Outputs(BaseModel):
    led: int = 0
    sound: bool = False
    segments: int = 0
    digit_select: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return self.model_dump()


class CircuitSnapshot(BaseModel):
    """Committed registers of every block after `tick` evaluations."""

    tick: int = 0
    lfsr: LfsrState = Field(default_factory=LfsrState)
    tone: ToneState = Field(default_factory=ToneState)
    score: ScoreState = Field(default_factory=ScoreState)
    controller: ControllerState = Field(default_factory=ControllerState)

    def next(self, **blocks: Any) -> "CircuitSnapshot":
        return CircuitSnapshot(tick=self.tick + 1, **blocks)
