from __future__ import annotations

from pydantic import BaseModel

LFSR_SEED = 0x2048FAFA
LFSR_MASK = 0xFFFFFFFF
LFSR_TAPS = (31, 21, 1, 0)


class LfsrState(BaseModel):
    """32-bit shift register contents. Never zero once evaluated from a non-zero load."""

    value: int = LFSR_SEED


def feedback_bit(value: int) -> int:
    bit = 0
    for t in LFSR_TAPS:
        bit ^= (value >> t) & 1
    return bit


class SequenceGenerator:
    """Pseudo-random colour source for the game controller.

    Evaluation priority per tick:
      1) reset            -> fixed seed
      2) value is zero    -> fixed seed (safety net)
      3) load_enable      -> adopt load_value unmodified
      4) enable           -> one feedback shift
      5) otherwise        -> hold
    """

    def initial(self) -> LfsrState:
        return LfsrState()

    def step(
        self,
        state: LfsrState,
        *,
        reset: bool = False,
        enable: bool = False,
        load_enable: bool = False,
        load_value: int = 0,
    ) -> LfsrState:
        if reset or state.value == 0:
            return LfsrState(value=LFSR_SEED)
        if load_enable:
            return LfsrState(value=int(load_value) & LFSR_MASK)
        if enable:
            return LfsrState(value=self.shift(state.value))
        return state

    @staticmethod
    def shift(value: int) -> int:
        return ((value << 1) | feedback_bit(value)) & LFSR_MASK

    @staticmethod
    def color(state: LfsrState) -> int:
        return state.value & 0b11
