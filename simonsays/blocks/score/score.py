from __future__ import annotations

from typing import List

from pydantic import BaseModel

# Segment bit order is gfedcba (bit 0 = segment a).
SEGMENT_PATTERNS: List[int] = [
    0x3F,  # 0
    0x06,  # 1
    0x5B,  # 2
    0x4F,  # 3
    0x66,  # 4
    0x6D,  # 5
    0x7D,  # 6
    0x07,  # 7
    0x7F,  # 8
    0x6F,  # 9
]
BLANK_PATTERN = 0x00
BLANK_DIGIT = 15  # sentinel value fed to the encoder while the display is disabled

SEGMENTS_MASK = 0x7F
DIGITS_MASK = 0b11

TENS = 0
ONES = 1


def encode_digit(value: int) -> int:
    if 0 <= value <= 9:
        return SEGMENT_PATTERNS[value]
    return BLANK_PATTERN


class ScoreState(BaseModel):
    ones: int = 0
    tens: int = 0
    active_digit: int = TENS


class ScoreDisplay:
    """Two-digit decimal score with a time-multiplexed seven-segment drive.

    The active digit alternates every tick. Digit select lines are active-low
    and segments active-high; `invert` flips both for common-anode wiring.
    """

    def initial(self) -> ScoreState:
        return ScoreState()

    def step(self, state: ScoreState, *, reset: bool = False, increment: bool = False) -> ScoreState:
        ones, tens = state.ones, state.tens
        if reset:
            ones, tens = 0, 0
        elif increment:
            if ones == 9:
                ones = 0
                tens = 0 if tens == 9 else tens + 1
            else:
                ones += 1
        return ScoreState(ones=ones, tens=tens, active_digit=state.active_digit ^ 1)

    @staticmethod
    def score(state: ScoreState) -> int:
        return state.tens * 10 + state.ones

    def digit_value(self, state: ScoreState, *, enable: bool) -> int:
        if not enable:
            return BLANK_DIGIT
        return state.tens if state.active_digit == TENS else state.ones

    def segments(self, state: ScoreState, *, enable: bool, invert: bool) -> int:
        pattern = encode_digit(self.digit_value(state, enable=enable))
        return pattern ^ SEGMENTS_MASK if invert else pattern

    def digit_select(self, state: ScoreState, *, invert: bool) -> int:
        select = DIGITS_MASK ^ (1 << state.active_digit)
        return select ^ DIGITS_MASK if invert else select
