from __future__ import annotations

from enum import IntEnum
from typing import Dict, Tuple

MAX_GAME_LEN = 100

# Register widths
COUNTER_MASK = 0xFFFF  # tick_counter, millis_counter
SEQ_MASK = 0x7F  # seq_length, seq_counter; wraps rather than stopping at MAX_GAME_LEN

LFSR_ADVANCE = 2  # generator steps per sequence position

# Durations in milliseconds
INIT_DELAY_MS = 500
SHOW_MS = 300
GAP_MS = 400
INPUT_MS = 300
RELEASE_MIN_MS = 50
SUCCESS_NOTE_MS = 150
GAMEOVER_NOTE_MS = 300
TREMBLE_MS = 1000

RELEASE_DEBOUNCE_TICKS = 10

GAME_TONES: Tuple[int, ...] = (
    196,  # G3
    262,  # C4
    330,  # E4
    784,  # G5
)

SUCCESS_TONES: Tuple[int, ...] = (
    330,  # E4
    392,  # G4
    659,  # E5
    523,  # C5
    587,  # D5
    784,  # G5
    0,
)

GAMEOVER_TONES: Tuple[int, ...] = (
    622,  # D#5
    587,  # D5
    554,  # C#5
    523,  # C5
)

TREMBLE_INDEX = len(GAMEOVER_TONES)
TUNE_DONE = 7

ONE_HOT: Dict[int, int] = {
    0b0001: 0,
    0b0010: 1,
    0b0100: 2,
    0b1000: 3,
}


class GameState(IntEnum):
    POWER_ON = 0
    INIT = 1
    PLAY = 2
    PLAY_WAIT = 3
    USER_WAIT = 4
    WAIT_BUTTON_RELEASE = 5
    USER_INPUT = 6
    NEXT_LEVEL = 7
    GAME_OVER = 8


def tremble_tone(millis: int) -> int:
    return GAMEOVER_TONES[-1] - 16 + ((millis >> 2) & 0x1F)
