from __future__ import annotations

from typing import Dict, Optional

from simonsays.blocks.score.score import DIGITS_MASK, ONES, SEGMENTS_MASK, TENS

SEVEN_SEG_DECODE: Dict[int, str] = {
    0x3F: "0",
    0x06: "1",
    0x5B: "2",
    0x4F: "3",
    0x66: "4",
    0x6D: "5",
    0x7D: "6",
    0x07: "7",
    0x7F: "8",
    0x6F: "9",
    0x00: " ",
}


def decode_7seg(value: int) -> str:
    """Decode a 7-segment pattern to a character ('?' when unrecognised)."""
    return SEVEN_SEG_DECODE.get(int(value), "?")


def read_one_led(led: int) -> Optional[int]:
    """Index of the single lit LED, or None if no LED is lit."""
    if led == 0:
        return None
    for index in range(4):
        if led == 1 << index:
            return index
    raise ValueError(f"Unexpected value for leds: {led:#06b}")


def read_display(circuit, button: int = 0, max_ticks: int = 8) -> str:
    """Tick `circuit` until both multiplexed digits were driven; returns tens then ones.

    Undoes the polarity inversion so the result reads the same for both wirings.
    """
    seen: Dict[int, str] = {}
    out = circuit.outputs
    for _ in range(max_ticks):
        invert = circuit.pins.segments_invert
        select = out.digit_select ^ (DIGITS_MASK if invert else 0)
        segments = out.segments ^ (SEGMENTS_MASK if invert else 0)
        # active-low select: the cleared bit is the digit being driven
        if select == DIGITS_MASK ^ (1 << TENS):
            seen[TENS] = decode_7seg(segments)
        elif select == DIGITS_MASK ^ (1 << ONES):
            seen[ONES] = decode_7seg(segments)
        if len(seen) == 2:
            break
        out = circuit.tick(button)
    return seen.get(TENS, "?") + seen.get(ONES, "?")
