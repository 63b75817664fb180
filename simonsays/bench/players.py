from __future__ import annotations

from typing import List, Optional
import random

from simonsays.blocks.controller.tables import TUNE_DONE, GameState
from simonsays.core.state import CircuitSnapshot
from .probe import read_one_led

START_BUTTON = 0b0001


class _Presser:
    """Shared hold/release bookkeeping: a press lasts `hold_ms`, then the button is released."""

    def __init__(self, *, ticks_per_milli: int, hold_ms: int = 100, restart: bool = True) -> None:
        self.hold_ticks = max(1, int(hold_ms) * int(ticks_per_milli))
        self.restart = bool(restart)
        self._hold = 0
        self._button = 0

    def _start(self, button: int) -> int:
        self._button = button
        self._hold = self.hold_ticks - 1
        return button

    def _holding(self) -> bool:
        return self._hold > 0

    def _continue(self) -> int:
        self._hold -= 1
        return self._button

    def _wants_start(self, snapshot: CircuitSnapshot) -> bool:
        ctl = snapshot.controller
        if ctl.state == GameState.POWER_ON:
            return True
        return self.restart and ctl.state == GameState.GAME_OVER and ctl.tone_index == TUNE_DONE


class EchoPlayer(_Presser):
    """Repeats whatever the LEDs showed during playback.

    Colours are recorded on the LED's rising edge while the controller is in
    PlayWait and forgotten whenever a new game or level begins. With
    `mistake_round=n` the last colour of the round of length n is answered wrong.
    """

    def __init__(
        self,
        *,
        ticks_per_milli: int,
        hold_ms: int = 100,
        restart: bool = True,
        mistake_round: Optional[int] = None,
    ) -> None:
        super().__init__(ticks_per_milli=ticks_per_milli, hold_ms=hold_ms, restart=restart)
        self.mistake_round = mistake_round
        self.shown: List[int] = []
        self.cursor = 0
        self._prev_state: Optional[GameState] = None
        self._prev_led = 0

    def _observe(self, snapshot: CircuitSnapshot) -> None:
        ctl = snapshot.controller
        if ctl.state != self._prev_state and ctl.state in (GameState.INIT, GameState.NEXT_LEVEL):
            self.shown = []
            self.cursor = 0
        if ctl.state == GameState.PLAY_WAIT and ctl.led and not self._prev_led:
            self.shown.append(read_one_led(ctl.led))
        self._prev_state = ctl.state
        self._prev_led = ctl.led

    def press(self, snapshot: CircuitSnapshot) -> int:
        self._observe(snapshot)
        if self._holding():
            return self._continue()
        if self._wants_start(snapshot):
            return self._start(START_BUTTON)

        ctl = snapshot.controller
        if ctl.state == GameState.USER_WAIT and self.cursor < len(self.shown):
            color = self.shown[self.cursor]
            last = self.cursor == len(self.shown) - 1
            if last and self.mistake_round is not None and ctl.seq_length == self.mistake_round:
                color = (color + 1) % 4
            self.cursor += 1
            return self._start(1 << color)
        return 0


class RandomPlayer(_Presser):
    """Guesses a random colour every time the game waits for input."""

    def __init__(self, *, ticks_per_milli: int, seed: int = 0, hold_ms: int = 100, restart: bool = True) -> None:
        super().__init__(ticks_per_milli=ticks_per_milli, hold_ms=hold_ms, restart=restart)
        self._rng = random.Random(int(seed))

    def press(self, snapshot: CircuitSnapshot) -> int:
        if self._holding():
            return self._continue()
        if self._wants_start(snapshot):
            return self._start(START_BUTTON)
        if snapshot.controller.state == GameState.USER_WAIT:
            return self._start(1 << self._rng.randrange(4))
        return 0


class IdlePlayer:
    def press(self, snapshot: CircuitSnapshot) -> int:
        return 0
