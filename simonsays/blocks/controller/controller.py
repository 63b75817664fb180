from __future__ import annotations

from typing import Callable, Dict, Optional

from pydantic import BaseModel

from simonsays.blocks.lfsr.lfsr import LFSR_SEED
from simonsays.blocks.controller.tables import (
    COUNTER_MASK,
    GAME_TONES,
    GAMEOVER_NOTE_MS,
    GAMEOVER_TONES,
    GAP_MS,
    INIT_DELAY_MS,
    INPUT_MS,
    LFSR_ADVANCE,
    ONE_HOT,
    RELEASE_DEBOUNCE_TICKS,
    RELEASE_MIN_MS,
    SEQ_MASK,
    SHOW_MS,
    SUCCESS_NOTE_MS,
    SUCCESS_TONES,
    TREMBLE_INDEX,
    TREMBLE_MS,
    TUNE_DONE,
    GameState,
    tremble_tone,
)


class ControllerState(BaseModel):
    """Every register owned by the game controller.

    The millisecond timer (`tick_counter`/`millis_counter`) is shared by all
    states and cleared at state entry points; `lfsr_*`, `seed`, `score_*`
    and `tone_freq` are the control lines driving the other blocks.
    """

    state: GameState = GameState.POWER_ON
    tick_counter: int = 0
    millis_counter: int = 0

    seq_length: int = 0
    seq_counter: int = 0
    tone_index: int = 0

    user_input: int = 0
    prev_btn: int = 0
    button_released: bool = False
    release_ticks: int = 0

    led: int = 0
    tone_freq: int = 0

    lfsr_free_run: bool = True
    lfsr_cycles: int = 0
    lfsr_load: bool = False
    seed: int = LFSR_SEED

    score_enable: bool = False
    score_increment: bool = False
    score_reset: bool = False

    @property
    def lfsr_enable(self) -> bool:
        return self.lfsr_free_run or self.lfsr_cycles > 0


def decode_button(button: int) -> Optional[int]:
    """Map a one-hot button pattern to a colour index; anything else is rejected."""
    return ONE_HOT.get(button & 0xF)


def _reset_timer(n: ControllerState) -> None:
    n.tick_counter = 0
    n.millis_counter = 0


Handler = Callable[[ControllerState, ControllerState, int, int], None]


class GameController:
    """Simon game state machine.

    `step` reads the committed registers `s` and returns a fresh copy `n`
    holding the next values. Within one step later assignments override
    earlier ones, so a state-entry timer reset wins over the free-running
    millisecond increment.
    """

    def __init__(self) -> None:
        self._handlers: Dict[GameState, Handler] = {
            GameState.POWER_ON: self._power_on,
            GameState.INIT: self._init,
            GameState.PLAY: self._play,
            GameState.PLAY_WAIT: self._play_wait,
            GameState.USER_WAIT: self._user_wait,
            GameState.WAIT_BUTTON_RELEASE: self._wait_button_release,
            GameState.USER_INPUT: self._user_input,
            GameState.NEXT_LEVEL: self._next_level,
            GameState.GAME_OVER: self._game_over,
        }

    def initial(self) -> ControllerState:
        return ControllerState()

    def step(
        self,
        s: ControllerState,
        *,
        button: int,
        ticks_per_milli: int,
        random_value: int,
    ) -> ControllerState:
        n = s.model_copy()
        button = int(button) & 0xF

        # single-tick pulses
        n.lfsr_load = False
        n.score_increment = False
        n.score_reset = False

        if s.tick_counter == (int(ticks_per_milli) - 1) & COUNTER_MASK:
            n.tick_counter = 0
            n.millis_counter = (s.millis_counter + 1) & COUNTER_MASK
        else:
            n.tick_counter = (s.tick_counter + 1) & COUNTER_MASK

        if s.lfsr_cycles > 0:
            n.lfsr_cycles = s.lfsr_cycles - 1

        self._handlers[s.state](s, n, button, int(random_value))
        return n

    # ------------------------------ states ------------------------------
    def _power_on(self, s: ControllerState, n: ControllerState, button: int, value: int) -> None:
        n.led = 1 << ((s.millis_counter >> 8) & 0b11)
        if button != 0:
            _reset_timer(n)
            n.score_enable = True
            n.lfsr_free_run = False
            n.state = GameState.INIT

    def _init(self, s: ControllerState, n: ControllerState, button: int, value: int) -> None:
        n.led = 0
        n.seq_length = 1
        n.seq_counter = 0
        n.tone_index = 0
        if s.millis_counter == INIT_DELAY_MS:
            n.score_reset = True
            n.seed = value
            n.state = GameState.PLAY

    def _play(self, s: ControllerState, n: ControllerState, button: int, value: int) -> None:
        n.led = 1 << (value & 0b11)
        n.tone_freq = GAME_TONES[value & 0b11]
        _reset_timer(n)
        n.lfsr_cycles = LFSR_ADVANCE
        n.state = GameState.PLAY_WAIT

    def _play_wait(self, s: ControllerState, n: ControllerState, button: int, value: int) -> None:
        if s.millis_counter == SHOW_MS:
            n.tone_freq = 0
            n.led = 0
        if s.millis_counter == GAP_MS:
            if s.seq_counter + 1 == s.seq_length:
                n.lfsr_load = True
                n.seq_counter = 0
                _reset_timer(n)
                n.state = GameState.USER_WAIT
            else:
                n.seq_counter = (s.seq_counter + 1) & SEQ_MASK
                n.state = GameState.PLAY

    def _user_wait(self, s: ControllerState, n: ControllerState, button: int, value: int) -> None:
        n.led = 0
        if button == 0:
            return
        decoded = decode_button(button)
        if decoded is None:
            return
        _reset_timer(n)
        n.user_input = decoded
        n.prev_btn = button
        n.button_released = False
        n.state = GameState.USER_INPUT

    def _user_input(self, s: ControllerState, n: ControllerState, button: int, value: int) -> None:
        n.led = 1 << s.user_input
        n.tone_freq = GAME_TONES[s.user_input]
        if s.millis_counter > RELEASE_MIN_MS and button != s.prev_btn:
            n.button_released = True
        if s.millis_counter != INPUT_MS:
            return

        n.tone_freq = 0
        n.led = 0
        _reset_timer(n)
        if s.user_input != value & 0b11:
            n.tone_index = 0
            n.lfsr_free_run = True
            n.state = GameState.GAME_OVER
        elif s.seq_counter + 1 == s.seq_length:
            n.score_increment = True
            n.seq_length = (s.seq_length + 1) & SEQ_MASK
            n.seq_counter = 0
            n.tone_index = 0
            n.lfsr_load = True
            n.state = GameState.NEXT_LEVEL
        else:
            n.lfsr_cycles = LFSR_ADVANCE
            n.seq_counter = (s.seq_counter + 1) & SEQ_MASK
            n.release_ticks = 0
            if s.button_released and button == 0:
                n.state = GameState.USER_WAIT
            else:
                n.state = GameState.WAIT_BUTTON_RELEASE

    def _wait_button_release(self, s: ControllerState, n: ControllerState, button: int, value: int) -> None:
        if button == s.prev_btn:
            n.release_ticks = 0
            return
        if s.release_ticks + 1 >= RELEASE_DEBOUNCE_TICKS:
            n.release_ticks = 0
            n.state = GameState.USER_WAIT
        else:
            n.release_ticks = s.release_ticks + 1

    def _next_level(self, s: ControllerState, n: ControllerState, button: int, value: int) -> None:
        n.led = 0
        if s.tone_index < len(SUCCESS_TONES):
            n.tone_freq = SUCCESS_TONES[s.tone_index]
            if s.millis_counter == SUCCESS_NOTE_MS:
                n.tone_index = s.tone_index + 1
                _reset_timer(n)
        else:
            n.tone_freq = 0
            n.tone_index = 0
            n.seq_counter = 0
            _reset_timer(n)
            n.state = GameState.PLAY

    def _game_over(self, s: ControllerState, n: ControllerState, button: int, value: int) -> None:
        n.led = 0b1111 if s.millis_counter & 0x80 else 0
        if s.tone_index < TREMBLE_INDEX:
            n.tone_freq = GAMEOVER_TONES[s.tone_index]
            if s.millis_counter == GAMEOVER_NOTE_MS:
                n.tone_index = s.tone_index + 1
                _reset_timer(n)
        elif s.tone_index == TREMBLE_INDEX:
            n.tone_freq = tremble_tone(s.millis_counter)
            if s.millis_counter == TREMBLE_MS:
                n.tone_freq = 0
                n.tone_index = TUNE_DONE
                _reset_timer(n)

        if s.tone_index == TUNE_DONE and button != 0:
            n.led = 0
            n.tone_freq = 0
            n.lfsr_free_run = False
            _reset_timer(n)
            n.state = GameState.INIT
