from __future__ import annotations

import unittest

from simonsays.blocks.controller.controller import ControllerState, GameController, decode_button
from simonsays.blocks.controller.tables import GAME_TONES, GAMEOVER_TONES, SUCCESS_TONES, GameState


class TestGameController(unittest.TestCase):
    def setUp(self):
        self.ctl = GameController()

    def step(self, s, button=0, ticks_per_milli=1, random_value=0x2048FAFA):
        return self.ctl.step(s, button=button, ticks_per_milli=ticks_per_milli, random_value=random_value)

    def test_decode_accepts_only_one_hot(self):
        self.assertEqual([decode_button(b) for b in (1, 2, 4, 8)], [0, 1, 2, 3])
        for b in (0, 3, 5, 0b1111, 0b1010):
            self.assertIsNone(decode_button(b))

    def test_millis_counter_scaled_by_timebase(self):
        s = self.ctl.initial()
        for _ in range(9):
            s = self.step(s, ticks_per_milli=3)
        self.assertEqual(s.millis_counter, 3)
        self.assertEqual(s.tick_counter, 0)

    def test_timebase_change_takes_effect_immediately(self):
        s = self.ctl.initial()
        for _ in range(4):
            s = self.step(s, ticks_per_milli=4)
        self.assertEqual(s.millis_counter, 1)
        for _ in range(2):
            s = self.step(s, ticks_per_milli=1)
        self.assertEqual(s.millis_counter, 3)

    def test_power_on_rotates_leds(self):
        self.assertEqual(self.step(ControllerState(millis_counter=10)).led, 0b0001)
        self.assertEqual(self.step(ControllerState(millis_counter=300)).led, 0b0010)
        self.assertEqual(self.step(ControllerState(millis_counter=0x300)).led, 0b1000)

    def test_button_in_power_on_starts_game(self):
        s = self.step(ControllerState(millis_counter=77, tick_counter=0), button=0b0100)
        self.assertEqual(s.state, GameState.INIT)
        self.assertEqual(s.millis_counter, 0)
        self.assertTrue(s.score_enable)
        self.assertFalse(s.lfsr_free_run)
        self.assertFalse(s.lfsr_enable)

    def test_init_captures_seed_after_500ms(self):
        s = ControllerState(state=GameState.INIT, millis_counter=499, lfsr_free_run=False)
        s = self.step(s, random_value=0xABCDEF01)
        self.assertEqual(s.state, GameState.INIT)
        self.assertEqual(s.seq_length, 1)
        s = self.step(s, random_value=0xABCDEF01)
        self.assertEqual(s.state, GameState.PLAY)
        self.assertEqual(s.seed, 0xABCDEF01)
        self.assertTrue(s.score_reset)
        s = self.step(s)
        self.assertFalse(s.score_reset)

    def test_play_shows_colour_and_requests_two_steps(self):
        s = ControllerState(state=GameState.PLAY, seq_length=1, millis_counter=12, lfsr_free_run=False)
        s = self.step(s, random_value=0b10)
        self.assertEqual(s.state, GameState.PLAY_WAIT)
        self.assertEqual(s.led, 0b0100)
        self.assertEqual(s.tone_freq, GAME_TONES[2])
        self.assertEqual(s.millis_counter, 0)
        enables = []
        for _ in range(4):
            enables.append(s.lfsr_enable)
            s = self.step(s)
        self.assertEqual(enables, [True, True, False, False])

    def test_play_wait_blanks_then_rewinds_on_last_position(self):
        s = ControllerState(state=GameState.PLAY_WAIT, seq_length=2, seq_counter=1, millis_counter=300,
                            led=0b0001, tone_freq=196, lfsr_free_run=False)
        s = self.step(s)
        self.assertEqual((s.led, s.tone_freq), (0, 0))
        s = s.model_copy(update={"millis_counter": 400})
        s = self.step(s)
        self.assertEqual(s.state, GameState.USER_WAIT)
        self.assertTrue(s.lfsr_load)
        self.assertEqual(s.seq_counter, 0)

    def test_play_wait_moves_to_next_position(self):
        s = ControllerState(state=GameState.PLAY_WAIT, seq_length=3, seq_counter=0, millis_counter=400)
        s = self.step(s)
        self.assertEqual(s.state, GameState.PLAY)
        self.assertEqual(s.seq_counter, 1)
        self.assertFalse(s.lfsr_load)

    def test_user_wait_rejects_multiple_buttons(self):
        s = ControllerState(state=GameState.USER_WAIT, millis_counter=5, prev_btn=0b0001)
        nxt = self.step(s, button=0b0011)
        self.assertEqual(nxt.state, GameState.USER_WAIT)
        self.assertEqual(nxt.prev_btn, 0b0001)

    def test_user_wait_accepts_one_hot(self):
        s = ControllerState(state=GameState.USER_WAIT, button_released=True)
        s = self.step(s, button=0b1000)
        self.assertEqual(s.state, GameState.USER_INPUT)
        self.assertEqual(s.user_input, 3)
        self.assertEqual(s.prev_btn, 0b1000)
        self.assertFalse(s.button_released)

    def _input_state(self, **kw):
        base = dict(state=GameState.USER_INPUT, seq_length=3, seq_counter=0, user_input=1,
                    prev_btn=0b0010, lfsr_free_run=False)
        base.update(kw)
        return ControllerState(**base)

    def test_release_only_counts_after_50ms(self):
        s = self.step(self._input_state(millis_counter=50), button=0)
        self.assertFalse(s.button_released)
        s = self.step(self._input_state(millis_counter=51), button=0)
        self.assertTrue(s.button_released)

    def test_match_with_release_returns_to_user_wait(self):
        s = self.step(self._input_state(millis_counter=300, button_released=True), button=0, random_value=0b01)
        self.assertEqual(s.state, GameState.USER_WAIT)
        self.assertEqual(s.seq_counter, 1)
        self.assertEqual(s.lfsr_cycles, 2)
        self.assertEqual((s.tone_freq, s.led), (0, 0))

    def test_release_flag_is_read_from_previous_tick(self):
        # released on this very tick: the guard still sees the old flag
        s = self.step(self._input_state(millis_counter=300, button_released=False), button=0, random_value=0b01)
        self.assertEqual(s.state, GameState.WAIT_BUTTON_RELEASE)

    def test_match_with_button_held_waits_for_release(self):
        s = self.step(self._input_state(millis_counter=300, button_released=True), button=0b0010, random_value=0b01)
        self.assertEqual(s.state, GameState.WAIT_BUTTON_RELEASE)

    def test_round_complete_goes_to_next_level(self):
        s = self._input_state(millis_counter=300, seq_counter=2, button_released=True)
        s = self.step(s, random_value=0b01)
        self.assertEqual(s.state, GameState.NEXT_LEVEL)
        self.assertTrue(s.score_increment)
        self.assertTrue(s.lfsr_load)
        self.assertEqual((s.seq_length, s.seq_counter), (4, 0))

    def test_mismatch_goes_to_game_over(self):
        s = self.step(self._input_state(millis_counter=300), random_value=0b11)
        self.assertEqual(s.state, GameState.GAME_OVER)
        self.assertFalse(s.score_increment)
        self.assertTrue(s.lfsr_free_run)
        self.assertEqual(s.seq_length, 3)

    def test_seq_length_wraps_at_register_width(self):
        s = self._input_state(millis_counter=300, seq_length=127, seq_counter=126)
        s = self.step(s, random_value=0b01)
        self.assertEqual(s.seq_length, 0)

    def test_wait_button_release_debounces_ten_ticks(self):
        s = ControllerState(state=GameState.WAIT_BUTTON_RELEASE, prev_btn=0b0010)
        for _ in range(9):
            s = self.step(s, button=0)
            self.assertEqual(s.state, GameState.WAIT_BUTTON_RELEASE)
        s = self.step(s, button=0)
        self.assertEqual(s.state, GameState.USER_WAIT)

    def test_wait_button_release_restarts_on_chatter(self):
        s = ControllerState(state=GameState.WAIT_BUTTON_RELEASE, prev_btn=0b0010)
        for _ in range(8):
            s = self.step(s, button=0)
        s = self.step(s, button=0b0010)
        self.assertEqual(s.release_ticks, 0)
        for _ in range(9):
            s = self.step(s, button=0)
        self.assertEqual(s.state, GameState.WAIT_BUTTON_RELEASE)
        s = self.step(s, button=0)
        self.assertEqual(s.state, GameState.USER_WAIT)

    def test_next_level_plays_success_tune_then_play(self):
        s = ControllerState(state=GameState.NEXT_LEVEL, seq_length=2)
        freqs = []
        for _ in range(8 * 151):
            s = self.step(s)
            if not freqs or freqs[-1] != s.tone_freq:
                freqs.append(s.tone_freq)
            if s.state != GameState.NEXT_LEVEL:
                break
        self.assertEqual(s.state, GameState.PLAY)
        self.assertEqual(freqs, list(SUCCESS_TONES))
        self.assertEqual(s.tone_index, 0)

    def test_game_over_tune_then_restart_on_button(self):
        s = ControllerState(state=GameState.GAME_OVER, seq_length=4, lfsr_free_run=True)
        heard = []
        for _ in range(5000):
            s = self.step(s)
            heard.append(s.tone_freq)
        self.assertEqual(s.tone_index, 7)
        self.assertEqual(s.tone_freq, 0)
        for f in GAMEOVER_TONES:
            self.assertIn(f, heard)
        self.assertTrue(any(f not in GAMEOVER_TONES and f != 0 for f in heard))
        s = self.step(s, button=0b0001)
        self.assertEqual(s.state, GameState.INIT)
        self.assertFalse(s.lfsr_free_run)
        self.assertEqual(s.led, 0)

    def test_game_over_ignores_button_before_tune_ends(self):
        s = ControllerState(state=GameState.GAME_OVER, tone_index=2)
        s = self.step(s, button=0b0001)
        self.assertEqual(s.state, GameState.GAME_OVER)

    def test_game_over_blinks_leds(self):
        dark = self.step(ControllerState(state=GameState.GAME_OVER, millis_counter=0x10))
        lit = self.step(ControllerState(state=GameState.GAME_OVER, millis_counter=0x90))
        self.assertEqual(dark.led, 0)
        self.assertEqual(lit.led, 0b1111)

    def test_step_does_not_mutate_previous_state(self):
        s = ControllerState(state=GameState.USER_WAIT)
        self.step(s, button=0b0001)
        self.assertEqual(s.state, GameState.USER_WAIT)


if __name__ == "__main__":
    unittest.main()
