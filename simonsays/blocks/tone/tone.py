from __future__ import annotations

from pydantic import BaseModel


class ToneState(BaseModel):
    accumulator: int = 0
    output: bool = False


class ToneGenerator:
    """Square-wave synthesis with an integer phase accumulator.

    Every tick `freq` is added to the accumulator; each time it reaches half
    a second's worth of ticks the output flips and that amount is subtracted,
    so the remainder carries into the next half period.
    """

    def initial(self) -> ToneState:
        return ToneState()

    @staticmethod
    def half_period(ticks_per_milli: int) -> int:
        return (int(ticks_per_milli) * 1000) // 2

    def step(self, state: ToneState, *, freq: int, ticks_per_milli: int) -> ToneState:
        if freq == 0:
            if not state.output:
                return state
            return ToneState(accumulator=state.accumulator, output=False)

        half = self.half_period(ticks_per_milli)
        acc = state.accumulator + int(freq)
        output = state.output
        if acc >= half:
            acc -= half
            output = not output
        return ToneState(accumulator=acc, output=output)
