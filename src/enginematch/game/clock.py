"""Per-engine time budget with Fischer increment support."""

from __future__ import annotations

from enginematch.engine.search import ClockState
from enginematch.game.interfaces import TimeControl


class TimeBudget:
    """Remaining wall-clock milliseconds for both engine seats.

    The budget does not tick by itself: the protocol client measures the
    time spent on each search and the result is stored with :meth:`update`.
    A seat whose budget went negative has lost on time.
    """

    __slots__ = ("_time_control", "_remaining")

    def __init__(self, time_control: TimeControl) -> None:
        self._time_control = time_control
        self._remaining: list[float] = [time_control.initial_ms] * 2

    @property
    def time_control(self) -> TimeControl:
        return self._time_control

    def remaining(self, seat: int) -> float:
        return self._remaining[seat]

    def update(self, seat: int, time_left_ms: float) -> None:
        self._remaining[seat] = time_left_ms

    def add_increment(self, seat: int) -> None:
        self._remaining[seat] += self._time_control.increment_ms

    def is_flag_fallen(self, seat: int) -> bool:
        return self._remaining[seat] < 0

    def clock_state(self, white_seat: int) -> ClockState | None:
        """Clock values for ``go``, or *None* when time is unlimited."""
        if self._time_control.is_unlimited:
            return None
        inc = int(self._time_control.increment_ms)
        return ClockState(
            white_ms=max(0, int(self._remaining[white_seat])),
            black_ms=max(0, int(self._remaining[1 - white_seat])),
            white_inc_ms=inc,
            black_inc_ms=inc,
        )
