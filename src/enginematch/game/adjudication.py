"""Tournament adjudication: draw and resignation counters."""

from __future__ import annotations

from enginematch.core.enums import TerminationCode
from enginematch.game.interfaces import AdjudicationConfig


class Adjudicator:
    """Tracks consecutive-ply evaluation trends for one game.

    Scores are from the mover's point of view. The draw counter is shared
    by both seats, resignation counters are per seat. A counter resets to
    zero on any ply that fails its threshold.
    """

    __slots__ = ("_config", "_draw_plies", "_resign_plies")

    def __init__(self, config: AdjudicationConfig) -> None:
        self._config = config
        self._draw_plies = 0
        self._resign_plies = [0, 0]

    @property
    def draw_plies(self) -> int:
        return self._draw_plies

    def resign_plies(self, seat: int) -> int:
        return self._resign_plies[seat]

    def observe(self, seat: int, score_cp: int) -> TerminationCode:
        """Account for *seat*'s latest score; return the triggered code, if any."""
        cfg = self._config

        if cfg.draw_count and abs(score_cp) <= cfg.draw_score:
            self._draw_plies += 1
            if self._draw_plies >= 2 * cfg.draw_count:
                return TerminationCode.DRAW_ADJUDICATION
        else:
            self._draw_plies = 0

        if cfg.resign_count and score_cp <= -cfg.resign_score:
            self._resign_plies[seat] += 1
            if self._resign_plies[seat] >= cfg.resign_count:
                return TerminationCode.RESIGNATION
        else:
            self._resign_plies[seat] = 0

        return TerminationCode.NONE
