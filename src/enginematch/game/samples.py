"""Training samples harvested from finished games."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TextIO

import chess

from enginematch.core.enums import TerminationCode
from enginematch.core.rules import Rules
from enginematch.game.history import PositionHistory

WIN, DRAW, LOSS = 1, 0, -1


@dataclass(slots=True, frozen=True)
class Sample:
    """Position, engine score and final result, both from the mover's view."""

    fen: str
    score_cp: int
    result: int

    def to_csv_row(self) -> str:
        return f"{self.fen},{self.score_cp},{self.result}"


def build_samples(
    history: PositionHistory,
    scores: Iterable[tuple[int, int]],
    termination: TerminationCode,
    loser: chess.Color,
) -> list[Sample]:
    """Attach the game result to every recorded ``(ply, score)`` pair.

    *loser* is only consulted for loss-type terminations.
    """
    if termination == TerminationCode.NONE:
        raise RuntimeError("samples are only available once the game is over")

    samples: list[Sample] = []
    for ply, score in scores:
        board = history[ply].board
        if termination.is_draw:
            result = DRAW
        else:
            result = LOSS if board.turn == loser else WIN
        samples.append(Sample(Rules.board_to_fen(board), score, result))
    return samples


def write_samples(stream: TextIO, samples: Iterable[Sample]) -> int:
    """Write samples as ``fen,score,result`` lines; return how many."""
    count = 0
    for sample in samples:
        stream.write(sample.to_csv_row() + "\n")
        count += 1
    return count
