"""Core enumerations for the match domain."""

from __future__ import annotations

from enum import IntEnum


class TerminationCode(IntEnum):
    """How a game ended.

    Losses count against the side to move at the terminal ply.
    """

    NONE = 0

    CHECKMATE = 1
    TIME_LOSS = 2
    ILLEGAL_MOVE = 3
    RESIGNATION = 4

    STALEMATE = 5
    THREEFOLD_REPETITION = 6
    FIFTY_MOVE_RULE = 7
    INSUFFICIENT_MATERIAL = 8
    DRAW_ADJUDICATION = 9

    @property
    def is_loss(self) -> bool:
        return self in _LOSSES

    @property
    def is_draw(self) -> bool:
        return self in _DRAWS

    def __str__(self) -> str:
        return self.name.lower().replace("_", "-")


_LOSSES = frozenset(
    {
        TerminationCode.CHECKMATE,
        TerminationCode.TIME_LOSS,
        TerminationCode.ILLEGAL_MOVE,
        TerminationCode.RESIGNATION,
    }
)
_DRAWS = frozenset(TerminationCode) - _LOSSES - {TerminationCode.NONE}


class GameResult(IntEnum):
    """Outcome of a game from White's point of view."""

    IN_PROGRESS = 0
    WHITE_WINS = 1
    BLACK_WINS = 2
    DRAW = 3
