"""Core domain layer: match enums, rules adapter and notation.

Quick start::

    from enginematch.core import Rules, STARTING_FEN

    board = Rules.board_from_fen(STARTING_FEN)
    for move in Rules.legal_moves(board):
        print(Rules.move_to_uci(board, move))
"""

from enginematch.core.enums import GameResult, TerminationCode
from enginematch.core.notation import build_pgn, pgn_movetext, pgn_result_token
from enginematch.core.rules import FIFTY_MOVE_PLIES, STARTING_FEN, Rules

__all__ = [
    # Enums
    "GameResult",
    "TerminationCode",
    # Rules
    "FIFTY_MOVE_PLIES",
    "Rules",
    "STARTING_FEN",
    # Notation
    "build_pgn",
    "pgn_movetext",
    "pgn_result_token",
]
