"""Chess rules adapter over ``python-chess``.

The match layer never touches board internals directly: everything it
needs from the rules engine goes through :class:`Rules`.
"""

from __future__ import annotations

import chess
import chess.polyglot

STARTING_FEN = chess.STARTING_FEN

# Halfmove clock value at which the fifty-move rule ends the game.
FIFTY_MOVE_PLIES = 100


class Rules:
    """Static rule-checker operating on :class:`chess.Board` objects."""

    # ── Position encoding ────────────────────────────────────────────────

    @staticmethod
    def board_from_fen(fen: str, *, chess960: bool = False) -> chess.Board:
        """Decode *fen*. Raises ``ValueError`` on malformed input."""
        return chess.Board(fen, chess960=chess960)

    @staticmethod
    def board_to_fen(board: chess.Board) -> str:
        return board.fen()

    @staticmethod
    def repetition_key(board: chess.Board) -> int:
        """Hash identifying a position for repetition purposes."""
        return chess.polyglot.zobrist_hash(board)

    # ── Moves ────────────────────────────────────────────────────────────

    @staticmethod
    def legal_moves(board: chess.Board) -> list[chess.Move]:
        return list(board.legal_moves)

    @staticmethod
    def apply_move(board: chess.Board, move: chess.Move) -> chess.Board:
        """Return the position reached by playing *move* on *board*."""
        child = board.copy(stack=False)
        child.push(move)
        return child

    @staticmethod
    def parse_uci(board: chess.Board, text: str) -> chess.Move | None:
        """Convert engine move text to a move object, or *None* if illegal.

        Castling given as king-takes-rook or king-two-squares is normalised
        to the board's own representation.
        """
        try:
            return board.parse_uci(text)
        except ValueError:
            return None

    @staticmethod
    def move_to_uci(board: chess.Board, move: chess.Move) -> str:
        return board.uci(move, chess960=board.chess960)

    @staticmethod
    def move_to_san(board: chess.Board, move: chess.Move) -> str:
        """SAN of *move* without check or mate suffix."""
        return board.san(move).rstrip("+#")

    # ── Status ───────────────────────────────────────────────────────────

    @staticmethod
    def is_in_check(board: chess.Board) -> bool:
        return board.is_check()

    @staticmethod
    def is_insufficient_material(board: chess.Board) -> bool:
        return board.is_insufficient_material()

    @staticmethod
    def fifty_move_counter(board: chess.Board) -> int:
        """Plies since the last capture or pawn move."""
        return board.halfmove_clock
