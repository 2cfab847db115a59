"""Notation package: PGN serialization."""

from enginematch.core.notation.pgn import (
    PLIES_PER_LINE,
    build_pgn,
    pgn_movetext,
    pgn_result_token,
)

__all__ = [
    "PLIES_PER_LINE",
    "build_pgn",
    "pgn_movetext",
    "pgn_result_token",
]
