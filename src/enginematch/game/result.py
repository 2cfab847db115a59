"""Result decoding and PGN transcript of a game."""

from __future__ import annotations

from typing import TYPE_CHECKING

import chess

from enginematch.core.enums import GameResult, TerminationCode
from enginematch.core.notation import build_pgn, pgn_movetext, pgn_result_token
from enginematch.core.rules import Rules

if TYPE_CHECKING:
    from enginematch.game.controller import Game

_REASONS: dict[TerminationCode, str] = {
    TerminationCode.NONE: "unterminated",
    TerminationCode.CHECKMATE: "checkmate",
    TerminationCode.TIME_LOSS: "time forfeit",
    TerminationCode.ILLEGAL_MOVE: "illegal move",
    TerminationCode.STALEMATE: "stalemate",
    TerminationCode.THREEFOLD_REPETITION: "3 repetitions",
    TerminationCode.FIFTY_MOVE_RULE: "50 move rule",
    TerminationCode.INSUFFICIENT_MATERIAL: "insufficient material",
    TerminationCode.DRAW_ADJUDICATION: "draw by adjudication",
}


def game_result(code: TerminationCode, side_to_move: chess.Color) -> GameResult:
    """Outcome from White's view; losses go against *side_to_move*."""
    if code == TerminationCode.NONE:
        return GameResult.IN_PROGRESS
    if code.is_draw:
        return GameResult.DRAW
    if side_to_move == chess.WHITE:
        return GameResult.BLACK_WINS
    return GameResult.WHITE_WINS


def decode_state(code: TerminationCode, side_to_move: chess.Color) -> tuple[str, str]:
    """Return the PGN ``(result, reason)`` pair for a terminal state."""
    result = pgn_result_token(game_result(code, side_to_move))
    if code == TerminationCode.RESIGNATION:
        return result, f"{chess.COLOR_NAMES[side_to_move]} resigns"
    return result, _REASONS[code]


def game_pgn(game: Game) -> str:
    """Full PGN transcript: header tags, numbered SAN movetext, result."""
    history = game.history
    start = history[0].board
    result, reason = decode_state(game.termination, game.board.turn)

    headers = {
        "White": game.names[chess.WHITE],
        "Black": game.names[chess.BLACK],
        "Result": result,
        "Termination": reason,
        "FEN": Rules.board_to_fen(start),
    }
    if start.chess960:
        headers["Variant"] = "Chess960"
    headers["PlyCount"] = str(game.ply)

    sans: list[str] = []
    for ply in range(1, game.ply + 1):
        before, after = history[ply - 1], history[ply]
        assert after.move is not None
        san = Rules.move_to_san(before.board, after.move)
        if Rules.is_in_check(after.board):
            mated = ply == game.ply and game.termination == TerminationCode.CHECKMATE
            san += "#" if mated else "+"
        sans.append(san)

    movetext = pgn_movetext(
        sans,
        result,
        fullmove=start.fullmove_number,
        white_first=start.turn == chess.WHITE,
    )
    return build_pgn(headers, movetext)
