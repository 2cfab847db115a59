"""PGN serialization helpers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from enginematch.core.enums import GameResult

# Movetext is broken onto a new line after this many plies.
PLIES_PER_LINE = 10


def pgn_result_token(result: GameResult) -> str:
    """Convert :class:`GameResult` to a PGN result token."""
    if result == GameResult.WHITE_WINS:
        return "1-0"
    if result == GameResult.BLACK_WINS:
        return "0-1"
    if result == GameResult.DRAW:
        return "1/2-1/2"
    return "*"


def pgn_movetext(
    sans: Iterable[str],
    result_token: str,
    *,
    fullmove: int = 1,
    white_first: bool = True,
) -> str:
    """Build numbered PGN movetext from SAN moves.

    A move number precedes every White move; when Black moves first the
    opening move gets an ``N...`` number instead.
    """
    parts: list[str] = []
    white_to_move = white_first
    for ply, san in enumerate(sans, start=1):
        if white_to_move:
            parts.append(f"{fullmove}. ")
        elif ply == 1:
            parts.append(f"{fullmove}... ")
        parts.append(san)
        parts.append("\n" if ply % PLIES_PER_LINE == 0 else " ")
        if not white_to_move:
            fullmove += 1
        white_to_move = not white_to_move
    parts.append(result_token)
    return "".join(parts)


def build_pgn(headers: Mapping[str, str], movetext: str) -> str:
    """Build a single-game PGN document."""
    lines: list[str] = []
    for key, value in headers.items():
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        lines.append(f'[{key} "{escaped}"]')
    lines.append("")
    lines.append(movetext)
    lines.append("")
    return "\n".join(lines)
