"""Game: the per-ply orchestrator of an engine-vs-engine game.

Coordinates: two engine players, TimeBudget, Adjudicator, PositionHistory.
Chess legality is delegated to :class:`~enginematch.core.rules.Rules`.
"""

from __future__ import annotations

import logging

import chess

from enginematch.core.enums import TerminationCode
from enginematch.core.rules import FIFTY_MOVE_PLIES, STARTING_FEN, Rules
from enginematch.engine.uci import build_go_command
from enginematch.game.adjudication import Adjudicator
from enginematch.game.clock import TimeBudget
from enginematch.game.history import PositionHistory
from enginematch.game.interfaces import GameOptions, IEnginePlayer
from enginematch.game.result import decode_state, game_pgn
from enginematch.game.samples import Sample, build_samples

_LOGGER = logging.getLogger(__name__)


class Game:
    """One game between two engines, from a given start position.

    The engine pair passed to :meth:`play` is indexed by seat: seat 0 plays
    the side to move in the start position and moves on even plies.
    The termination code is written once, when the game stops, together
    with the ply at which it stopped.
    """

    __slots__ = ("_history", "_names", "_termination", "_ply", "_scores")

    def __init__(self, fen: str | None = None, *, chess960: bool = False) -> None:
        board = Rules.board_from_fen(fen or STARTING_FEN, chess960=chess960)
        self._history = PositionHistory(board)
        self._names: dict[chess.Color, str] = {chess.WHITE: "", chess.BLACK: ""}
        self._termination = TerminationCode.NONE
        self._ply = 0
        self._scores: list[tuple[int, int]] = []

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def history(self) -> PositionHistory:
        return self._history

    @property
    def names(self) -> dict[chess.Color, str]:
        return dict(self._names)

    @property
    def termination(self) -> TerminationCode:
        return self._termination

    @property
    def is_over(self) -> bool:
        return self._termination != TerminationCode.NONE

    @property
    def ply(self) -> int:
        return self._ply

    @property
    def board(self) -> chess.Board:
        """Position at the current ply."""
        return self._history[self._ply].board

    # ── Play ─────────────────────────────────────────────────────────────

    def play(
        self,
        engines: tuple[IEnginePlayer, IEnginePlayer],
        options: GameOptions | None = None,
    ) -> TerminationCode:
        """Alternate the two engines until the game ends; return how it ended."""
        if self.is_over or self._ply:
            raise RuntimeError("game has already been played")
        options = options or GameOptions()

        start_turn = self._history[0].board.turn
        white_seat = 0 if start_turn == chess.WHITE else 1
        self._names[chess.WHITE] = engines[white_seat].name
        self._names[chess.BLACK] = engines[1 - white_seat].name

        for engine in engines:
            engine.new_game(chess960=options.chess960)

        budget = TimeBudget(options.time_control)
        adjudicator = Adjudicator(options.adjudication)
        played: chess.Move | None = None

        while True:
            self._history.reserve(self._ply)
            if played is not None:
                previous = self._history[self._ply - 1].board
                self._history.append(Rules.apply_move(previous, played), played)

            legal = Rules.legal_moves(self.board)
            code = self.check_rules(legal)
            if code != TerminationCode.NONE:
                return self._finish(code)

            seat = self._ply % 2
            go_command = build_go_command(
                options.limits[seat], budget.clock_state(white_seat)
            )
            result = engines[seat].search(
                self.position_command(), go_command, budget.remaining(seat)
            )
            budget.update(seat, result.time_left_ms)
            if result.best_move is None or budget.is_flag_fallen(seat):
                return self._finish(TerminationCode.TIME_LOSS)

            played = Rules.parse_uci(self.board, result.best_move)
            if played is None or played not in legal:
                _LOGGER.info(
                    "Engine '%s' played illegal move %r",
                    engines[seat].name,
                    result.best_move,
                )
                return self._finish(TerminationCode.ILLEGAL_MOVE)

            if options.record_samples:
                self._scores.append((self._ply, result.score_cp))

            code = adjudicator.observe(seat, result.score_cp)
            if code != TerminationCode.NONE:
                return self._finish(code)

            budget.add_increment(seat)
            self._ply += 1

    # ── Rules ────────────────────────────────────────────────────────────

    def check_rules(self, legal: list[chess.Move]) -> TerminationCode:
        """Game-over test by chess rules for the current ply.

        Priority: mate/stalemate, fifty-move rule, insufficient material,
        threefold repetition.
        """
        record = self._history[self._ply]
        board = record.board

        if not legal:
            if Rules.is_in_check(board):
                return TerminationCode.CHECKMATE
            return TerminationCode.STALEMATE

        rule50 = Rules.fifty_move_counter(board)
        if rule50 >= FIFTY_MOVE_PLIES:
            return TerminationCode.FIFTY_MOVE_RULE
        if Rules.is_insufficient_material(board):
            return TerminationCode.INSUFFICIENT_MATERIAL

        # Same side to move, inside the window since the last irreversible move.
        repetitions = 1
        for back in range(4, min(rule50, self._ply) + 1, 2):
            if self._history[self._ply - back].key == record.key:
                repetitions += 1
                if repetitions >= 3:
                    return TerminationCode.THREEFOLD_REPETITION

        return TerminationCode.NONE

    def position_command(self) -> str:
        """``position fen ... [moves ...]`` starting where rule50 last reset."""
        ply0 = max(self._ply - Rules.fifty_move_counter(self.board), 0)
        parts = ["position fen", Rules.board_to_fen(self._history[ply0].board)]
        if ply0 < self._ply:
            parts.append("moves")
            for ply in range(ply0 + 1, self._ply + 1):
                record = self._history[ply]
                assert record.move is not None
                parts.append(
                    Rules.move_to_uci(self._history[ply - 1].board, record.move)
                )
        return " ".join(parts)

    # ── Output ───────────────────────────────────────────────────────────

    def result(self) -> tuple[str, str]:
        """PGN result token and termination reason."""
        return decode_state(self._termination, self.board.turn)

    def pgn(self) -> str:
        return game_pgn(self)

    @property
    def samples(self) -> list[Sample]:
        """Recorded plies labelled with the final result."""
        return build_samples(
            self._history, self._scores, self._termination, self.board.turn
        )

    # ── Internal ─────────────────────────────────────────────────────────

    def _finish(self, code: TerminationCode) -> TerminationCode:
        assert self._termination == TerminationCode.NONE
        self._termination = code
        result, reason = self.result()
        _LOGGER.info(
            "%s vs %s: %s (%s) at ply %d",
            self._names[chess.WHITE],
            self._names[chess.BLACK],
            result,
            reason,
            self._ply,
        )
        return code
