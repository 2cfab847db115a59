"""Sequential match between one pair of engines."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable
from contextlib import ExitStack
from dataclasses import dataclass

from enginematch.config import EngineConfig, MatchConfig, load_openings
from enginematch.core.enums import TerminationCode
from enginematch.core.rules import STARTING_FEN
from enginematch.engine.process import TrafficLog
from enginematch.engine.uci import UciEngine
from enginematch.game.controller import Game
from enginematch.game.interfaces import IEnginePlayer

_LOGGER = logging.getLogger(__name__)

GameCallback = Callable[[int, Game], None]  # game index, finished game


@dataclass(slots=True)
class MatchScore:
    """Running tally from the first engine's point of view."""

    wins: int = 0
    losses: int = 0
    draws: int = 0

    @property
    def games(self) -> int:
        return self.wins + self.losses + self.draws

    @property
    def points(self) -> float:
        return self.wins + 0.5 * self.draws

    def record(self, game: Game, first_seat: int) -> None:
        """Count *game*, where the first engine sat in *first_seat*."""
        code = game.termination
        if code == TerminationCode.NONE:
            raise ValueError("cannot score an unfinished game")
        if code.is_draw:
            self.draws += 1
        elif game.ply % 2 == first_seat:
            self.losses += 1
        else:
            self.wins += 1

    def __str__(self) -> str:
        return f"+{self.wins} -{self.losses} ={self.draws}"


class Match:
    """Plays ``config.games`` games in a row with the same two engines.

    Colors alternate every game and each start position is used for one
    pair of games. Engines are started once and reused, so every game must
    leave them drained; they are shut down on every exit path. Start
    positions are read and checked on construction, before any engine runs.
    """

    __slots__ = ("_config", "_positions", "_score")

    def __init__(self, config: MatchConfig) -> None:
        self._config = config
        self._positions = self._load_positions()
        self._score = MatchScore()

    @property
    def score(self) -> MatchScore:
        return self._score

    def start_positions(self) -> list[str]:
        return list(self._positions)

    def run(
        self,
        on_game: GameCallback | None = None,
        *,
        log: TrafficLog | None = None,
    ) -> MatchScore:
        """Start both engines, mirroring their traffic to *log*, and play."""
        first_cfg, second_cfg = self._config.engines
        with ExitStack() as stack:
            first = stack.enter_context(_start_engine(first_cfg, log))
            second = stack.enter_context(_start_engine(second_cfg, log))
            return self.play((first, second), on_game)

    def play(
        self,
        engines: tuple[IEnginePlayer, IEnginePlayer],
        on_game: GameCallback | None = None,
    ) -> MatchScore:
        """Play the match with already started engines."""
        positions = self._positions
        options = self._config.game

        for index in range(self._config.games):
            fen = positions[(index // 2) % len(positions)]
            first_seat = index % 2
            seated = engines if first_seat == 0 else (engines[1], engines[0])
            limits = options.limits
            if first_seat == 1:
                limits = (limits[1], limits[0])

            game = Game(fen, chess960=options.chess960)
            game.play(seated, dataclasses.replace(options, limits=limits))
            self._score.record(game, first_seat)
            _LOGGER.info(
                "Game %d/%d finished, score %s",
                index + 1,
                self._config.games,
                self._score,
            )
            if on_game is not None:
                on_game(index, game)

        return self._score

    def _load_positions(self) -> list[str]:
        if self._config.openings:
            return load_openings(
                self._config.openings, chess960=self._config.game.chess960
            )
        return [self._config.fen or STARTING_FEN]


def _start_engine(cfg: EngineConfig, log: TrafficLog | None) -> UciEngine:
    return UciEngine.start(cfg.command, name=cfg.name, options=cfg.options, log=log)
