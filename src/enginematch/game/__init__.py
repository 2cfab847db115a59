"""Game management layer: orchestrator, history, clock, adjudication.

Quick start::

    from enginematch.engine import UciEngine
    from enginematch.game import Game, GameOptions

    with UciEngine.start("stockfish") as a, UciEngine.start("./mine") as b:
        game = Game()
        game.play((a, b), GameOptions())
        print(game.pgn())
"""

from enginematch.game.adjudication import Adjudicator
from enginematch.game.clock import TimeBudget
from enginematch.game.controller import Game
from enginematch.game.history import PlyRecord, PositionHistory
from enginematch.game.interfaces import (
    AdjudicationConfig,
    GameOptions,
    IEnginePlayer,
    TimeControl,
)
from enginematch.game.result import decode_state, game_pgn, game_result
from enginematch.game.samples import Sample, build_samples, write_samples

__all__ = [
    # Interfaces / config
    "AdjudicationConfig",
    "GameOptions",
    "IEnginePlayer",
    "TimeControl",
    # Concrete
    "Adjudicator",
    "Game",
    "PlyRecord",
    "PositionHistory",
    "Sample",
    "TimeBudget",
    # Output
    "build_samples",
    "decode_state",
    "game_pgn",
    "game_result",
    "write_samples",
]
