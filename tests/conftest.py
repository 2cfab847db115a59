"""Shared pytest fixtures used across the test suite."""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterator, Sequence
from pathlib import Path

import pytest

from enginematch.engine.search import SearchResult

FAKE_ENGINE = Path(__file__).resolve().parent / "fake_engine.py"

EngineCommand = Callable[..., list[str]]


@pytest.fixture
def fake_engine_cmd() -> EngineCommand:
    """Build the argv of the scripted fake engine.

    Keyword arguments map to its flags: ``bestmove="e2e4"`` becomes
    ``--bestmove e2e4``, ``stall=True`` becomes ``--stall`` and list values
    repeat the flag.
    """

    def build(**flags: object) -> list[str]:
        argv = [sys.executable, str(FAKE_ENGINE)]
        for key, value in flags.items():
            flag = "--" + key.replace("_", "-")
            if value is True:
                argv.append(flag)
            elif isinstance(value, list):
                for item in value:
                    argv.extend([flag, str(item)])
            elif value is not None and value is not False:
                argv.extend([flag, str(value)])
        return argv

    return build


@pytest.fixture
def record_file(tmp_path: Path) -> Iterator[Path]:
    """File the fake engine appends every received command to."""
    path = tmp_path / "commands.txt"
    path.touch()
    yield path


class ScriptedEngine:
    """In-process engine player replaying a fixed list of moves.

    ``None`` in *moves* (or running out of moves) is a timed-out search.
    Every search spends *spent_ms* of the engine's remaining time.
    """

    def __init__(
        self,
        name: str,
        moves: Sequence[str | None],
        scores: Sequence[int] = (),
        spent_ms: float = 0.0,
    ) -> None:
        self.name = name
        self._moves = list(moves)
        self._scores = list(scores)
        self._spent_ms = spent_ms
        self.positions: list[str] = []
        self.go_commands: list[str] = []
        self.new_games: list[bool] = []

    def new_game(self, *, chess960: bool = False) -> None:
        self.new_games.append(chess960)
        self.positions.clear()
        self.go_commands.clear()

    def search(
        self, position_command: str, go_command: str, time_left_ms: float
    ) -> SearchResult:
        call = len(self.positions)
        self.positions.append(position_command)
        self.go_commands.append(go_command)
        move = self._moves[call] if call < len(self._moves) else None
        score = self._scores[call] if call < len(self._scores) else 0
        time_left = time_left_ms - self._spent_ms
        if move is None:
            time_left = -1.0
        return SearchResult(best_move=move, score_cp=score, time_left_ms=time_left)


@pytest.fixture
def scripted_engine() -> type[ScriptedEngine]:
    """The :class:`ScriptedEngine` class, for tests that build their own."""
    return ScriptedEngine

