"""Match configuration loaded from TOML.

Example::

    games = 2
    pgn_file = "games.pgn"

    [game]
    time_ms = 10000
    increment_ms = 100

    [adjudication]
    draw_count = 8
    draw_score = 10

    [[engine]]
    command = "stockfish"
    depth = 12
    [engine.options]
    Hash = 16

    [[engine]]
    command = "./my_engine"
"""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from enginematch.core.rules import Rules
from enginematch.engine.search import SearchLimits
from enginematch.game.interfaces import AdjudicationConfig, GameOptions, TimeControl


@dataclass(slots=True, frozen=True)
class EngineConfig:
    """How to launch and drive one engine."""

    command: str
    name: str = ""
    options: tuple[tuple[str, str], ...] = ()
    limits: SearchLimits = field(default_factory=SearchLimits)


@dataclass(slots=True, frozen=True)
class MatchConfig:
    engines: tuple[EngineConfig, EngineConfig]
    game: GameOptions = field(default_factory=GameOptions)
    games: int = 1
    fen: str | None = None
    openings: str | None = None
    pgn_file: str | None = None
    samples_file: str | None = None
    log_file: str | None = None
    log_level: str = "INFO"


def load_config(path: str | os.PathLike[str]) -> MatchConfig:
    """Read a :class:`MatchConfig` from a TOML file."""
    with open(path, "rb") as f:
        raw = tomllib.load(f)
    return config_from_dict(raw)


def config_from_dict(raw: Mapping[str, Any]) -> MatchConfig:
    """Build a :class:`MatchConfig` from parsed TOML.

    Raises:
        ValueError: the configuration is incomplete or inconsistent.
    """
    engines_raw = raw.get("engine", [])
    if not isinstance(engines_raw, list) or not all(
        isinstance(item, Mapping) for item in engines_raw
    ):
        raise ValueError("engines must be given as [[engine]] tables")
    if len(engines_raw) != 2:
        raise ValueError(
            f"exactly two [[engine]] tables required, got {len(engines_raw)}"
        )
    engines = (_engine_config(engines_raw[0]), _engine_config(engines_raw[1]))

    game_raw = _table(raw, "game")
    adjudication = AdjudicationConfig(
        **{
            k: int(v)
            for k, v in _table(raw, "adjudication").items()
            if k in AdjudicationConfig.__dataclass_fields__
        }
    )
    if "time_ms" in game_raw:
        time_control = TimeControl(
            float(game_raw["time_ms"]), float(game_raw.get("increment_ms", 0))
        )
    else:
        time_control = TimeControl.unlimited()

    chess960 = bool(game_raw.get("chess960", False))
    samples_file = raw.get("samples_file")
    game = GameOptions(
        chess960=chess960,
        adjudication=adjudication,
        time_control=time_control,
        limits=(engines[0].limits, engines[1].limits),
        # A samples file is pointless without recorded samples.
        record_samples=bool(game_raw.get("record_samples", False))
        or samples_file is not None,
    )

    games = int(raw.get("games", 1))
    if games < 1:
        raise ValueError(f"games must be positive, got {games}")

    fen = raw.get("fen")
    if fen is not None:
        fen = str(fen)
        _check_fen(fen, chess960, "fen")

    log_level = str(raw.get("log_level", "INFO")).upper()
    if log_level not in logging.getLevelNamesMapping():
        raise ValueError(f"unknown log_level {log_level!r}")

    return MatchConfig(
        engines=engines,
        game=game,
        games=games,
        fen=fen,
        openings=raw.get("openings"),
        pgn_file=raw.get("pgn_file"),
        samples_file=samples_file,
        log_file=raw.get("log_file"),
        log_level=log_level,
    )


def load_openings(
    path: str | os.PathLike[str], *, chess960: bool = False
) -> list[str]:
    """Read start positions, one FEN or EPD per line.

    Blank lines and ``#`` comments are skipped; EPD operations are dropped.

    Raises:
        ValueError: a line is not a valid position, or the file has none.
    """
    fens: list[str] = []
    with open(path, encoding="utf-8") as f:
        for lineno, raw_line in enumerate(f, start=1):
            fields = raw_line.split()
            if not fields or fields[0].startswith("#"):
                continue
            if len(fields) >= 6 and fields[4].isdigit() and fields[5].isdigit():
                fen = " ".join(fields[:6])
            else:
                fen = " ".join(fields[:4])
            _check_fen(fen, chess960, f"{os.fspath(path)}:{lineno}")
            fens.append(fen)
    if not fens:
        raise ValueError(f"no positions found in {os.fspath(path)!r}")
    return fens


def _engine_config(raw: Mapping[str, Any]) -> EngineConfig:
    if "command" not in raw:
        raise ValueError("[[engine]] table without 'command'")
    options = tuple(
        (str(name), _option_value(value))
        for name, value in _table(raw, "options").items()
    )
    limits = SearchLimits(
        nodes=_optional_int(raw.get("nodes")),
        depth=_optional_int(raw.get("depth")),
        movetime_ms=_optional_int(raw.get("movetime_ms")),
    )
    return EngineConfig(
        command=str(raw["command"]),
        name=str(raw.get("name", "")),
        options=options,
        limits=limits,
    )


def _table(raw: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = raw.get(key, {})
    if not isinstance(value, Mapping):
        raise ValueError(f"'{key}' must be a table, got {type(value).__name__}")
    return value


def _check_fen(fen: str, chess960: bool, where: str) -> None:
    try:
        Rules.board_from_fen(fen, chess960=chess960)
    except ValueError as exc:
        raise ValueError(f"invalid position in {where}: {fen!r} ({exc})") from exc


def _option_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _optional_int(value: Any) -> int | None:
    return None if value is None else int(value)
