"""UCI protocol client built on :class:`EngineProcess`.

Lifecycle::

    INIT -> OPTIONS_SET -> READY <-> SEARCHING -> TERMINATED

Every exchange is blocking: a command goes out, then lines are read until
the matching reply. Progress lines are parsed defensively, but a score
token without a usable value is a :class:`ProtocolViolation`.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Sequence
from enum import IntEnum, auto

from enginematch.engine.errors import ProtocolViolation, TransportError
from enginematch.engine.process import EngineProcess, TrafficLog
from enginematch.engine.search import (
    SCORE_MAX,
    SCORE_MIN,
    ClockState,
    SearchLimits,
    SearchResult,
)

_LOGGER = logging.getLogger(__name__)


class EngineState(IntEnum):
    """Protocol states of a single engine."""

    INIT = auto()
    OPTIONS_SET = auto()
    READY = auto()
    SEARCHING = auto()
    TERMINATED = auto()


# ── Command building / line parsing ──────────────────────────────────────────


def build_go_command(limits: SearchLimits, clock: ClockState | None = None) -> str:
    """Build a ``go`` command carrying every active limit."""
    parts = ["go"]
    if clock is not None:
        parts.append(f"wtime {clock.white_ms} btime {clock.black_ms}")
        if clock.white_inc_ms or clock.black_inc_ms:
            parts.append(f"winc {clock.white_inc_ms} binc {clock.black_inc_ms}")
    if limits.nodes:
        parts.append(f"nodes {limits.nodes}")
    if limits.depth:
        parts.append(f"depth {limits.depth}")
    if limits.movetime_ms:
        parts.append(f"movetime {limits.movetime_ms}")
    return " ".join(parts)


def parse_info_score(tokens: Sequence[str]) -> int | None:
    """Extract the score from a tokenized ``info`` line.

    Returns *None* when the line carries no score. Everything after a
    ``string`` token is free text and is not scanned. Mate distances
    saturate to :data:`SCORE_MIN` (negative) or :data:`SCORE_MAX`
    (non-negative).

    Raises:
        ValueError: ``score`` is not followed by ``cp <int>`` or ``mate <int>``.
    """
    if "string" in tokens:
        tokens = tokens[: tokens.index("string")]
    try:
        idx = tokens.index("score")
    except ValueError:
        return None

    fields = tokens[idx + 1 : idx + 3]
    if len(fields) < 2:
        raise ValueError("missing value after 'score'")
    kind, raw = fields
    if kind not in ("cp", "mate"):
        raise ValueError(f"illegal score type {kind!r}")
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"illegal score value {raw!r}") from None

    if kind == "cp":
        return value
    return SCORE_MIN if value < 0 else SCORE_MAX


# ── Client ───────────────────────────────────────────────────────────────────


class UciEngine:
    """One UCI engine driven through its protocol states.

    Args:
        process: Spawned engine process, owned from now on.
        keep_name: Do not adopt the ``id name`` reported by the engine.
    """

    __slots__ = ("_process", "_state", "_keep_name")

    def __init__(self, process: EngineProcess, *, keep_name: bool = False) -> None:
        self._process = process
        self._state = EngineState.INIT
        self._keep_name = keep_name

    @classmethod
    def start(
        cls,
        command: str | Sequence[str],
        *,
        name: str = "",
        options: Iterable[tuple[str, str]] = (),
        log: TrafficLog | None = None,
    ) -> UciEngine:
        """Spawn *command*, run the handshake and apply *options*."""
        process = EngineProcess.spawn(command, name=name, log=log)
        engine = cls(process, keep_name=bool(name))
        try:
            engine.handshake()
            engine.configure(options)
        except BaseException:
            engine.close()
            raise
        _LOGGER.info("Engine '%s' ready", engine.name)
        return engine

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def name(self) -> str:
        return self._process.name

    @property
    def state(self) -> EngineState:
        return self._state

    # ── Protocol phases ──────────────────────────────────────────────────

    def handshake(self) -> None:
        """Send ``uci`` and read until ``uciok``."""
        self._require("handshake", EngineState.INIT)
        self._process.write_line("uci")
        while True:
            line = self._read()
            tokens = line.split(None, 2)
            if tokens[:2] == ["id", "name"] and len(tokens) == 3:
                if not self._keep_name:
                    self._process.name = tokens[2].strip()
            elif tokens == ["uciok"]:
                return

    def configure(self, options: Iterable[tuple[str, str]]) -> None:
        """Send one ``setoption`` per (name, value) pair, in order."""
        self._require("configure", EngineState.INIT)
        for name, value in options:
            self._process.write_line(f"setoption name {name} value {value}")
        self._state = EngineState.OPTIONS_SET

    def new_game(self, *, chess960: bool = False) -> None:
        """Prepare the engine for a new game and wait until it is drained."""
        self._require("new game", EngineState.OPTIONS_SET, EngineState.READY)
        if chess960:
            self._process.write_line("setoption name UCI_Chess960 value true")
        self._process.write_line("ucinewgame")
        self.sync()
        self._state = EngineState.READY

    def sync(self) -> None:
        """Ping with ``isready`` and discard everything up to ``readyok``."""
        self._process.write_line("isready")
        while self._read().strip() != "readyok":
            pass

    def search(
        self,
        position_command: str,
        go_command: str,
        time_left_ms: float,
    ) -> SearchResult:
        """Run one search bounded by the engine's remaining time.

        The remaining time is re-measured after every line read. When it
        goes negative before ``bestmove`` the search is stopped and drained
        and a timed-out result is returned.
        """
        self._require("search", EngineState.READY)
        self._state = EngineState.SEARCHING

        self._process.write_line(position_command)
        self.sync()
        self._process.write_line(go_command)

        deadline = _now_ms() + time_left_ms
        score = 0
        best: str | None = None

        while time_left_ms >= 0 and best is None:
            line = self._process.read_line(timeout=time_left_ms / 1000)
            time_left_ms = deadline - _now_ms()
            if line is None:
                continue

            tokens = line.split()
            if not tokens:
                continue
            if tokens[0] == "info":
                try:
                    parsed = parse_info_score(tokens)
                except ValueError as exc:
                    raise ProtocolViolation(
                        self.name, "search", f"{exc} in {line!r}"
                    ) from exc
                if parsed is not None:
                    score = parsed
            elif tokens[0] == "bestmove":
                if len(tokens) < 2:
                    raise ProtocolViolation(
                        self.name, "search", "'bestmove' without a move"
                    )
                best = tokens[1]

        if best is None:
            _LOGGER.info("Engine '%s' ran out of time, stopping search", self.name)
            self._process.write_line("stop")
            while self._read().split()[:1] != ["bestmove"]:
                pass

        self._state = EngineState.READY
        if time_left_ms < 0:
            best = None
        return SearchResult(best_move=best, score_cp=score, time_left_ms=time_left_ms)

    # ── Teardown ─────────────────────────────────────────────────────────

    def close(self) -> None:
        """Send ``quit`` if the pipe still works, then terminate the process."""
        if self._state == EngineState.TERMINATED:
            return
        try:
            if not self._process.is_terminated:
                self._process.write_line("quit")
        except TransportError as exc:
            _LOGGER.debug("Could not send quit to '%s': %s", self.name, exc)
        finally:
            self._process.terminate()
            self._state = EngineState.TERMINATED

    def __enter__(self) -> UciEngine:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ── Internal ─────────────────────────────────────────────────────────

    def _read(self) -> str:
        line = self._process.read_line()
        assert line is not None  # blocking read never times out
        return line

    def _require(self, operation: str, *states: EngineState) -> None:
        if self._state not in states:
            raise RuntimeError(
                f"cannot {operation} engine '{self.name}' in state {self._state.name}"
            )


def _now_ms() -> float:
    return time.monotonic() * 1000
