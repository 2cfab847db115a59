"""Shared engine search models."""

from __future__ import annotations

from dataclasses import dataclass

# Mate scores saturate to the 32-bit extremes.
SCORE_MAX = 2**31 - 1
SCORE_MIN = -(2**31)


@dataclass(slots=True, frozen=True)
class SearchLimits:
    """Per-engine search constraints sent with every ``go``.

    Unset (``None``) limits are left out; any subset may be active.
    """

    nodes: int | None = None
    depth: int | None = None
    movetime_ms: int | None = None


@dataclass(slots=True, frozen=True)
class ClockState:
    """Both sides' clocks as reported to the engine on ``go``."""

    white_ms: int
    black_ms: int
    white_inc_ms: int = 0
    black_inc_ms: int = 0


@dataclass(slots=True, frozen=True)
class SearchResult:
    """Result of one ``go`` exchange.

    ``best_move`` is the engine's move text, or *None* when the engine ran
    out of time and the search was stopped.
    """

    best_move: str | None
    score_cp: int
    time_left_ms: float

    @property
    def timed_out(self) -> bool:
        return self.best_move is None
