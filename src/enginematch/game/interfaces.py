"""Game-layer configuration types and the engine-player protocol.

``Game`` depends on :class:`IEnginePlayer`, not on the concrete UCI client,
so the orchestrator can be driven by scripted players in tests.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from enginematch.engine.search import SearchLimits

if TYPE_CHECKING:
    from enginematch.engine.search import SearchResult


# ── Time control ─────────────────────────────────────────────────────────────


class TimeControl:
    """Immutable time-control definition.

    Args:
        initial_ms: Starting time per engine.
        increment_ms: Per-move increment (Fischer).
    """

    __slots__ = ("initial_ms", "increment_ms")

    def __init__(self, initial_ms: float, increment_ms: float = 0.0) -> None:
        if initial_ms <= 0 or increment_ms < 0:
            raise ValueError(f"invalid time control {initial_ms}+{increment_ms}")
        self.initial_ms = initial_ms
        self.increment_ms = increment_ms

    @classmethod
    def unlimited(cls) -> TimeControl:
        """No time limit."""
        return cls(math.inf, 0)

    @property
    def is_unlimited(self) -> bool:
        return math.isinf(self.initial_ms)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimeControl):
            return NotImplemented
        return (self.initial_ms, self.increment_ms) == (
            other.initial_ms,
            other.increment_ms,
        )

    def __hash__(self) -> int:
        return hash((self.initial_ms, self.increment_ms))

    def __repr__(self) -> str:
        if self.is_unlimited:
            return "TimeControl(unlimited)"
        secs = self.initial_ms / 1000
        if self.increment_ms:
            return f"TimeControl({secs:g}s+{self.increment_ms / 1000:g}s)"
        return f"TimeControl({secs:g}s)"


# ── Tournament rules ─────────────────────────────────────────────────────────


@dataclass(slots=True, frozen=True)
class AdjudicationConfig:
    """Evaluation-based early termination. A count of 0 disables a rule.

    ``draw_count`` is counted in ply pairs: both engines must report
    ``|score| <= draw_score`` for ``2 * draw_count`` consecutive plies.
    ``resign_count`` is counted in plies of the same engine with
    ``score <= -resign_score``.
    """

    draw_count: int = 0
    draw_score: int = 0
    resign_count: int = 0
    resign_score: int = 0


@dataclass(slots=True, frozen=True)
class GameOptions:
    """Per-game settings. ``limits`` is indexed by engine seat (0 moves first)."""

    chess960: bool = False
    adjudication: AdjudicationConfig = field(default_factory=AdjudicationConfig)
    time_control: TimeControl = field(default_factory=TimeControl.unlimited)
    limits: tuple[SearchLimits, SearchLimits] = (SearchLimits(), SearchLimits())
    record_samples: bool = False


# ── Player protocol ──────────────────────────────────────────────────────────


class IEnginePlayer(Protocol):
    """What the orchestrator needs from an engine."""

    @property
    def name(self) -> str: ...

    def new_game(self, *, chess960: bool = False) -> None: ...

    def search(
        self,
        position_command: str,
        go_command: str,
        time_left_ms: float,
    ) -> SearchResult: ...
