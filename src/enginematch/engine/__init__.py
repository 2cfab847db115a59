"""Engine package: subprocess transport and UCI protocol client."""

from enginematch.engine.errors import EngineError, ProtocolViolation, TransportError
from enginematch.engine.process import EngineProcess, TrafficLog
from enginematch.engine.search import (
    SCORE_MAX,
    SCORE_MIN,
    ClockState,
    SearchLimits,
    SearchResult,
)
from enginematch.engine.uci import (
    EngineState,
    UciEngine,
    build_go_command,
    parse_info_score,
)

__all__ = [
    "SCORE_MAX",
    "SCORE_MIN",
    "ClockState",
    "EngineError",
    "EngineProcess",
    "EngineState",
    "ProtocolViolation",
    "SearchLimits",
    "SearchResult",
    "TrafficLog",
    "TransportError",
    "UciEngine",
    "build_go_command",
    "parse_info_score",
]
