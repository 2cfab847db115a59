"""Fatal engine failures.

Illegal moves and time losses are not errors: they end the current game
through a termination code. The exceptions here abort the run.
"""

from __future__ import annotations


class EngineError(Exception):
    """An engine can no longer be used safely."""

    def __init__(self, engine: str, operation: str, detail: str) -> None:
        super().__init__(f"{operation} failed for '{engine}': {detail}")
        self.engine = engine
        self.operation = operation
        self.detail = detail


class TransportError(EngineError):
    """Process spawn, pipe or stream failure."""


class ProtocolViolation(EngineError):
    """Malformed or missing mandatory protocol field."""
