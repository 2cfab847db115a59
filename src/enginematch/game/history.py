"""Ply-indexed position history of a single game."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

import chess

from enginematch.core.rules import Rules


@dataclass(slots=True, frozen=True, eq=False)
class PlyRecord:
    """A position together with the move that produced it (None at ply 0)."""

    board: chess.Board
    move: chess.Move | None
    key: int


class PositionHistory:
    """Append-only sequence of positions, ply 0 being the initial one.

    Storage is a slot buffer whose capacity starts at
    :attr:`INITIAL_CAPACITY` and doubles whenever a ply would not fit.
    Indices stay stable for the lifetime of the game.
    """

    INITIAL_CAPACITY = 256

    __slots__ = ("_slots", "_size")

    def __init__(self, initial: chess.Board) -> None:
        self._slots: list[PlyRecord | None] = [None] * self.INITIAL_CAPACITY
        self._size = 0
        self.append(initial, None)

    @property
    def capacity(self) -> int:
        return len(self._slots)

    def reserve(self, ply: int) -> None:
        """Double the capacity until *ply* fits."""
        while ply >= len(self._slots):
            self._slots.extend([None] * len(self._slots))

    def append(self, board: chess.Board, move: chess.Move | None) -> PlyRecord:
        self.reserve(self._size)
        record = PlyRecord(board=board, move=move, key=Rules.repetition_key(board))
        self._slots[self._size] = record
        self._size += 1
        return record

    @property
    def last(self) -> PlyRecord:
        return self[self._size - 1]

    def __len__(self) -> int:
        return self._size

    def __getitem__(self, ply: int) -> PlyRecord:
        if not 0 <= ply < self._size:
            raise IndexError(f"ply {ply} out of range (0..{self._size - 1})")
        record = self._slots[ply]
        assert record is not None
        return record

    def __iter__(self) -> Iterator[PlyRecord]:
        for ply in range(self._size):
            yield self[ply]
