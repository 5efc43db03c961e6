"""Memory provider interface.

A memory is an ordered store of conversation turns shared by reference across
runs of the same agent handle. Strategies only ever read it through
``snapshot`` and write it through ``append``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Tuple

from ..schemas.domain import MemoryTurn


class MemoryProvider(ABC):
    """Abstract base class for conversation memories.

    Implementations must serialize ``append`` against other appends and
    against ``snapshot`` so that a snapshot never observes a partial append.
    """

    @abstractmethod
    def append(self, turn: MemoryTurn) -> MemoryTurn:
        """Store ``turn`` and return the stored copy carrying its sequence number."""

    @abstractmethod
    def snapshot(self) -> Tuple[MemoryTurn, ...]:
        """Return the current turns, oldest first, as an immutable sequence."""

    @abstractmethod
    def clear(self) -> None:
        """Drop every stored turn."""

    @abstractmethod
    def __len__(self) -> int: ...

    def last(self) -> MemoryTurn | None:
        turns = self.snapshot()
        return turns[-1] if turns else None
