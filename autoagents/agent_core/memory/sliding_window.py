"""Sliding-window memory.

Keeps at most ``capacity`` turns; appending to a full window evicts the
oldest turn first. Snapshots are tuples of frozen turns, so a run reading a
snapshot is unaffected by evictions that happen after it was taken.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections import deque
from typing import Deque, Tuple

from ..schemas.domain import MemoryTurn
from .base import MemoryProvider

logger = logging.getLogger(__name__)


class SlidingWindowMemory(MemoryProvider):
    """Bounded FIFO memory of conversation turns.

    Attributes:
        capacity: Maximum number of turns retained.
    """

    def __init__(self, capacity: int) -> None:
        """
        Initialize an empty window.

        Args:
            capacity: Maximum number of turns, must be at least 1.

        Raises:
            ValueError: If ``capacity`` is smaller than 1.
        """
        if capacity < 1:
            raise ValueError(f"memory capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._turns: Deque[MemoryTurn] = deque(maxlen=capacity)
        self._sequence = itertools.count()
        self._lock = threading.Lock()

    def append(self, turn: MemoryTurn) -> MemoryTurn:
        with self._lock:
            stored = turn.model_copy(update={"sequence": next(self._sequence)})
            if len(self._turns) == self.capacity:
                evicted = self._turns[0]
                logger.debug(f"Memory window full (capacity={self.capacity}); evicting turn #{evicted.sequence}")
            self._turns.append(stored)
            return stored

    def snapshot(self) -> Tuple[MemoryTurn, ...]:
        with self._lock:
            return tuple(self._turns)

    def clear(self) -> None:
        with self._lock:
            self._turns.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._turns)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(capacity={self.capacity}, size={len(self)})"
