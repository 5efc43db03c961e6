"""Conversation memory used to build backend requests.

This package exports:

- ``MemoryProvider``: abstract interface (append / snapshot / clear).
- ``SlidingWindowMemory``: bounded FIFO implementation.
"""

from .base import MemoryProvider
from .sliding_window import SlidingWindowMemory

__all__ = [
    "MemoryProvider",
    "SlidingWindowMemory",
]
