"""Execution strategies.

- ``AgentExecutor``: interface every strategy implements.
- ``DirectExecutor``: one backend call per task.
- ``IterativeExecutor``: LangGraph tool-use loop.
- ``Context``: per-run bundle handed to executors.
"""

from .base import AgentExecutor
from .context import Context, RunScope
from .direct import DirectExecutor
from .iterative import IterativeExecutor

__all__ = [
    "AgentExecutor",
    "Context",
    "RunScope",
    "DirectExecutor",
    "IterativeExecutor",
]
