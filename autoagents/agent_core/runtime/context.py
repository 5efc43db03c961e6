from __future__ import annotations

"""Per-run execution context.

A ``Context`` is created by the handle for every call to ``run`` or
``run_stream`` and handed to the executor. It bundles shared references to
the agent's memory, tool registry and backend client, plus the run-local
hook dispatcher and cancellation scope. Every tool invocation of a run sees
the same ``Context``.
"""

from dataclasses import dataclass, field
from typing import Any

from ..abstraction.base import LLMBackend
from ..hooks import HookDispatcher
from ..memory.base import MemoryProvider
from ..tools.registry import ToolRegistry


@dataclass
class RunScope:
    """Run-local cancellation state.

    ``closed`` is set once the consumer of a streamed run stops pulling. A
    backend reply that lands after that point is discarded instead of being
    appended to memory.
    """

    closed: bool = False

    def close(self) -> None:
        self.closed = True


@dataclass(frozen=True)
class Context:
    """Execution context passed to executors.

    Attributes
    ----------
    run_id:
        Identifier of the current run, echoed on memory turns and in logs.
    memory:
        Conversation memory, shared by reference across runs of a handle.
    tools:
        Frozen tool registry of the handle.
    backend:
        LLM backend client of the handle.
    hooks:
        Dispatcher that forwards lifecycle events to the agent.
    agent:
        The agent the run belongs to; executors read its output schema.
    """

    run_id: str
    memory: MemoryProvider
    tools: ToolRegistry
    backend: LLMBackend
    hooks: HookDispatcher
    agent: Any = None
    scope: RunScope = field(default_factory=RunScope)

    @property
    def output_schema(self) -> Any:
        return getattr(self.agent, "output_schema", None)
