"""Agent execution engine.

Design overview
---------------

A run turns a ``Task`` into an ``Output`` by coordinating four shared parts,
bound together once by ``AgentBuilder``:

- ``SlidingWindowMemory``: bounded, ordered conversation turns.
- ``ToolRegistry``: schema-validated tools the model may call mid-run.
- ``LLMBackend``: the language-model client.
- ``AgentExecutor``: the strategy, either ``DirectExecutor`` (one backend
  call) or ``IterativeExecutor`` (LangGraph tool-use loop).

Every ``run``/``run_stream`` call gets a fresh ``Context`` over those parts.
Hooks declared on the agent observe the run without affecting it.

Failures
--------

Tool failures are fed back to the model as tool turns. Backend failures,
structured-output mismatches and an exhausted iteration budget end the run:
``run`` raises them, ``run_stream`` ends with an error-bearing chunk.

Typical usage
-------------

1. Subclass ``BaseAgent`` (and optionally ``AgentExecutor``).
2. ``AgentBuilder(agent, IterativeExecutor()).llm(backend).build()``.
3. ``await handle.run(Task.new("..."))``.
"""

from .abstraction import BackendConfig, BackendFactory, LLMBackend, PydanticAIBackend
from .agent import AgentMetadata, BaseAgent
from .builder import AgentBuilder, AgentHandle
from .errors import (
    AutoAgentsError,
    BackendError,
    BuildError,
    DuplicateToolError,
    ExecutionError,
    InvalidConfigError,
    IterationLimitExceeded,
    MissingBackendError,
    RegistryFrozenError,
    StructuredOutputError,
    ToolArgumentError,
    ToolError,
    ToolExecutionError,
    UnknownToolError,
)
from .hooks import AgentHooks, HookDispatcher
from .memory import MemoryProvider, SlidingWindowMemory
from .runtime import AgentExecutor, Context, DirectExecutor, IterativeExecutor
from .schemas.domain import (
    BackendResponse,
    ExecutorConfig,
    MemoryTurn,
    Output,
    Task,
    ToolCall,
    ToolChoice,
    TurnRole,
)
from .tools import ToolRegistry, ToolResult, ToolSpec

__all__ = [
    "AgentBuilder",
    "AgentHandle",
    "BaseAgent",
    "AgentMetadata",
    "AgentHooks",
    "HookDispatcher",
    "AgentExecutor",
    "DirectExecutor",
    "IterativeExecutor",
    "Context",
    "MemoryProvider",
    "SlidingWindowMemory",
    "ToolRegistry",
    "ToolResult",
    "ToolSpec",
    "BackendConfig",
    "BackendFactory",
    "LLMBackend",
    "PydanticAIBackend",
    "Task",
    "MemoryTurn",
    "TurnRole",
    "ToolCall",
    "ToolChoice",
    "ExecutorConfig",
    "BackendResponse",
    "Output",
    "AutoAgentsError",
    "BuildError",
    "MissingBackendError",
    "InvalidConfigError",
    "RegistryFrozenError",
    "ToolError",
    "DuplicateToolError",
    "UnknownToolError",
    "ToolArgumentError",
    "ToolExecutionError",
    "ExecutionError",
    "BackendError",
    "StructuredOutputError",
    "IterationLimitExceeded",
]
