"""Agent assembly and the runnable handle.

``AgentBuilder`` collects a backend, a memory and extra tools for an agent
and validates them once, in ``build``. Everything that can be checked before
a run is checked there:

- a backend must be configured, or ``default_model`` set (``MissingBackendError``),
- an iterative executor needs ``max_iterations >= 1`` (``InvalidConfigError``),
- a forced tool choice must name a registered tool (``InvalidConfigError``),
- a required structured output needs an output schema (``InvalidConfigError``),
- tool names must be unique (``DuplicateToolError``).

``AgentHandle`` is the immutable result. ``run`` and ``run_stream`` may be
called repeatedly and concurrently; each call gets its own ``Context`` over
the shared memory, registry and backend.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import aclosing
from typing import Any, AsyncIterator, Iterable, List, Optional, Union

from ..core.config import get_settings
from .abstraction.base import BackendConfig, LLMBackend
from .abstraction.factory import build_default_factory
from .errors import InvalidConfigError, MissingBackendError
from .hooks import HookDispatcher
from .memory.base import MemoryProvider
from .memory.sliding_window import SlidingWindowMemory
from .runtime.base import AgentExecutor
from .runtime.context import Context
from .runtime.direct import DirectExecutor
from .schemas.domain import Output, Task, ToolChoiceMode
from .tools.base import ToolSpec
from .tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

TaskLike = Union[Task, str]


class AgentBuilder:
    """Fluent builder producing an ``AgentHandle``.

    Usage:
        handle = (
            AgentBuilder(agent, IterativeExecutor())
            .llm(backend)
            .memory(SlidingWindowMemory(10))
            .build()
        )
    """

    def __init__(self, agent: Any, executor: Optional[AgentExecutor] = None) -> None:
        self._agent = agent
        self._executor = executor
        self._backend: Optional[LLMBackend] = None
        self._memory: Optional[MemoryProvider] = None
        self._tools: List[ToolSpec] = []

    def llm(self, backend: Union[LLMBackend, BackendConfig, str], *, framework: Optional[str] = None) -> "AgentBuilder":
        """Set the backend client.

        Accepts a ready ``LLMBackend``, a ``BackendConfig`` or a bare model
        identifier; the latter two are built through the default
        ``BackendFactory``.
        """
        if isinstance(backend, str):
            backend = BackendConfig(model=backend)
        if isinstance(backend, BackendConfig):
            backend = build_default_factory().create(backend, framework=framework)
        self._backend = backend
        return self

    def memory(self, memory: MemoryProvider) -> "AgentBuilder":
        self._memory = memory
        return self

    def tools(self, tools: Iterable[ToolSpec]) -> "AgentBuilder":
        self._tools.extend(tools)
        return self

    def tool(self, tool: ToolSpec) -> "AgentBuilder":
        self._tools.append(tool)
        return self

    def build(self) -> "AgentHandle":
        """Validate the collected parts and assemble the handle.

        Raises:
            MissingBackendError: If no backend was configured and no
                ``default_model`` is set.
            InvalidConfigError: If the executor configuration cannot run.
            DuplicateToolError: If two tools share a name.
        """
        agent = self._agent
        name = str(getattr(agent, "name", type(agent).__name__))
        executor = self._executor
        if executor is None:
            executor = agent if isinstance(agent, AgentExecutor) else DirectExecutor()

        if self._backend is None:
            default_model = get_settings().default_model
            if not default_model:
                raise MissingBackendError(name)
            logger.debug(f"Agent '{name}' has no backend; using default model '{default_model}'")
            self.llm(default_model)

        config = executor.config()
        if executor.iterative and config.max_iterations < 1:
            raise InvalidConfigError(f"Agent '{name}': max_iterations must be >= 1, got {config.max_iterations}")

        registry = ToolRegistry()
        registry.update(getattr(agent, "tools", ()))
        registry.update(self._tools)

        choice = config.tool_choice
        if choice.mode is ToolChoiceMode.forced and choice.name not in registry:
            raise InvalidConfigError(f"Agent '{name}': forced tool '{choice.name}' is not registered")
        if config.require_structured_output and getattr(agent, "output_schema", None) is None:
            raise InvalidConfigError(f"Agent '{name}': structured output is required but no output schema is declared")
        registry.freeze()

        memory = self._memory if self._memory is not None else SlidingWindowMemory(get_settings().default_memory_window)
        logger.debug(
            f"Built agent '{name}' with {type(executor).__name__}, backend={self._backend.name}, tools={registry.names()}"
        )
        return AgentHandle(agent=agent, executor=executor, backend=self._backend, memory=memory, tools=registry)


class AgentHandle:
    """Immutable, runnable agent."""

    __slots__ = ("_agent", "_executor", "_backend", "_memory", "_tools")

    def __init__(
        self,
        *,
        agent: Any,
        executor: AgentExecutor,
        backend: LLMBackend,
        memory: MemoryProvider,
        tools: ToolRegistry,
    ) -> None:
        object.__setattr__(self, "_agent", agent)
        object.__setattr__(self, "_executor", executor)
        object.__setattr__(self, "_backend", backend)
        object.__setattr__(self, "_memory", memory)
        object.__setattr__(self, "_tools", tools)

    def __setattr__(self, key: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def name(self) -> str:
        return str(getattr(self._agent, "name", type(self._agent).__name__))

    @property
    def agent(self) -> Any:
        return self._agent

    @property
    def executor(self) -> AgentExecutor:
        return self._executor

    @property
    def backend(self) -> LLMBackend:
        return self._backend

    @property
    def memory(self) -> MemoryProvider:
        return self._memory

    @property
    def tools(self) -> ToolRegistry:
        return self._tools

    def new_context(self, *, memory: Optional[MemoryProvider] = None) -> Context:
        """Create a fresh run context.

        Pass ``memory`` to isolate a run from the handle's shared memory. The
        context's ``hooks.errors`` collects hook failures of the run.
        """
        run_id = str(uuid.uuid4())
        return Context(
            run_id=run_id,
            memory=memory if memory is not None else self._memory,
            tools=self._tools,
            backend=self._backend,
            hooks=HookDispatcher(self._agent, run_id=run_id),
            agent=self._agent,
        )

    async def run(self, task: TaskLike, *, context: Optional[Context] = None) -> Output:
        """Execute ``task`` and return its terminal output.

        Raises:
            ExecutionError: ``BackendError``, ``StructuredOutputError`` or
                ``IterationLimitExceeded`` from the built-in executors.
            Exception: Errors of custom executors propagate unchanged.
            ValueError: If ``context`` was already used by a finished run.
        """
        task = _as_task(task)
        context = self._claim(context)
        logger.info(f"Agent '{self.name}' run {context.run_id} started (task_id={task.id})")
        await context.hooks.emit("on_task_start", task, context)
        try:
            output = await self._executor.execute(task, context)
        except Exception as e:
            logger.info(f"Agent '{self.name}' run {context.run_id} failed: {e}")
            await context.hooks.emit("on_task_error", task, context, e)
            raise
        finally:
            context.scope.close()
        await context.hooks.emit("on_task_complete", task, context, output)
        logger.info(f"Agent '{self.name}' run {context.run_id} completed")
        return output

    async def run_stream(self, task: TaskLike, *, context: Optional[Context] = None) -> AsyncIterator[Output]:
        """Execute ``task`` and yield its outputs as they are produced.

        The last chunk has ``done=True``. A failed run ends with a chunk whose
        ``error`` carries the exception instead of raising. Stopping iteration
        (or closing the generator) cancels the run. A context that was already
        used by a finished run is rejected with ``ValueError``.
        """
        task = _as_task(task)
        context = self._claim(context)
        logger.info(f"Agent '{self.name}' stream {context.run_id} started (task_id={task.id})")
        await context.hooks.emit("on_task_start", task, context)
        try:
            async with aclosing(self._executor.execute_stream(task, context)) as chunks:
                async for chunk in chunks:
                    if chunk.done:
                        await context.hooks.emit("on_task_complete", task, context, chunk)
                        logger.info(f"Agent '{self.name}' stream {context.run_id} completed")
                    yield chunk
        except Exception as e:
            logger.info(f"Agent '{self.name}' stream {context.run_id} failed: {e}")
            await context.hooks.emit("on_task_error", task, context, e)
            yield Output(done=True, error=e)
            return
        finally:
            context.scope.close()

    def _claim(self, context: Optional[Context]) -> Context:
        # A context serves exactly one run; its scope is closed when that run ends.
        if context is None:
            return self.new_context()
        if context.scope.closed:
            raise ValueError(f"Context {context.run_id} was already used by a finished run; call new_context()")
        return context

    def __repr__(self) -> str:
        return f"AgentHandle(name={self.name!r}, executor={type(self._executor).__name__})"


def _as_task(task: TaskLike) -> Task:
    return Task.new(task) if isinstance(task, str) else task
