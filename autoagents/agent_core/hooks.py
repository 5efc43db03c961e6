"""Lifecycle hooks.

``AgentHooks`` declares one coroutine per lifecycle point, each a no-op by
default; agents inherit it and override the points they care about. Hooks
observe the run and never alter engine state.

``HookDispatcher`` is what the engine actually calls. It isolates hook
failures: an exception raised by a hook is logged with the hook point and
run id, recorded on ``HookDispatcher.errors`` and otherwise ignored, so a
faulty observer can never abort a run.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Optional, Sequence

if TYPE_CHECKING:
    from .runtime.context import Context
    from .schemas.domain import BackendResponse, MemoryTurn, Output, Task, ToolCall
    from .tools.base import ToolResult

logger = logging.getLogger(__name__)


class AgentHooks:
    """Observer interface with a no-op default for every lifecycle point."""

    async def on_task_start(self, task: "Task", context: "Context") -> None:
        """Called once before the strategy starts."""

    async def on_backend_call(self, context: "Context", messages: Sequence["MemoryTurn"]) -> None:
        """Called right before a backend request is sent."""

    async def on_backend_response(self, context: "Context", response: "BackendResponse") -> None:
        """Called after the backend answered, before the reply is interpreted."""

    async def on_tool_call(self, context: "Context", call: "ToolCall") -> None:
        """Called before a requested tool call is dispatched."""

    async def on_tool_result(self, context: "Context", call: "ToolCall", result: "ToolResult") -> None:
        """Called after a tool call resolved, successfully or not."""

    async def on_task_complete(self, task: "Task", context: "Context", output: "Output") -> None:
        """Called once after the run produced its final output."""

    async def on_task_error(self, task: "Task", context: "Context", error: BaseException) -> None:
        """Called once when the run fails."""


HOOK_POINTS = (
    "on_task_start",
    "on_backend_call",
    "on_backend_response",
    "on_tool_call",
    "on_tool_result",
    "on_task_complete",
    "on_task_error",
)


@dataclass(frozen=True)
class HookFailure:
    """A hook exception captured by the dispatcher."""

    point: str
    error: Exception


class HookDispatcher:
    """Invoke an ``AgentHooks`` object with failure isolation."""

    def __init__(self, hooks: Optional[AgentHooks], *, run_id: str) -> None:
        self._hooks = hooks
        self._run_id = run_id
        self.errors: List[HookFailure] = []

    async def emit(self, point: str, *args: Any) -> None:
        if point not in HOOK_POINTS:
            raise ValueError(f"unknown hook point: {point}")
        if self._hooks is None:
            return
        fn = getattr(self._hooks, point, None)
        if fn is None:
            return
        try:
            result = fn(*args)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            self.errors.append(HookFailure(point=point, error=e))
            logger.warning(
                f"Hook '{point}' of {type(self._hooks).__name__} failed (run_id={self._run_id}): {e}",
                exc_info=True,
            )
