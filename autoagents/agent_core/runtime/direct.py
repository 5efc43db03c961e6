from __future__ import annotations

"""Single-shot execution strategy.

``DirectExecutor`` sends exactly one backend request built from the memory
snapshot plus the task prompt, records the exchange in memory and returns a
terminal ``Output``. It offers no tools to the backend and never loops; tool
calls in the reply are ignored.
"""

import logging
from typing import Optional

from ..schemas.domain import ExecutorConfig, MemoryTurn, Output, Task
from .base import AgentExecutor, assistant_turn, decode_structured, output_schema_json, request_backend
from .context import Context

logger = logging.getLogger(__name__)


class DirectExecutor(AgentExecutor):
    """Answer a task with one backend call."""

    iterative = False

    def __init__(self, config: Optional[ExecutorConfig] = None) -> None:
        self._config = config or ExecutorConfig()

    def config(self) -> ExecutorConfig:
        return self._config

    async def execute(self, task: Task, context: Context) -> Output:
        config = self._config
        prompt = MemoryTurn.user(task.prompt, run_id=context.run_id)
        messages = context.memory.snapshot() + (prompt,)

        await context.hooks.emit("on_backend_call", context, messages)
        response = await request_backend(
            context,
            messages,
            output_schema=output_schema_json(context.output_schema),
            system_prompt=config.system_prompt,
        )
        await context.hooks.emit("on_backend_response", context, response)
        if response.has_tool_calls:
            logger.debug(f"Ignoring {len(response.tool_calls)} tool call(s) in direct run {context.run_id}")
            # an unanswered call would be rejected by providers on the next request
            response = response.model_copy(update={"tool_calls": ()})

        context.memory.append(prompt)
        context.memory.append(assistant_turn(response, run_id=context.run_id))

        structured = decode_structured(
            context.output_schema,
            response,
            required=config.require_structured_output,
        )
        return Output(response=response.text or "", structured=structured, done=True, iteration=0)
