from __future__ import annotations

"""Executor interface and the helpers both built-in strategies share."""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Optional, Sequence, Type

from pydantic import BaseModel, ValidationError

from ..errors import BackendError, StructuredOutputError
from ..schemas.domain import BackendResponse, ExecutorConfig, MemoryTurn, Output, Task
from ..tools.base import ToolSpec
from .context import Context

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"^```[a-zA-Z0-9_-]*\s*\n(.*)\n```\s*$", re.DOTALL)


class AgentExecutor(ABC):
    """Abstract base class for execution strategies.

    An executor turns a ``Task`` plus a ``Context`` into an ``Output``. It is
    shared by every run of a handle, so implementations keep run state in the
    ``Context`` or on the call stack, never on ``self``.

    Agents may implement this interface themselves; the builder then uses the
    agent as its own executor.
    """

    #: Whether the executor loops over backend calls. Iterative executors get
    #: their ``max_iterations`` checked at build time.
    iterative: bool = False

    def config(self) -> ExecutorConfig:
        return ExecutorConfig()

    @abstractmethod
    async def execute(self, task: Task, context: Context) -> Output:
        """Run ``task`` to completion and return the terminal output."""

    async def execute_stream(self, task: Task, context: Context) -> AsyncIterator[Output]:
        """Yield the run's outputs; the default yields the single result of ``execute``."""
        yield await self.execute(task, context)


async def request_backend(
    context: Context,
    messages: Sequence[MemoryTurn],
    *,
    tools: Sequence[ToolSpec] = (),
    output_schema: Optional[dict] = None,
    system_prompt: Optional[str] = None,
) -> BackendResponse:
    """Send one backend request, converting any failure into ``BackendError``."""
    backend = context.backend
    logger.debug(
        f"Backend request to {backend.name} (run_id={context.run_id}, messages={len(messages)}, tools={len(tools)})"
    )
    try:
        return await backend.chat(
            messages,
            tools=tools,
            output_schema=output_schema,
            system_prompt=system_prompt,
        )
    except BackendError:
        raise
    except Exception as e:
        logger.error(f"Backend {backend.name} failed (run_id={context.run_id}): {e}")
        raise BackendError(backend.name, e) from e


def output_schema_json(schema: Optional[Type[BaseModel]]) -> Optional[dict]:
    return schema.model_json_schema() if schema is not None else None


def decode_structured(
    schema: Optional[Type[BaseModel]],
    response: BackendResponse,
    *,
    required: bool,
) -> Any:
    """Validate a final answer against the agent's output schema.

    The backend's structured value is preferred; otherwise the text is parsed
    as JSON, with a surrounding markdown code fence tolerated.

    Returns:
        The validated model instance, ``response.structured`` when no schema
        is declared, or ``None`` when validation fails and is not required.

    Raises:
        StructuredOutputError: If validation fails and ``required`` is set.
    """
    if schema is None:
        return response.structured

    raw: Any = response.structured if response.structured is not None else response.text
    try:
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            raise ValueError("response is empty")
        if isinstance(raw, str):
            return schema.model_validate(json.loads(_strip_fence(raw)))
        return schema.model_validate(raw)
    except (ValidationError, ValueError) as e:
        # json.JSONDecodeError is a ValueError
        if required:
            raise StructuredOutputError(schema.__name__, _diagnostic(e), raw=raw) from e
        logger.debug(f"Final answer does not match {schema.__name__}; returning text only: {e}")
        return None


def _strip_fence(text: str) -> str:
    text = text.strip()
    match = _FENCE.match(text)
    return match.group(1) if match else text


def _diagnostic(error: Exception) -> str:
    if isinstance(error, ValidationError):
        return "; ".join(
            f"{'.'.join(str(p) for p in item['loc'])}: {item['msg']}" if item["loc"] else item["msg"]
            for item in error.errors()
        )
    return str(error)


def assistant_turn(response: BackendResponse, *, run_id: str) -> MemoryTurn:
    content: Any = response.text if response.text is not None else response.structured
    return MemoryTurn.assistant(content if content is not None else "", tool_calls=response.tool_calls, run_id=run_id)
