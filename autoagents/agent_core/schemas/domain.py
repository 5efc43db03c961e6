from __future__ import annotations

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Union
from uuid import uuid4

from pydantic import ConfigDict, Field, model_validator

from ...core.config import get_settings
from .base import FrozenSchema


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid4())


class TurnRole(str, Enum):
    system = "system"
    user = "user"
    assistant = "assistant"
    tool = "tool"


class ToolChoiceMode(str, Enum):
    auto = "auto"
    none = "none"
    forced = "forced"


class Task(FrozenSchema):
    """One unit of work submitted to an agent. Never mutated after creation."""

    id: str = Field(default_factory=_new_id)
    prompt: str
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def new(cls, prompt: str, **metadata: Any) -> "Task":
        return cls(prompt=prompt, metadata=dict(metadata))


class ToolCall(FrozenSchema):
    """A tool invocation requested by the model."""

    id: str = Field(default_factory=lambda: f"call_{uuid4().hex[:12]}")
    name: str
    arguments: Union[Mapping[str, Any], str, None] = None


class MemoryTurn(FrozenSchema):
    """One conversation turn.

    ``sequence`` is assigned by the memory on append; turns built by callers
    carry ``-1`` until stored.
    """

    role: TurnRole
    content: Any = None
    sequence: int = -1
    created_at: datetime = Field(default_factory=_utc_now)
    run_id: Optional[str] = None

    tool_calls: Tuple[ToolCall, ...] = ()
    tool_name: Optional[str] = None
    tool_call_id: Optional[str] = None
    is_error: bool = False

    @classmethod
    def user(cls, content: Any, **kwargs: Any) -> "MemoryTurn":
        return cls(role=TurnRole.user, content=content, **kwargs)

    @classmethod
    def assistant(cls, content: Any, **kwargs: Any) -> "MemoryTurn":
        return cls(role=TurnRole.assistant, content=content, **kwargs)

    @classmethod
    def tool(cls, content: Any, *, tool_name: str, **kwargs: Any) -> "MemoryTurn":
        return cls(role=TurnRole.tool, content=content, tool_name=tool_name, **kwargs)

    def text(self) -> str:
        """Render ``content`` as text for backends that only accept strings."""
        if self.content is None:
            return ""
        if isinstance(self.content, str):
            return self.content
        return json.dumps(self.content, ensure_ascii=False, default=str)


class BackendResponse(FrozenSchema):
    """What a backend returned for one request.

    ``done`` is the backend's own completion flag; a response carrying tool
    calls is never treated as final by the iterative strategy.
    """

    text: Optional[str] = None
    structured: Any = None
    tool_calls: Tuple[ToolCall, ...] = ()
    done: bool = True
    usage: Dict[str, Any] = Field(default_factory=dict)

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)


class ToolChoice(FrozenSchema):
    """Which registered tools are offered to the backend."""

    mode: ToolChoiceMode = ToolChoiceMode.auto
    name: Optional[str] = None

    @model_validator(mode="after")
    def _check_name(self) -> "ToolChoice":
        if self.mode is ToolChoiceMode.forced and not self.name:
            raise ValueError("forced tool choice requires a tool name")
        if self.mode is not ToolChoiceMode.forced and self.name is not None:
            raise ValueError("only a forced tool choice may name a tool")
        return self

    @classmethod
    def auto(cls) -> "ToolChoice":
        return cls(mode=ToolChoiceMode.auto)

    @classmethod
    def none(cls) -> "ToolChoice":
        return cls(mode=ToolChoiceMode.none)

    @classmethod
    def forced(cls, name: str) -> "ToolChoice":
        return cls(mode=ToolChoiceMode.forced, name=name)


class ExecutorConfig(FrozenSchema):
    """Immutable per-agent execution settings.

    ``max_iterations`` is range-checked by the builder, not here, so that a
    misconfiguration surfaces as a build error.
    """

    max_iterations: int = Field(default_factory=lambda: get_settings().default_max_iterations)
    tool_choice: ToolChoice = Field(default_factory=ToolChoice.auto)
    require_structured_output: bool = False
    system_prompt: Optional[str] = None


class Output(FrozenSchema):
    """A terminal result or a streamed chunk.

    ``done=False`` marks a non-terminal streamed chunk. A terminal chunk of a
    failed stream carries the exception in ``error``.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
        frozen=True,
        arbitrary_types_allowed=True,
    )

    response: str = ""
    structured: Any = None
    done: bool = True
    iteration: int = 0
    error: Optional[BaseException] = Field(default=None, exclude=True)

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def error_kind(self) -> Optional[str]:
        if self.error is None:
            return None
        return getattr(self.error, "kind", type(self.error).__name__)
