from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import pytest

from autoagents.agent_core.abstraction.base import LLMBackend
from autoagents.agent_core.schemas.domain import BackendResponse, MemoryTurn, ToolCall
from autoagents.agent_core.tools.base import ToolSpec

Step = Union[BackendResponse, BaseException, Callable[[Sequence[MemoryTurn]], BackendResponse]]


class _ScriptedBackend(LLMBackend):
    """Backend double replaying a fixed list of replies and recording every request."""

    def __init__(self, script: Optional[List[Step]] = None, *, default: Optional[Step] = None) -> None:
        self._script = list(script or [])
        self._default = default
        self.calls: List[Dict[str, Any]] = []

    @property
    def name(self) -> str:
        return "scripted"

    async def chat(
        self,
        messages: Sequence[MemoryTurn],
        *,
        tools: Sequence[ToolSpec] = (),
        output_schema: Optional[Dict[str, Any]] = None,
        system_prompt: Optional[str] = None,
    ) -> BackendResponse:
        self.calls.append(
            {
                "messages": tuple(messages),
                "tools": [t.name for t in tools],
                "output_schema": output_schema,
                "system_prompt": system_prompt,
            }
        )
        if self._script:
            step = self._script.pop(0)
        elif self._default is not None:
            step = self._default
        else:
            raise AssertionError("scripted backend ran out of replies")
        if isinstance(step, BaseException):
            raise step
        if callable(step):
            return step(messages)
        return step


def reply(text: str, **kwargs: Any) -> BackendResponse:
    return BackendResponse(text=text, done=True, **kwargs)


def tool_request(*calls: ToolCall, text: Optional[str] = None) -> BackendResponse:
    return BackendResponse(text=text, tool_calls=tuple(calls), done=False)


@pytest.fixture
def scripted_backend():
    """Factory fixture: ``scripted_backend([reply("hi")], default=...)``."""
    return _ScriptedBackend


@pytest.fixture
def replies():
    """Helpers building backend replies: ``replies.text(...)`` and ``replies.tools(...)``."""

    class _Replies:
        text = staticmethod(reply)
        tools = staticmethod(tool_request)

    return _Replies
