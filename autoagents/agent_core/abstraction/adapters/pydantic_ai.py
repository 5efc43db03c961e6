"""Pydantic AI backend adapter.

This module implements ``LLMBackend`` on top of Pydantic AI's direct model
request API, so any model Pydantic AI supports (OpenAI, Anthropic, Groq,
Gemini, local test models, ...) can drive the execution strategies.

Memory turns are translated to Pydantic AI messages:

- system/user/tool turns become parts of a ``ModelRequest``
  (consecutive request parts are merged into one request),
- assistant turns become a ``ModelResponse`` with text and tool-call parts.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Set, Union

from pydantic_ai.direct import model_request
from pydantic_ai.messages import (
    ModelMessage,
    ModelRequest,
    ModelRequestPart,
    ModelResponse,
    ModelResponsePart,
    SystemPromptPart,
    TextPart,
    ToolCallPart,
    ToolReturnPart,
    UserPromptPart,
)
from pydantic_ai.models import Model, ModelRequestParameters
from pydantic_ai.tools import ToolDefinition

from ...schemas.domain import BackendResponse, MemoryTurn, ToolCall, TurnRole
from ...tools.base import ToolSpec
from ..base import BackendConfig, LLMBackend

logger = logging.getLogger(__name__)

STRUCTURED_OUTPUT_INSTRUCTION = (
    "When you give your final answer, reply with a single JSON object that validates "
    "against this JSON schema and nothing else:\n{schema}"
)


class PydanticAIBackend(LLMBackend):
    """Adapter for the Pydantic AI framework.

    Attributes:
        _model: Model instance or Pydantic AI model identifier
        _settings: Model settings forwarded on every request
    """

    def __init__(
        self,
        model: Union[Model, str],
        *,
        model_settings: Optional[Dict[str, Any]] = None,
        name: Optional[str] = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            model: A Pydantic AI ``Model`` or an identifier such as 'anthropic:claude-sonnet-4-20250514'
            model_settings: Settings such as temperature, max_tokens and timeout
            name: Optional display name, defaults to the model identifier
        """
        self._model = model
        self._settings = dict(model_settings or {})
        self._name = name or (model if isinstance(model, str) else getattr(model, "model_name", type(model).__name__))

    @classmethod
    def from_config(cls, config: BackendConfig) -> "PydanticAIBackend":
        """Build the adapter from a ``BackendConfig``."""
        settings: Dict[str, Any] = {}
        if config.temperature is not None:
            settings["temperature"] = config.temperature
        if config.max_tokens is not None:
            settings["max_tokens"] = config.max_tokens
        if config.timeout is not None:
            settings["timeout"] = config.timeout
        settings.update(config.model_settings)
        logger.debug(f"Built model settings for {config.model}: {list(settings.keys())}")
        return cls(config.model, model_settings=settings)

    @property
    def name(self) -> str:
        return str(self._name)

    async def chat(
        self,
        messages: Sequence[MemoryTurn],
        *,
        tools: Sequence[ToolSpec] = (),
        output_schema: Optional[Dict[str, Any]] = None,
        system_prompt: Optional[str] = None,
    ) -> BackendResponse:
        instructions = _instructions(system_prompt, output_schema)
        history = to_model_messages(messages, system_prompt=instructions)
        params = ModelRequestParameters(function_tools=[to_tool_definition(t) for t in tools])

        logger.debug(f"Requesting {self.name} with {len(history)} messages and {len(tools)} tools")
        response = await model_request(
            self._model,
            history,
            model_settings=self._settings or None,  # type: ignore[arg-type]
            model_request_parameters=params,
        )
        return from_model_response(response)


def _instructions(system_prompt: Optional[str], output_schema: Optional[Dict[str, Any]]) -> Optional[str]:
    blocks: List[str] = []
    if system_prompt:
        blocks.append(system_prompt)
    if output_schema:
        blocks.append(STRUCTURED_OUTPUT_INSTRUCTION.format(schema=json.dumps(output_schema, ensure_ascii=False)))
    return "\n\n".join(blocks) or None


def to_tool_definition(spec: ToolSpec) -> ToolDefinition:
    return ToolDefinition(
        name=spec.name,
        description=spec.description or None,
        parameters_json_schema=spec.json_schema(),
    )


def to_model_messages(turns: Sequence[MemoryTurn], *, system_prompt: Optional[str] = None) -> List[ModelMessage]:
    """Translate memory turns into Pydantic AI messages.

    Tool turns whose originating call was evicted from the window are dropped:
    providers reject a tool return without its matching call.
    """
    messages: List[ModelMessage] = []
    pending: List[ModelRequestPart] = []
    if system_prompt:
        pending.append(SystemPromptPart(content=system_prompt))
    seen_calls: Set[str] = set()

    def flush() -> None:
        if pending:
            messages.append(ModelRequest(parts=list(pending)))
            pending.clear()

    for turn in turns:
        if turn.role is TurnRole.assistant:
            flush()
            parts: List[ModelResponsePart] = []
            if turn.content is not None and turn.text():
                parts.append(TextPart(content=turn.text()))
            for call in turn.tool_calls:
                seen_calls.add(call.id)
                parts.append(ToolCallPart(tool_name=call.name, args=_call_args(call), tool_call_id=call.id))
            if parts:
                messages.append(ModelResponse(parts=parts))
        elif turn.role is TurnRole.tool:
            if turn.tool_call_id is None or turn.tool_call_id not in seen_calls:
                logger.debug(f"Dropping tool turn #{turn.sequence} without a matching call in the window")
                continue
            pending.append(
                ToolReturnPart(tool_name=turn.tool_name or "", content=turn.content, tool_call_id=turn.tool_call_id)
            )
        elif turn.role is TurnRole.system:
            pending.append(SystemPromptPart(content=turn.text()))
        else:
            pending.append(UserPromptPart(content=turn.text()))
    flush()
    return messages


def _call_args(call: ToolCall) -> Union[str, Dict[str, Any], None]:
    if call.arguments is None or isinstance(call.arguments, str):
        return call.arguments
    return dict(call.arguments)


def from_model_response(response: ModelResponse) -> BackendResponse:
    texts: List[str] = []
    calls: List[ToolCall] = []
    for part in response.parts:
        if isinstance(part, TextPart):
            texts.append(part.content)
        elif isinstance(part, ToolCallPart):
            calls.append(ToolCall(id=part.tool_call_id, name=part.tool_name, arguments=part.args))

    usage: Dict[str, Any] = {}
    for key in ("input_tokens", "output_tokens"):
        value = getattr(response.usage, key, None)
        if value is not None:
            usage[key] = value
    if response.model_name:
        usage["model"] = response.model_name

    return BackendResponse(
        text="".join(texts) if texts else None,
        tool_calls=tuple(calls),
        done=not calls,
        usage=usage,
    )
