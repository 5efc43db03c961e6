"""Tool specification and invocation result models.

A tool is a named capability the model may ask the engine to invoke in the
middle of a run. Each ``ToolSpec`` carries an input schema that raw model
arguments are validated against before the handler is ever called.

Two schema flavours are accepted:

- a pydantic model class: arguments are validated with ``model_validate``
  and the handler receives the model instance;
- a JSON-schema dict: arguments are validated with ``jsonschema`` and the
  handler receives the plain dict.
"""

from __future__ import annotations

import inspect
import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Type, Union

import jsonschema
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import ToolArgumentError, ToolError

InputSchema = Union[Type[BaseModel], Dict[str, Any]]


class ToolSpec(BaseModel):
    """Pydantic model for tool definitions.

    Registered once at build time and immutable afterwards.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., min_length=1, description="Unique identifier for the tool")
    description: str = Field(default="", description="Human-readable description of what the tool does")
    input_schema: InputSchema = Field(..., description="Pydantic model class or JSON schema for the arguments")
    handler: Callable[[Any], Any] = Field(..., description="Sync or async callable receiving validated arguments")

    @field_validator("input_schema")
    @classmethod
    def _check_json_schema(cls, value: InputSchema) -> InputSchema:
        if isinstance(value, dict):
            try:
                jsonschema.validators.validator_for(value).check_schema(value)
            except jsonschema.SchemaError as e:
                raise ValueError(f"invalid JSON schema: {e.message}") from e
        return value

    @classmethod
    def from_function(
        cls,
        func: Callable[[Any], Any],
        input_schema: InputSchema,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> "ToolSpec":
        """Build a spec from a plain function, defaulting name and description from it."""
        doc = inspect.getdoc(func) or ""
        return cls(
            name=name or func.__name__,
            description=description if description is not None else doc.split("\n\n")[0],
            input_schema=input_schema,
            handler=func,
        )

    @property
    def uses_model_schema(self) -> bool:
        return isinstance(self.input_schema, type) and issubclass(self.input_schema, BaseModel)

    def json_schema(self) -> Dict[str, Any]:
        """Return the input schema as JSON schema."""
        if self.uses_model_schema:
            return self.input_schema.model_json_schema()  # type: ignore[union-attr]
        return dict(self.input_schema)  # type: ignore[arg-type]

    def to_dict(self) -> Dict[str, Any]:
        """Convert tool definition to dictionary format.

        Returns:
            Dictionary representation of tool definition with JSON schema
        """
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.json_schema(),
        }

    def validate_arguments(self, raw_arguments: Union[Mapping[str, Any], str, None]) -> Any:
        """Validate raw model arguments against the input schema.

        Args:
            raw_arguments: A mapping, a JSON object string, or ``None`` for no arguments.

        Returns:
            The model instance (pydantic schema) or the argument dict (JSON schema).

        Raises:
            ToolArgumentError: If the arguments cannot be parsed or do not validate.
        """
        arguments = _coerce_arguments(self.name, raw_arguments)
        if self.uses_model_schema:
            try:
                return self.input_schema.model_validate(arguments)  # type: ignore[union-attr]
            except ValidationError as e:
                raise ToolArgumentError(self.name, _format_validation_error(e)) from e
        try:
            jsonschema.validate(arguments, self.input_schema)
        except jsonschema.ValidationError as e:
            location = "/".join(str(p) for p in e.absolute_path)
            diagnostic = f"{location}: {e.message}" if location else e.message
            raise ToolArgumentError(self.name, diagnostic) from e
        return arguments

    async def call(self, arguments: Any) -> Any:
        """Run the handler with already-validated arguments."""
        result = self.handler(arguments)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, BaseModel):
            return result.model_dump(mode="json")
        return result


@dataclass(frozen=True)
class ToolResult:
    """Structured outcome of one tool invocation."""

    name: str
    call_id: Optional[str]
    ok: bool
    output: Any = None
    error: Optional[ToolError] = None


def _coerce_arguments(tool_name: str, raw: Union[Mapping[str, Any], str, None]) -> Dict[str, Any]:
    if raw is None:
        return {}
    if isinstance(raw, str):
        if not raw.strip():
            return {}
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ToolArgumentError(tool_name, f"arguments are not valid JSON: {e.msg}") from e
    if not isinstance(raw, Mapping):
        raise ToolArgumentError(tool_name, f"arguments must be a JSON object, got {type(raw).__name__}")
    return dict(raw)


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        loc = ".".join(str(p) for p in item.get("loc", ()))
        parts.append(f"{loc}: {item.get('msg')}" if loc else str(item.get("msg")))
    return "; ".join(parts)
