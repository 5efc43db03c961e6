"""Agent base class and static metadata.

An agent binds owned, static metadata (name, description, output schema,
declared tools) to the lifecycle hooks the engine calls during a run. The
execution strategy is either supplied to the builder or, when the agent also
implements ``AgentExecutor``, the agent itself.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Tuple, Type

from pydantic import BaseModel

from .hooks import AgentHooks
from .schemas.base import FrozenSchema
from .tools.base import ToolSpec


class AgentMetadata(FrozenSchema):
    """Reflection view of an agent, suitable for documentation tooling."""

    name: str
    description: str = ""
    output_schema: Optional[Dict[str, Any]] = None
    tools: Tuple[Dict[str, Any], ...] = ()


class BaseAgent(AgentHooks):
    """Base class for agents.

    Subclasses override the ``AgentHooks`` methods they want to observe.

    Args:
        name: Agent name used in logs and errors.
        description: Human-readable summary of what the agent does.
        output_schema: Pydantic model the final answer is validated against.
        tools: Tools the agent declares; registered by the builder.
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        *,
        output_schema: Optional[Type[BaseModel]] = None,
        tools: Iterable[ToolSpec] = (),
    ) -> None:
        self.name = name
        self.description = description
        self.output_schema = output_schema
        self.tools: Tuple[ToolSpec, ...] = tuple(tools)

    def output_schema_json(self) -> Optional[Dict[str, Any]]:
        if self.output_schema is None:
            return None
        return self.output_schema.model_json_schema()

    def metadata(self) -> AgentMetadata:
        return AgentMetadata(
            name=self.name,
            description=self.description,
            output_schema=self.output_schema_json(),
            tools=tuple(t.to_dict() for t in self.tools),
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
