"""Tool registry and invocation protocol.

The registry maps a tool name to its ``ToolSpec``. Strategies dispatch model
tool calls through ``ToolRegistry.invoke``, which runs the whole protocol:

1. resolve the name (``UnknownToolError``),
2. validate arguments (``ToolArgumentError``),
3. call the handler (failures wrapped as ``ToolExecutionError``),
4. append exactly one tool turn to memory, successful or not.

Tool-level failures are returned inside ``ToolResult.error`` rather than
raised, so the model can read them and self-correct.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Union

from ..errors import DuplicateToolError, RegistryFrozenError, ToolError, ToolExecutionError, UnknownToolError
from ..memory.base import MemoryProvider
from ..schemas.domain import MemoryTurn, ToolChoice, ToolChoiceMode
from .base import ToolResult, ToolSpec

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    In-memory mapping of tool names to specifications.

    Notes:
        - ``register`` refuses duplicate names; the first registration wins.
        - After ``freeze`` the registry is read-only and needs no locking.
    """

    def __init__(self, tools: Optional[Iterable[ToolSpec]] = None) -> None:
        self._tools: Dict[str, ToolSpec] = {}
        self._frozen = False
        if tools is not None:
            self.update(tools)

    def register(self, tool: ToolSpec) -> None:
        """
        Register a tool specification.

        Raises:
            DuplicateToolError: If a tool with the same name is already registered.
            RegistryFrozenError: If the registry was sealed by a build.
        """
        if self._frozen:
            raise RegistryFrozenError(tool.name)
        if tool.name in self._tools:
            raise DuplicateToolError(tool.name)
        self._tools[tool.name] = tool

    def update(self, tools: Iterable[ToolSpec]) -> None:
        for tool in tools:
            self.register(tool)

    def resolve(self, name: str) -> ToolSpec:
        """
        Retrieve a registered tool by name.

        Raises:
            UnknownToolError: If no tool is registered with the given name.
        """
        try:
            return self._tools[name]
        except KeyError as e:
            raise UnknownToolError(name) from e

    def has(self, name: str) -> bool:
        return name in self._tools

    def names(self) -> List[str]:
        return list(self._tools)

    def specs(self, choice: Optional[ToolChoice] = None) -> List[ToolSpec]:
        """Return the tools offered to the backend under ``choice``, in registration order."""
        choice = choice or ToolChoice.auto()
        if choice.mode is ToolChoiceMode.none:
            return []
        if choice.mode is ToolChoiceMode.forced:
            return [self.resolve(str(choice.name))]
        return list(self._tools.values())

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolSpec]:
        return iter(self._tools.values())

    async def invoke(
        self,
        name: str,
        raw_arguments: Union[Mapping[str, Any], str, None],
        *,
        memory: MemoryProvider,
        call_id: Optional[str] = None,
        run_id: Optional[str] = None,
    ) -> ToolResult:
        """Run the invocation protocol for one tool call.

        Args:
            name: Tool name requested by the model.
            raw_arguments: Arguments exactly as produced by the backend.
            memory: Memory that receives the resulting tool turn.
            call_id: Backend tool-call identifier, echoed on the tool turn.
            run_id: Identifier of the run issuing the call.

        Returns:
            ToolResult with ``ok=False`` and ``error`` set for unknown tools,
            invalid arguments and handler failures.
        """
        try:
            spec = self.resolve(name)
            arguments = spec.validate_arguments(raw_arguments)
            try:
                output = await spec.call(arguments)
            except Exception as e:
                raise ToolExecutionError(name, e) from e
        except ToolError as err:
            logger.warning(f"Tool call '{name}' (call_id={call_id}, run_id={run_id}) failed: {err}")
            memory.append(
                MemoryTurn.tool(
                    str(err),
                    tool_name=name,
                    tool_call_id=call_id,
                    is_error=True,
                    run_id=run_id,
                )
            )
            return ToolResult(name=name, call_id=call_id, ok=False, error=err)

        memory.append(MemoryTurn.tool(output, tool_name=name, tool_call_id=call_id, run_id=run_id))
        logger.debug(f"Tool call '{name}' (call_id={call_id}, run_id={run_id}) succeeded")
        return ToolResult(name=name, call_id=call_id, ok=True, output=output)
