"""Error types for the agent execution engine.

Defines the taxonomy the engine uses to separate its three failure domains
(backend, tool, output parsing) from assembly-time misconfiguration.

- ``BuildError`` subclasses are raised by ``AgentBuilder.build`` before any
  run starts.
- ``ToolError`` subclasses are raised by the ``ToolRegistry``. During a run
  they are absorbed into the conversation as tool turns.
- ``ExecutionError`` subclasses terminate a run.

Every class exposes a stable ``kind`` string so callers can branch on the
taxonomy without importing the classes.
"""

from __future__ import annotations

from typing import Optional


class AutoAgentsError(Exception):
    """Base error for all engine exceptions."""

    kind: str = "error"


# ---------------------------------------------------------------------------
# Assembly time
# ---------------------------------------------------------------------------


class BuildError(AutoAgentsError):
    """Raised when an agent handle cannot be assembled."""

    kind = "build"


class MissingBackendError(BuildError):
    """Raised when ``build`` is called without a backend client."""

    kind = "build.missing_backend"

    def __init__(self, agent_name: str) -> None:
        super().__init__(f"Agent '{agent_name}' has no LLM backend configured")
        self.agent_name = agent_name


class InvalidConfigError(BuildError):
    """Raised when the executor configuration cannot produce a valid run."""

    kind = "build.invalid_config"


class RegistryFrozenError(BuildError):
    """Raised when a tool is registered after the registry was sealed by a build."""

    kind = "build.registry_frozen"

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"Cannot register tool '{tool_name}': registry is frozen")
        self.tool_name = tool_name


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


class ToolError(AutoAgentsError):
    """Base error for tool registration and invocation failures."""

    kind = "tool"

    def __init__(self, tool_name: str, message: str) -> None:
        super().__init__(message)
        self.tool_name = tool_name


class DuplicateToolError(ToolError):
    """Raised when a tool name is registered twice."""

    kind = "tool.duplicate"

    def __init__(self, tool_name: str) -> None:
        super().__init__(tool_name, f"Tool already registered: '{tool_name}'")


class UnknownToolError(ToolError):
    """Raised when a tool name cannot be resolved."""

    kind = "tool.unknown"

    def __init__(self, tool_name: str) -> None:
        super().__init__(tool_name, f"Unknown tool: '{tool_name}'")


class ToolArgumentError(ToolError):
    """Raised when tool arguments do not satisfy the tool's input schema."""

    kind = "tool.arguments"

    def __init__(self, tool_name: str, diagnostic: str) -> None:
        super().__init__(tool_name, f"Invalid arguments for tool '{tool_name}': {diagnostic}")
        self.diagnostic = diagnostic


class ToolExecutionError(ToolError):
    """Raised for failures inside a tool body, with the underlying cause attached."""

    kind = "tool.execution"

    def __init__(self, tool_name: str, cause: BaseException) -> None:
        super().__init__(tool_name, f"Tool '{tool_name}' failed: {cause}")
        self.cause = cause


# ---------------------------------------------------------------------------
# Run time
# ---------------------------------------------------------------------------


class ExecutionError(AutoAgentsError):
    """Base error for failures that terminate a run."""

    kind = "execution"


class BackendError(ExecutionError):
    """Raised when the LLM backend call fails. Never retried by the engine."""

    kind = "execution.backend"

    def __init__(self, backend_name: str, cause: Optional[BaseException] = None, message: Optional[str] = None) -> None:
        detail = message or (str(cause) if cause is not None else "unknown failure")
        super().__init__(f"Backend '{backend_name}' failed: {detail}")
        self.backend_name = backend_name
        self.cause = cause


class StructuredOutputError(ExecutionError):
    """Raised when a final answer does not conform to the agent's output schema."""

    kind = "execution.structured_output"

    def __init__(self, schema_name: str, diagnostic: str, raw: object = None) -> None:
        super().__init__(f"Final answer does not match output schema '{schema_name}': {diagnostic}")
        self.schema_name = schema_name
        self.diagnostic = diagnostic
        self.raw = raw


class IterationLimitExceeded(ExecutionError):
    """Raised when the iterative loop exhausts its backend-call budget."""

    kind = "execution.iteration_limit"

    def __init__(self, max_iterations: int) -> None:
        super().__init__(f"Iteration limit of {max_iterations} reached without a final answer")
        self.max_iterations = max_iterations
