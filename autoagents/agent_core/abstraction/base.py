"""Base abstraction for LLM backends.

This module defines the interface every backend client must implement so
that the execution strategies stay independent of any provider wire format.
A backend receives the conversation history, the tools it may call and an
optional output-schema hint, and answers with a ``BackendResponse``.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ..schemas.domain import BackendResponse, MemoryTurn
from ..tools.base import ToolSpec


class BackendConfig(BaseModel):
    """Configuration for building a backend client.

    Attributes:
        model: Model identifier understood by the framework (e.g. 'openai:gpt-4o')
        temperature: Sampling temperature
        max_tokens: Maximum tokens for response generation
        timeout: Request timeout in seconds
        model_settings: Extra framework-specific model settings
    """

    model_config = ConfigDict(frozen=False, validate_assignment=True, protected_namespaces=())

    model: str = Field(..., description="The LLM model identifier")
    temperature: Optional[float] = Field(default=None, ge=0.0, description="Model temperature for response generation")
    max_tokens: Optional[int] = Field(None, ge=1, description="Maximum tokens for response generation")
    timeout: Optional[float] = Field(None, gt=0, description="Request timeout in seconds")
    model_settings: Dict[str, Any] = Field(default_factory=dict, description="Additional framework-specific settings")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump()


class LLMBackend(ABC):
    """Abstract base class for all backend client implementations.

    Backend instances are shared by every run of a handle and are never
    mutated by the engine; implementations must be safe to call concurrently.
    Failures may be raised as any exception: the strategies convert them to
    ``BackendError``.
    """

    @property
    def name(self) -> str:
        """Identifier used in logs and errors."""
        return self.__class__.__name__

    @abstractmethod
    async def chat(
        self,
        messages: Sequence[MemoryTurn],
        *,
        tools: Sequence[ToolSpec] = (),
        output_schema: Optional[Dict[str, Any]] = None,
        system_prompt: Optional[str] = None,
    ) -> BackendResponse:
        """Send one request.

        Args:
            messages: Conversation history, oldest first.
            tools: Tools the model may call in its reply.
            output_schema: JSON schema the final answer should follow, if any.
            system_prompt: Instructions prepended to the conversation.

        Returns:
            BackendResponse with text, structured content and/or tool calls.
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name})"
