"""Framework adapters implementing ``LLMBackend``."""

from .pydantic_ai import PydanticAIBackend

__all__ = ["PydanticAIBackend"]
