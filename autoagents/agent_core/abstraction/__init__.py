"""Backend abstraction layer.

Decouples the execution strategies from any particular LLM provider:

- ``LLMBackend``: the interface strategies call.
- ``BackendConfig``: model identifier and generation settings.
- ``PydanticAIBackend``: adapter over Pydantic AI's direct request API.
- ``BackendFactory``: framework name → backend builder.
"""

from .adapters.pydantic_ai import PydanticAIBackend
from .base import BackendConfig, LLMBackend
from .factory import BackendFactory, build_default_factory

__all__ = [
    "BackendConfig",
    "LLMBackend",
    "PydanticAIBackend",
    "BackendFactory",
    "build_default_factory",
]
