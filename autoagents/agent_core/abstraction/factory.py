"""Factory for creating backend clients.

This module provides a factory pattern implementation for creating backend
clients, supporting multiple frameworks through registered builders.
"""

from typing import Callable, Dict, List, Optional

from .adapters.pydantic_ai import PydanticAIBackend
from .base import BackendConfig, LLMBackend

BackendBuilder = Callable[[BackendConfig], LLMBackend]

DEFAULT_FRAMEWORK = "pydantic_ai"


class BackendFactory:
    """Factory for creating backend clients.

    Usage:
        factory = BackendFactory()
        factory.register('my_framework', MyBackend.from_config)
        backend = factory.create(BackendConfig(model='openai:gpt-4o'), framework='my_framework')
    """

    def __init__(self) -> None:
        self._builders: Dict[str, BackendBuilder] = {}

    def register(self, framework: str, builder: BackendBuilder) -> None:
        """Register a backend builder for a framework.

        Args:
            framework: Framework identifier (e.g., 'pydantic_ai')
            builder: Callable that takes a BackendConfig and returns an LLMBackend

        Raises:
            ValueError: If framework is already registered
        """
        if framework in self._builders:
            raise ValueError(f"Framework '{framework}' is already registered")
        self._builders[framework] = builder

    def unregister(self, framework: str) -> None:
        self._builders.pop(framework, None)

    def is_registered(self, framework: str) -> bool:
        return framework in self._builders

    def frameworks(self) -> List[str]:
        return list(self._builders)

    def create(self, config: BackendConfig, framework: Optional[str] = None) -> LLMBackend:
        """Create a backend client.

        Args:
            config: Backend configuration
            framework: Framework identifier, defaults to 'pydantic_ai'

        Returns:
            A ready-to-use LLMBackend

        Raises:
            ValueError: If no builder is registered for the framework
        """
        key = framework or DEFAULT_FRAMEWORK
        try:
            builder = self._builders[key]
        except KeyError as e:
            raise ValueError(f"No backend registered for framework '{key}'. Available: {self.frameworks()}") from e
        return builder(config)


def build_default_factory() -> BackendFactory:
    """Build a ``BackendFactory`` with the built-in adapters registered."""
    factory = BackendFactory()
    factory.register(DEFAULT_FRAMEWORK, PydanticAIBackend.from_config)
    return factory
