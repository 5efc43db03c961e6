"""Tool catalog and invocation pipeline.

This package exports:

- ``ToolSpec``: name, description, input schema and handler of a tool.
- ``ToolRegistry``: name → spec mapping plus the invocation protocol.
- ``ToolResult``: structured outcome of one invocation.
"""

from .base import ToolResult, ToolSpec
from .registry import ToolRegistry

__all__ = [
    "ToolResult",
    "ToolSpec",
    "ToolRegistry",
]
