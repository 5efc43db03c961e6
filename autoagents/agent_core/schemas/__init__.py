"""Pydantic schemas shared by every engine component."""

from .base import BaseSchema, FrozenSchema
from .domain import (
    BackendResponse,
    ExecutorConfig,
    MemoryTurn,
    Output,
    Task,
    ToolCall,
    ToolChoice,
    ToolChoiceMode,
    TurnRole,
)

__all__ = [
    "BaseSchema",
    "FrozenSchema",
    "BackendResponse",
    "ExecutorConfig",
    "MemoryTurn",
    "Output",
    "Task",
    "ToolCall",
    "ToolChoice",
    "ToolChoiceMode",
    "TurnRole",
]
