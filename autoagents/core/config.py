"""
Configuration Settings.

This module defines the engine configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.

Environment variables use the ``AUTOAGENTS_`` prefix, for example
``AUTOAGENTS_LOG_LEVEL=DEBUG`` or ``AUTOAGENTS_DEFAULT_MEMORY_WINDOW=20``.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Engine settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    # =====================================================================
    # Pydantic Configuration
    # =====================================================================
    model_config = SettingsConfigDict(
        env_prefix="AUTOAGENTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =====================================================================
    # Logging Configuration
    # =====================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    log_format: Literal["simple", "detailed", "json"] = Field(
        default="detailed",
        description="Log line format",
    )
    enable_file_logging: bool = Field(
        default=False,
        description="Also write logs to a file under log_file_dir",
    )
    log_file_dir: str = Field(
        default="logs",
        description="Directory used for the log file when file logging is enabled",
    )

    # =====================================================================
    # Engine Defaults
    # =====================================================================
    default_memory_window: int = Field(
        default=10,
        ge=1,
        description="Capacity of the sliding-window memory created when the builder is given none",
    )
    default_max_iterations: int = Field(
        default=10,
        description="Loop budget used by ExecutorConfig when none is supplied",
    )
    default_model: Optional[str] = Field(
        default=None,
        description="Default pydantic-ai model identifier, e.g. 'openai:gpt-4o'",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


settings = get_settings()
