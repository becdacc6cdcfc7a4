"""
Configuration management for the lesson agent core.

Centralizes all tunable limits using Pydantic settings with environment variable support.
"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

from lesson_agent.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Core settings loaded from environment variables (prefix LESSON_AGENT_)."""

    # Chunking
    chunk_size: int = Field(
        default=32000,
        description="Approximate character budget per document chunk"
    )
    max_node_depth: int = Field(
        default=64,
        description="Maximum nesting depth accepted by document validation"
    )

    # Checkpoints
    max_checkpoints: int = Field(
        default=10,
        description="Number of checkpoints retained before the oldest is evicted"
    )
    checkpoint_interval: int = Field(
        default=5,
        description="Agent steps between automatic checkpoints"
    )

    # Tool execution
    anchor_preview_chars: int = Field(
        default=50,
        description="Characters of a missing anchor echoed back in failure messages"
    )
    tool_log_preview_chars: int = Field(
        default=300,
        description="Characters of a tool result written to the log"
    )
    max_tool_logs: int = Field(
        default=200,
        description="Tool log entries kept per registry"
    )

    model_config = SettingsConfigDict(
        env_prefix="LESSON_AGENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or create the global settings instance.

    Returns:
        Settings: Core settings
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings():
    """Reset the global settings instance (useful for testing)."""
    global _settings
    _settings = None


def validate_settings() -> bool:
    """
    Validate that all limits are usable.

    Raises ConfigurationError if any limit is not positive.
    """
    settings = get_settings()

    for key in (
        "chunk_size",
        "max_node_depth",
        "max_checkpoints",
        "checkpoint_interval",
        "anchor_preview_chars",
        "tool_log_preview_chars",
        "max_tool_logs",
    ):
        if getattr(settings, key) <= 0:
            raise ConfigurationError(key, "must be a positive integer")

    return True
