"""
Centralized configuration for schemalineage.

Uses Pydantic BaseSettings for environment variable integration
and validation.

Configuration sources (in order of precedence):
1. Explicit constructor arguments
2. Environment variables (SCHEMALINEAGE_*)
3. .env file
4. Default values

Example:
    from schemalineage.config import get_config

    config = get_config()
    print(config.empty_commit_policy)  # From SCHEMALINEAGE_EMPTY_COMMIT_POLICY

    # Override at runtime
    config = get_config(empty_commit_policy="retain")
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from schemalineage.types import EmptyCommitPolicy


class LineageConfig(BaseSettings):
    """
    Settings for the lineage engine.

    Example:
        export SCHEMALINEAGE_EMPTY_COMMIT_POLICY=retain
        export SCHEMALINEAGE_EMIT_SPAN_EVENTS=false
    """

    model_config = SettingsConfigDict(
        env_prefix="SCHEMALINEAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    empty_commit_policy: EmptyCommitPolicy = Field(
        default=EmptyCommitPolicy.EMPTY,
        description=(
            "Commit behaviour when every live track was dropped in the "
            "same round: commit an empty schema or keep the previous one"
        ),
    )
    emit_span_events: bool = Field(
        default=True,
        description="Emit OTel span events for edits and commits",
    )


# Global singleton
_config: Optional[LineageConfig] = None


def get_config(**overrides) -> LineageConfig:
    """
    Get the global configuration instance.

    Creates a singleton on first call. Subsequent calls return
    the same instance unless overrides are provided.

    Args:
        **overrides: Override any config values

    Returns:
        LineageConfig instance
    """
    global _config

    if overrides or _config is None:
        _config = LineageConfig(**overrides)

    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
