"""
Base configuration for claude-replay.

Shared settings and helper functions for the CLI and the MCP server.
"""

from __future__ import annotations

import os
import pathlib
from typing import TypeVar

import lazy_object_proxy
import pydantic
import pydantic_settings

T = TypeVar('T', bound='ReplaySettings')

# Claude Code writes whole tool outputs into single lines; 16 MiB covers observed files
DEFAULT_MAX_LINE_BYTES = 16 * 1024 * 1024


class ReplaySettings(pydantic_settings.BaseSettings):
    """Shared configuration across all entry points (CLI, MCP)."""

    model_config = pydantic_settings.SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True,  # Fail fast on misconfiguration
        extra='forbid',  # Reject unknown environment variables
    )

    # Application metadata
    APP_NAME: str = 'claude-replay'
    VERSION: str = '0.1.0'

    # Local session tree (contains projects/<encoded-path>/<session-id>.jsonl)
    CLAUDE_DIR: pathlib.Path = pathlib.Path.home() / '.claude'

    # Upper bound for one JSONL line; longer lines fail the read
    MAX_LINE_BYTES: int = DEFAULT_MAX_LINE_BYTES

    # Git-backed archive source
    SESSIONS_BRANCH: str = 'claude-sessions'
    GIT_EXECUTABLE: str = 'git'

    @pydantic.field_validator('MAX_LINE_BYTES')
    @classmethod
    def validate_max_line_bytes(cls, v: int) -> int:
        """Validate the line bound is positive."""
        if v <= 0:
            raise ValueError('MAX_LINE_BYTES must be positive')
        return v


def get_settings(settings_class: type[T], env_file: str | None = None) -> T:
    """
    Build settings from the environment, plus an optional env file.

    The env file is `env_file` when given, else the path in LOAD_ENV_FILE.
    With neither, only process environment variables (and ./.env) are read.

    Raises:
        FileNotFoundError: If an env file was requested but is missing
    """
    requested = env_file or os.getenv('LOAD_ENV_FILE')
    if not requested:
        return settings_class()

    path = pathlib.Path(requested).resolve()
    if not path.exists():
        raise FileNotFoundError(f'Environment file not found: {path}')

    return settings_class(_env_file=path)


def lazy_settings(settings_class: type[T]) -> T:
    """Proxy that builds the settings on first attribute access, so importing never reads the environment."""
    return lazy_object_proxy.Proxy(lambda: get_settings(settings_class))


# Shared by the CLI; the MCP server uses config.mcp.settings
settings = lazy_settings(ReplaySettings)
