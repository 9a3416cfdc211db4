"""
MCP server configuration.

Extends base configuration with MCP-specific settings.
"""

from __future__ import annotations

import pathlib

from claude_replay.config.base import ReplaySettings, lazy_settings


class McpServerSettings(ReplaySettings):
    """MCP server-specific configuration."""

    # When set, serve sessions archived on SESSIONS_BRANCH of this repository
    # instead of the local CLAUDE_DIR tree
    MCP_GIT_REPO: pathlib.Path | None = None


# Module-level singleton (lazy-loaded)
settings = lazy_settings(McpServerSettings)
