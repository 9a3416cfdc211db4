"""MCP server entry point for claude-replay."""

from __future__ import annotations

from claude_replay.mcp.server import main, server

__all__ = ['main', 'server']
