"""Shared utilities for the MCP server."""

from __future__ import annotations

# Standard Library
import sys
from datetime import UTC, datetime
from typing import Any

# Third-Party Libraries
from mcp.server.fastmcp import Context


class DualLogger:
    """Logs messages to both stderr and the MCP client context (stdout carries the protocol)."""

    def __init__(self, ctx: Context[Any, Any, Any]) -> None:
        self.ctx = ctx

    def _timestamp(self) -> str:
        return datetime.now(UTC).strftime('%Y-%m-%d %H:%M:%S')

    def _print(self, level: str, message: str) -> None:
        print(f'[{self._timestamp()}] [{level}] {message}', file=sys.stderr)

    async def info(self, message: str) -> None:
        self._print('INFO', message)
        await self.ctx.info(message)

    async def warning(self, message: str) -> None:
        self._print('WARNING', message)
        await self.ctx.warning(message)

    async def error(self, message: str) -> None:
        self._print('ERROR', message)
        await self.ctx.error(message)
