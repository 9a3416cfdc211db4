"""
Session loader service - decoding, segmentation and session assembly.

Framework-agnostic service shared by every session source: reads a JSONL
stream, segments it into turns and returns an immutable Session.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import BinaryIO, Protocol

from claude_replay.config.base import DEFAULT_MAX_LINE_BYTES
from claude_replay.domain import Session
from claude_replay.exceptions import EmptySessionError
from claude_replay.schemas.session import Event
from claude_replay.services.decoder import decode, decode_file
from claude_replay.services.segmenter import build_session

# ==============================================================================
# Logger Protocol
# ==============================================================================


class LoggerProtocol(Protocol):
    """Protocol for logger - enables service to work with any logging implementation."""

    async def info(self, message: str) -> None: ...
    async def warning(self, message: str) -> None: ...
    async def error(self, message: str) -> None: ...


# ==============================================================================
# Session Loader Service
# ==============================================================================


class SessionLoaderService:
    """
    Service for loading Claude Code session files into Sessions.

    Pure domain logic - the only I/O is reading the stream it is given.
    Malformed lines are dropped by the decoder; read failures and empty
    sessions raise.
    """

    def __init__(self, max_line_bytes: int = DEFAULT_MAX_LINE_BYTES) -> None:
        """
        Initialize loader.

        Args:
            max_line_bytes: Largest accepted JSONL line
        """
        self.max_line_bytes = max_line_bytes

    async def load_file(self, path: Path, logger: LoggerProtocol, *, session_id: str = '') -> Session:
        """
        Load a session JSONL file.

        Args:
            path: Path to JSONL file
            logger: Logger instance
            session_id: Known session ID (defaults to the sessionId fields)

        Returns:
            Session with at least one turn

        Raises:
            SessionReadError: If the file cannot be read
            EmptySessionError: If the file yields no turns
        """
        await logger.info(f'Loading {path.name}')
        events = decode_file(path, max_line_bytes=self.max_line_bytes)
        return await self._assemble(events, session_id=session_id, location=str(path), logger=logger)

    async def load_stream(
        self,
        stream: BinaryIO,
        logger: LoggerProtocol,
        *,
        session_id: str = '',
        location: str = '<stream>',
    ) -> Session:
        """
        Load a session from an already opened (decompressed) JSONL stream.

        Args:
            stream: Binary stream of JSONL data
            logger: Logger instance
            session_id: Known session ID (takes precedence over sessionId fields)
            location: Description of the stream's origin for messages and Session.path

        Raises:
            SessionReadError: If the stream cannot be read
            EmptySessionError: If the stream yields no turns
        """
        await logger.info(f'Loading {location}')
        events = decode(stream, max_line_bytes=self.max_line_bytes, location=location)
        return await self._assemble(events, session_id=session_id, location=location, logger=logger)

    async def _assemble(
        self,
        events: Sequence[Event],
        session_id: str,
        location: str,
        logger: LoggerProtocol,
    ) -> Session:
        session = build_session(events, session_id=session_id, path=location)
        if not session.turns:
            raise EmptySessionError(location)

        await logger.info(f'Loaded {len(session.turns)} turns from {len(events)} events')
        return session
