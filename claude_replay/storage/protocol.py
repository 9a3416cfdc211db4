"""
Session source protocol.

Defines the interface for the places sessions are read from (local Claude
directory tree, git branch of compressed archives).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from claude_replay.domain import Session
from claude_replay.schemas.operations.discovery import ProjectInfo, SessionInfo
from claude_replay.services.loader import LoggerProtocol


@runtime_checkable
class SessionSource(Protocol):
    """Protocol for session sources."""

    async def list_projects(self) -> list[ProjectInfo]:
        """
        List available projects, most recently used first.

        Raises:
            SourceError: If the source is unavailable
        """
        ...

    async def list_sessions(self, project_id: str) -> list[SessionInfo]:
        """
        List sessions of a project, most recent first.

        Args:
            project_id: ProjectInfo.project_id from list_projects()

        Returns:
            Sessions with at least one counted turn
        """
        ...

    async def load_session(self, session_id: str, logger: LoggerProtocol) -> Session:
        """
        Load and segment a session.

        Args:
            session_id: Session ID, unique ID prefix or slug
            logger: Logger instance

        Raises:
            SessionNotFoundError: If no session matches
            SessionReadError: If the session data cannot be read
            EmptySessionError: If the session has no turns
        """
        ...

    async def find_session(self, query: str) -> SessionInfo:
        """
        Find a session by ID, ID prefix, slug (or, for local sources, file path).

        Raises:
            SessionNotFoundError: If no session matches
            AmbiguousSessionError: If an ID prefix matches several sessions
        """
        ...
