"""
Shared exceptions for claude-replay.

Domain-specific exceptions used across services and session sources.

Malformed lines inside a session file are never reported: the decoder and
scanner drop them. Everything below is raised to the immediate caller.

Exception Hierarchy:
    ReplayError (base)
    ├── SessionReadError (file unreadable, or a line exceeds the size bound)
    ├── EmptySessionError (session decoded to zero turns)
    ├── SessionResolutionError (lookup/resolution failures)
    │   ├── SessionNotFoundError (no session matches the query)
    │   └── AmbiguousSessionError (prefix matches multiple sessions)
    └── SourceError (session source misconfigured or unavailable)
"""

from __future__ import annotations


class ReplayError(Exception):
    """Base exception for all claude-replay errors."""


class SessionReadError(ReplayError):
    """Raised when a session stream cannot be opened or read."""

    def __init__(self, location: str, reason: str) -> None:
        self.location = location
        self.reason = reason
        super().__init__(f'file unreadable: {location}: {reason}')


class EmptySessionError(ReplayError):
    """Raised when a session decodes successfully but yields no turns."""

    def __init__(self, location: str) -> None:
        self.location = location
        super().__init__(f'session has no turns: {location}')


class SessionResolutionError(ReplayError):
    """Base exception for session lookup and resolution failures."""


class SessionNotFoundError(SessionResolutionError):
    """Raised when no session matches a lookup query."""

    def __init__(self, query: str) -> None:
        self.query = query
        super().__init__(f'session not found: {query}')


class AmbiguousSessionError(SessionResolutionError):
    """Raised when a session ID prefix matches multiple sessions."""

    def __init__(self, prefix: str, matches: list[str]) -> None:
        self.prefix = prefix
        self.matches = matches
        matches_str = '\n  '.join(matches[:10])
        if len(matches) > 10:
            matches_str += f'\n  ... and {len(matches) - 10} more'
        super().__init__(
            f"Session ID prefix '{prefix}' is ambiguous. Matches {len(matches)} sessions:\n  {matches_str}\n\n"
            f'Please provide a more specific session ID prefix.'
        )


class SourceError(ReplayError):
    """Raised when a session source cannot be used (missing directory, branch or git failure)."""
