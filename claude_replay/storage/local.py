"""
Local directory session source.

Reads sessions from a Claude Code directory tree:

    <claude_dir>/projects/<encoded-project-path>/<session-id>.jsonl

Listings use the metadata scanner; only load_session decodes a whole file.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from claude_replay.config.base import DEFAULT_MAX_LINE_BYTES
from claude_replay.domain import Session
from claude_replay.exceptions import (
    AmbiguousSessionError,
    SessionNotFoundError,
    SessionReadError,
    SourceError,
)
from claude_replay.paths import decode_project_dir, project_display_name
from claude_replay.schemas.operations.discovery import ProjectInfo, SessionInfo, SessionScan
from claude_replay.services.loader import LoggerProtocol, SessionLoaderService
from claude_replay.services.scanner import scan

__all__ = ['LocalDirectorySource', 'parse_timestamp']


class LocalDirectorySource:
    """Session source backed by the local ~/.claude directory tree."""

    def __init__(self, claude_dir: Path, max_line_bytes: int = DEFAULT_MAX_LINE_BYTES) -> None:
        """
        Initialize local source.

        Args:
            claude_dir: Claude directory containing projects/
            max_line_bytes: Largest accepted JSONL line
        """
        self.claude_dir = claude_dir
        self.projects_dir = claude_dir / 'projects'
        self.max_line_bytes = max_line_bytes
        self.loader = SessionLoaderService(max_line_bytes)

    async def list_projects(self) -> list[ProjectInfo]:
        """List project directories holding at least one session file, most recently used first."""
        projects: list[ProjectInfo] = []
        for project_dir in self._project_dirs():
            files = _session_files(project_dir)
            if not files:
                continue

            last_mtime = max(f.stat().st_mtime for f in files)
            projects.append(
                ProjectInfo(
                    project_id=str(project_dir),
                    name=project_display_name(project_dir.name),
                    path=decode_project_dir(project_dir.name),
                    session_count=len(files),
                    last_used=datetime.fromtimestamp(last_mtime, tz=UTC),
                )
            )

        projects.sort(key=lambda p: _sort_key(p.last_used), reverse=True)
        return projects

    async def list_sessions(self, project_id: str) -> list[SessionInfo]:
        """
        List sessions of a project directory, most recent first.

        Args:
            project_id: Project directory path, or its name under projects/

        Raises:
            SourceError: If the project directory does not exist
        """
        project_dir = Path(project_id)
        if not project_dir.is_absolute():
            project_dir = self.projects_dir / project_id
        if not project_dir.is_dir():
            raise SourceError(f'Project directory not found: {project_dir}')

        sessions: list[SessionInfo] = []
        for path in _session_files(project_dir):
            try:
                summary = scan(path, max_line_bytes=self.max_line_bytes)
            except SessionReadError:
                continue
            if summary.turn_count == 0:
                continue
            sessions.append(self._session_info(path, summary))

        sessions.sort(key=lambda s: _sort_key(s.last_time), reverse=True)
        return sessions

    async def load_session(self, session_id: str, logger: LoggerProtocol) -> Session:
        """Find a session by ID, prefix, slug or path and load it."""
        info = await self.find_session(session_id)
        return await self.loader.load_file(Path(info.location), logger, session_id=info.session_id)

    async def find_session(self, query: str) -> SessionInfo:
        """
        Find a session, trying in order: an existing .jsonl path, exact ID,
        unique ID prefix, slug.

        Raises:
            SessionNotFoundError: If nothing matches
            AmbiguousSessionError: If the ID prefix matches several sessions
        """
        if not query:
            raise SessionNotFoundError(query)

        direct = Path(query).expanduser()
        if query.endswith('.jsonl') and direct.is_file():
            return self._session_info(direct, scan(direct, max_line_bytes=self.max_line_bytes))

        candidates = [f for project_dir in self._project_dirs() for f in _session_files(project_dir)]

        for path in candidates:
            if path.stem == query:
                return self._scan_info(path)

        matches = [path for path in candidates if path.stem.startswith(query)]
        if len(matches) > 1:
            raise AmbiguousSessionError(query, sorted(path.stem for path in matches))
        if matches:
            return self._scan_info(matches[0])

        # Slug lookup needs file content: slowest, so last
        for path in candidates:
            try:
                summary = scan(path, max_line_bytes=self.max_line_bytes)
            except SessionReadError:
                continue
            if summary.slug == query:
                return self._session_info(path, summary)

        raise SessionNotFoundError(query)

    def _project_dirs(self) -> list[Path]:
        if not self.projects_dir.is_dir():
            raise SourceError(f'Claude projects directory not found: {self.projects_dir}')
        return sorted(p for p in self.projects_dir.iterdir() if p.is_dir())

    def _scan_info(self, path: Path) -> SessionInfo:
        return self._session_info(path, scan(path, max_line_bytes=self.max_line_bytes))

    def _session_info(self, path: Path, summary: SessionScan) -> SessionInfo:
        return SessionInfo(
            session_id=path.stem,
            location=str(path),
            slug=summary.slug,
            model=summary.model,
            turn_count=summary.turn_count,
            first_time=parse_timestamp(summary.first_timestamp),
            last_time=parse_timestamp(summary.last_timestamp),
            size_bytes=path.stat().st_size,
        )


def parse_timestamp(value: str) -> datetime | None:
    """Parse an RFC 3339 timestamp as written by Claude Code; None when empty or invalid."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return None


def _session_files(project_dir: Path) -> list[Path]:
    # Subagent transcripts are sidechains of a main session file
    return sorted(p for p in project_dir.glob('*.jsonl') if p.is_file() and not p.name.startswith('agent-'))


def _sort_key(value: datetime | None) -> float:
    return value.timestamp() if value is not None else float('-inf')
