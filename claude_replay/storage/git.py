"""
Git branch session source.

Reads archived sessions from a dedicated branch of a repository, without
checking it out:

    <branch>:sessions/<id>.meta.json   - ArchiveMeta sidecar (listings)
    <branch>:sessions/<id>.jsonl.gz    - gzip compressed session
    <branch>:sessions/<id>.jsonl.zst   - zstd compressed session

Blobs are read through `git show` and decompressed in memory.
"""

from __future__ import annotations

import gzip
import io
import subprocess
import zlib
from pathlib import Path

import pydantic
import zstandard

from claude_replay.config.base import DEFAULT_MAX_LINE_BYTES
from claude_replay.domain import Session
from claude_replay.exceptions import (
    AmbiguousSessionError,
    SessionNotFoundError,
    SessionReadError,
    SourceError,
)
from claude_replay.schemas.operations.discovery import ArchiveMeta, ProjectInfo, SessionInfo
from claude_replay.services.loader import LoggerProtocol, SessionLoaderService
from claude_replay.storage.local import parse_timestamp

__all__ = ['GitBranchSource']

ARCHIVE_DIR = 'sessions'
META_SUFFIX = '.meta.json'
ARCHIVE_SUFFIXES = ('.jsonl.gz', '.jsonl.zst')


class GitBranchSource:
    """Session source backed by a branch of compressed session archives."""

    def __init__(
        self,
        repo_path: Path,
        branch: str = 'claude-sessions',
        git_executable: str = 'git',
        max_line_bytes: int = DEFAULT_MAX_LINE_BYTES,
    ) -> None:
        """
        Initialize git source.

        Args:
            repo_path: Repository holding the sessions branch
            branch: Branch with the sessions/ directory
            git_executable: git binary to invoke
            max_line_bytes: Largest accepted JSONL line
        """
        self.repo_path = repo_path
        self.branch = branch
        self.git_executable = git_executable
        self.loader = SessionLoaderService(max_line_bytes)

    async def list_projects(self) -> list[ProjectInfo]:
        """Return the repository as the single project."""
        try:
            self._git('rev-parse', '--verify', '--quiet', f'{self.branch}^{{commit}}')
        except SourceError as e:
            raise SourceError(f'Branch {self.branch!r} not found in {self.repo_path}') from e

        metas, _ = self._list_metas()
        last_times = [t for t in (parse_timestamp(m.last_updated) for m in metas) if t is not None]
        name = self.repo_path.resolve().name

        return [
            ProjectInfo(
                project_id=str(self.repo_path),
                name=name,
                path=str(self.repo_path),
                session_count=len(metas),
                last_used=max(last_times, key=lambda t: t.timestamp()) if last_times else None,
            )
        ]

    async def list_sessions(self, project_id: str) -> list[SessionInfo]:
        """List archived sessions, most recent first. project_id is ignored (one project per repo)."""
        metas, archives = self._list_metas()
        sessions = [self._session_info(meta, archives) for meta in metas]
        sessions.sort(
            key=lambda s: s.last_time.timestamp() if s.last_time is not None else float('-inf'),
            reverse=True,
        )
        return sessions

    async def load_session(self, session_id: str, logger: LoggerProtocol) -> Session:
        """
        Load an archived session by ID, prefix or slug.

        Raises:
            SessionNotFoundError: If no sidecar matches or the archive is missing
            SessionReadError: If the archive cannot be decompressed
        """
        info = await self.find_session(session_id)
        await logger.info(f'Reading {info.location} from {self.branch}')

        data = self._read_blob(info.location)
        if data is None:
            raise SessionNotFoundError(session_id)

        location = f'{self.branch}:{info.location}'
        stream = io.BytesIO(_decompress(data, info.location, location))
        return await self.loader.load_stream(stream, logger, session_id=info.session_id, location=location)

    async def find_session(self, query: str) -> SessionInfo:
        """
        Find an archived session by exact ID, unique ID prefix, then slug.

        Raises:
            SessionNotFoundError: If nothing matches
            AmbiguousSessionError: If the ID prefix matches several sessions
        """
        if not query:
            raise SessionNotFoundError(query)

        sessions = await self.list_sessions(str(self.repo_path))

        for info in sessions:
            if info.session_id == query:
                return info

        matches = [info for info in sessions if info.session_id.startswith(query)]
        if len(matches) > 1:
            raise AmbiguousSessionError(query, sorted(info.session_id for info in matches))
        if matches:
            return matches[0]

        for info in sessions:
            if info.slug == query:
                return info

        raise SessionNotFoundError(query)

    # ==========================================================================
    # Git helpers
    # ==========================================================================

    def _git(self, *args: str) -> bytes:
        """Run git against the repository, raising SourceError on failure."""
        try:
            result = subprocess.run(
                [self.git_executable, '-C', str(self.repo_path), *args],
                capture_output=True,
                check=False,
            )
        except OSError as e:
            raise SourceError(f'Failed to run {self.git_executable}: {e}') from e

        if result.returncode != 0:
            stderr = result.stderr.decode('utf-8', errors='replace').strip()
            raise SourceError(f'git {" ".join(args)}: {stderr}')

        return result.stdout

    def _list_files(self) -> list[str]:
        out = self._git('ls-tree', '--name-only', self.branch, f'{ARCHIVE_DIR}/')
        return [line.strip() for line in out.decode('utf-8').splitlines() if line.strip()]

    def _list_metas(self) -> tuple[list[ArchiveMeta], dict[str, str]]:
        """
        Read every sidecar on the branch; unreadable or invalid sidecars are skipped.

        Returns:
            The sidecars, and a map of session ID to the archive file on the branch
        """
        files = self._list_files()
        archives = {
            name.removeprefix(f'{ARCHIVE_DIR}/').split('.', 1)[0]: name
            for name in files
            if name.endswith(ARCHIVE_SUFFIXES)
        }

        metas: list[ArchiveMeta] = []
        for name in files:
            if not name.endswith(META_SUFFIX):
                continue
            data = self._read_blob(name)
            if data is None:
                continue
            try:
                metas.append(ArchiveMeta.model_validate_json(data))
            except pydantic.ValidationError:
                continue
        return metas, archives

    def _read_blob(self, path: str) -> bytes | None:
        try:
            return self._git('show', f'{self.branch}:{path}')
        except SourceError:
            return None

    def _session_info(self, meta: ArchiveMeta, archives: dict[str, str]) -> SessionInfo:
        archive = archives.get(meta.session_id, f'{ARCHIVE_DIR}/{meta.session_id}{ARCHIVE_SUFFIXES[0]}')
        return SessionInfo(
            session_id=meta.session_id,
            location=archive,
            slug=meta.slug,
            model=meta.models[0] if meta.models else '',
            turn_count=meta.user_turns,
            first_time=parse_timestamp(meta.started),
            last_time=parse_timestamp(meta.last_updated),
            size_bytes=meta.compressed_size,
        )


def _decompress(data: bytes, archive: str, location: str) -> bytes:
    """Decompress an archive blob according to its suffix."""
    try:
        if archive.endswith('.zst'):
            with zstandard.ZstdDecompressor().stream_reader(io.BytesIO(data)) as reader:
                return reader.read()
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error, zstandard.ZstdError) as e:
        raise SessionReadError(location, f'cannot decompress: {e}') from e
