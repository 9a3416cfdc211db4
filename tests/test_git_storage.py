"""Tests for GitBranchSource against a throwaway repository."""

from __future__ import annotations

import asyncio
import gzip
import json
import shutil
import subprocess
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest
import zstandard

from claude_replay.exceptions import AmbiguousSessionError, SessionNotFoundError, SessionReadError, SourceError
from claude_replay.storage.git import GitBranchSource
from tests.helpers import BASIC_SESSION_ID, EDITS_SESSION_ID, SESSIONS_DIR, SHELL_SESSION_ID, RecordingLogger

pytestmark = pytest.mark.skipif(shutil.which('git') is None, reason='git not installed')

BRANCH = 'claude-sessions'


def _git(repo: Path, *args: str) -> None:
    subprocess.run(
        [
            'git',
            '-C',
            str(repo),
            '-c',
            'user.name=Replay Tests',
            '-c',
            'user.email=tests@example.com',
            '-c',
            'commit.gpgsign=false',
            *args,
        ],
        check=True,
        capture_output=True,
    )


def _meta(session_id: str, **fields: Any) -> str:
    return json.dumps({'session_id': session_id, **fields})


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """A repository whose sessions branch holds one gzip and one zstd archive."""
    repo = tmp_path / 'webapp'
    sessions = repo / 'sessions'
    sessions.mkdir(parents=True)

    basic = (SESSIONS_DIR / 'basic.jsonl').read_bytes()
    shell = (SESSIONS_DIR / 'shell_and_commands.jsonl').read_bytes()
    (sessions / f'{BASIC_SESSION_ID}.jsonl.gz').write_bytes(gzip.compress(basic))
    (sessions / f'{SHELL_SESSION_ID}.jsonl.zst').write_bytes(zstandard.ZstdCompressor().compress(shell))
    (sessions / f'{BASIC_SESSION_ID}.meta.json').write_text(
        _meta(
            BASIC_SESSION_ID,
            slug='quiet-morning-river',
            started='2025-06-01T10:00:00.000Z',
            last_updated='2025-06-01T10:05:04.000Z',
            models=['claude-sonnet-4-5-20250929'],
            user_turns=2,
            assistant_turns=3,
            compressed_size=812,
            archived_by='session-archiver 1.2',
        )
    )
    (sessions / f'{SHELL_SESSION_ID}.meta.json').write_text(
        _meta(
            SHELL_SESSION_ID,
            slug='bright-copper-kettle',
            started='2025-06-02T11:00:00.000Z',
            last_updated='2025-06-02T11:02:02.000Z',
            models=['claude-opus-4-1-20250805'],
            user_turns=3,
        )
    )
    (sessions / 'broken.meta.json').write_text('{"slug": "no session id"}')

    _git(repo, 'init', '-q')
    _git(repo, 'symbolic-ref', 'HEAD', f'refs/heads/{BRANCH}')
    _git(repo, 'add', 'sessions')
    _git(repo, 'commit', '-q', '-m', 'Archive sessions')
    return repo


# ==============================================================================
# Listing
# ==============================================================================


def test_list_projects(repo: Path) -> None:
    projects = asyncio.run(GitBranchSource(repo).list_projects())

    assert len(projects) == 1
    project = projects[0]
    assert project.name == 'webapp'
    assert project.project_id == str(repo)
    # The sidecar without session_id is skipped
    assert project.session_count == 2
    assert project.last_used == datetime(2025, 6, 2, 11, 2, 2, tzinfo=UTC)


def test_missing_branch(repo: Path) -> None:
    with pytest.raises(SourceError, match="Branch 'archive' not found"):
        asyncio.run(GitBranchSource(repo, branch='archive').list_projects())


def test_not_a_repository(tmp_path: Path) -> None:
    with pytest.raises(SourceError):
        asyncio.run(GitBranchSource(tmp_path).list_sessions(str(tmp_path)))


def test_list_sessions(repo: Path) -> None:
    sessions = asyncio.run(GitBranchSource(repo).list_sessions(str(repo)))

    assert [s.session_id for s in sessions] == [SHELL_SESSION_ID, BASIC_SESSION_ID]
    shell, basic = sessions
    assert shell.location == f'sessions/{SHELL_SESSION_ID}.jsonl.zst'
    assert shell.model == 'claude-opus-4-1-20250805'
    assert shell.size_bytes == 0
    assert basic.location == f'sessions/{BASIC_SESSION_ID}.jsonl.gz'
    assert basic.turn_count == 2
    assert basic.size_bytes == 812
    assert basic.first_time == datetime(2025, 6, 1, 10, 0, tzinfo=UTC)


# ==============================================================================
# Lookup and loading
# ==============================================================================


@pytest.mark.parametrize('query', [BASIC_SESSION_ID, '0a1b2c3d-1111', 'quiet-morning-river'])
def test_find_session(repo: Path, query: str) -> None:
    info = asyncio.run(GitBranchSource(repo).find_session(query))

    assert info.session_id == BASIC_SESSION_ID


def test_find_session_ambiguous_prefix(repo: Path) -> None:
    with pytest.raises(AmbiguousSessionError):
        asyncio.run(GitBranchSource(repo).find_session('0a1b2c3d'))


def test_find_session_not_found(repo: Path) -> None:
    with pytest.raises(SessionNotFoundError):
        asyncio.run(GitBranchSource(repo).find_session(EDITS_SESSION_ID))


def test_load_gzip_archive(repo: Path) -> None:
    logger = RecordingLogger()

    session = asyncio.run(GitBranchSource(repo).load_session('quiet-morning-river', logger))

    assert session.id == BASIC_SESSION_ID
    assert session.path == f'{BRANCH}:sessions/{BASIC_SESSION_ID}.jsonl.gz'
    assert [t.user_text for t in session.turns] == ['Add a health check endpoint', 'Now add a test']
    assert logger.messages[0] == ('info', f'Reading sessions/{BASIC_SESSION_ID}.jsonl.gz from {BRANCH}')


def test_load_zstd_archive(repo: Path) -> None:
    session = asyncio.run(GitBranchSource(repo).load_session(SHELL_SESSION_ID, RecordingLogger()))

    assert [t.origin for t in session.turns] == ['shell', 'command', 'prompt']


def test_sidecar_without_archive(repo: Path) -> None:
    (repo / 'sessions' / f'{EDITS_SESSION_ID}.meta.json').write_text(_meta(EDITS_SESSION_ID))
    _git(repo, 'add', 'sessions')
    _git(repo, 'commit', '-q', '-m', 'Sidecar only')

    with pytest.raises(SessionNotFoundError):
        asyncio.run(GitBranchSource(repo).load_session(EDITS_SESSION_ID, RecordingLogger()))


def test_corrupt_archive(repo: Path) -> None:
    (repo / 'sessions' / f'{BASIC_SESSION_ID}.jsonl.gz').write_bytes(b'not gzip at all')
    _git(repo, 'commit', '-q', '-am', 'Corrupt archive')

    with pytest.raises(SessionReadError, match='cannot decompress'):
        asyncio.run(GitBranchSource(repo).load_session(BASIC_SESSION_ID, RecordingLogger()))


def test_one_source_follows_rearchived_sessions(repo: Path) -> None:
    source = GitBranchSource(repo)
    before = asyncio.run(source.list_sessions(str(repo)))

    sessions = repo / 'sessions'
    basic = (SESSIONS_DIR / 'basic.jsonl').read_bytes()
    (sessions / f'{BASIC_SESSION_ID}.jsonl.gz').unlink()
    (sessions / f'{BASIC_SESSION_ID}.jsonl.zst').write_bytes(zstandard.ZstdCompressor().compress(basic))
    _git(repo, 'add', '-A', 'sessions')
    _git(repo, 'commit', '-q', '-m', 'Recompress with zstd')

    after = asyncio.run(source.list_sessions(str(repo)))
    session = asyncio.run(source.load_session(BASIC_SESSION_ID, RecordingLogger()))

    assert before[1].location == f'sessions/{BASIC_SESSION_ID}.jsonl.gz'
    assert after[1].location == f'sessions/{BASIC_SESSION_ID}.jsonl.zst'
    assert session.path == f'{BRANCH}:sessions/{BASIC_SESSION_ID}.jsonl.zst'
    # Listing leaves nothing behind on the source
    assert set(vars(source)) == {'repo_path', 'branch', 'git_executable', 'loader'}
