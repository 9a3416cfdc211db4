"""Shared pytest fixtures."""

from __future__ import annotations

import os
import shutil
from pathlib import Path

import pytest

from tests.helpers import (
    BASIC_SESSION_ID,
    EDITS_SESSION_ID,
    SCRATCH_DIR,
    SESSIONS_DIR,
    SHELL_SESSION_ID,
    WEBAPP_DIR,
    jsonl,
    user,
)


@pytest.fixture
def claude_dir(tmp_path: Path) -> Path:
    """A Claude directory with two projects, an agent transcript and a session without turns."""
    webapp = tmp_path / 'projects' / WEBAPP_DIR
    scratch = tmp_path / 'projects' / SCRATCH_DIR
    webapp.mkdir(parents=True)
    scratch.mkdir(parents=True)

    shutil.copy(SESSIONS_DIR / 'basic.jsonl', webapp / f'{BASIC_SESSION_ID}.jsonl')
    shutil.copy(SESSIONS_DIR / 'shell_and_commands.jsonl', webapp / f'{SHELL_SESSION_ID}.jsonl')
    shutil.copy(SESSIONS_DIR / 'file_edits.jsonl', scratch / f'{EDITS_SESSION_ID}.jsonl')
    (webapp / 'agent-1234abcd.jsonl').write_bytes(jsonl(user('subagent task', isSidechain=True)))
    (webapp / 'ffffffff-empty.jsonl').write_bytes(jsonl({'type': 'summary', 'summary': 'nothing'}))

    # Fixed mtimes so project ordering is deterministic
    for path in webapp.iterdir():
        os.utime(path, (1_700_000_000, 1_700_000_000))
    os.utime(scratch / f'{EDITS_SESSION_ID}.jsonl', (1_800_000_000, 1_800_000_000))
    return tmp_path
