"""Tests for the claude-replay command-line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from claude_replay.cli.main import app, format_bytes
from claude_replay.schemas.operations.discovery import SessionInfo
from claude_replay.storage import LocalDirectorySource
from tests.helpers import BASIC_SESSION_ID, SHELL_SESSION_ID, WEBAPP_DIR

runner = CliRunner()


def test_diff(tmp_path: Path) -> None:
    old = tmp_path / 'old.txt'
    new = tmp_path / 'new.txt'
    old.write_text('a\nb\nc')
    new.write_text('a\nx\nc')

    result = runner.invoke(app, ['diff', str(old), str(new)])

    assert result.exit_code == 0
    assert result.stdout.splitlines() == [' a', '-b', '+x', ' c']


def test_diff_missing_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ['diff', str(tmp_path / 'a.txt'), str(tmp_path / 'b.txt')])

    assert result.exit_code == 1
    assert 'Error:' in result.output


def test_list_projects(claude_dir: Path) -> None:
    result = runner.invoke(app, ['list', '--claude-dir', str(claude_dir)])

    assert result.exit_code == 0
    lines = result.stdout.splitlines()
    assert lines[0].split() == ['NAME', 'PATH', 'SESSIONS', 'LAST', 'USED']
    assert lines[1].split()[:3] == ['w', '/w', '1']
    assert lines[2].split()[:3] == ['webapp', '/home/dev/webapp', '3']


@pytest.mark.parametrize('project', ['webapp', '/home/dev/webapp', '-home-dev-webapp'])
def test_list_sessions_of_project(claude_dir: Path, project: str) -> None:
    result = runner.invoke(app, ['list', project, '--claude-dir', str(claude_dir)])

    assert result.exit_code == 0
    assert 'bright-copper-kettle' in result.stdout
    assert 'quiet-morning-river' in result.stdout
    assert BASIC_SESSION_ID[:8] in result.stdout


def test_list_unknown_project(claude_dir: Path) -> None:
    result = runner.invoke(app, ['list', 'nowhere', '--claude-dir', str(claude_dir)])

    assert result.exit_code == 1
    assert 'project not found: nowhere' in result.output


def test_show_prints_session_json(claude_dir: Path) -> None:
    result = runner.invoke(app, ['show', 'quiet-morning-river', '--claude-dir', str(claude_dir)])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data['id'] == BASIC_SESSION_ID
    assert [t['user_text'] for t in data['turns']] == ['Add a health check endpoint', 'Now add a test']


def test_show_single_turn(claude_dir: Path) -> None:
    result = runner.invoke(app, ['show', SHELL_SESSION_ID, '--turn', '1', '--claude-dir', str(claude_dir)])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data['user_text'] == '!git status'
    assert data['origin'] == 'shell'


def test_show_turn_out_of_range(claude_dir: Path) -> None:
    result = runner.invoke(app, ['show', SHELL_SESSION_ID, '-t', '4', '--claude-dir', str(claude_dir)])

    assert result.exit_code == 1
    assert 'turn 4 out of range (1-3)' in result.output


@pytest.mark.parametrize(
    ('query', 'message'),
    [('nothing-like-this', 'session not found'), ('0a1b2c3d', 'is ambiguous')],
)
def test_show_lookup_errors(claude_dir: Path, query: str, message: str) -> None:
    result = runner.invoke(app, ['show', query, '--claude-dir', str(claude_dir)])

    assert result.exit_code == 1
    assert message in result.output


def test_info(claude_dir: Path) -> None:
    result = runner.invoke(app, ['info', BASIC_SESSION_ID[:13], '--claude-dir', str(claude_dir)])

    assert result.exit_code == 0
    assert f'Session: {BASIC_SESSION_ID}' in result.stdout
    assert 'Slug: quiet-morning-river' in result.stdout
    assert 'Turns: 2' in result.stdout
    assert 'Tool calls: 1' in result.stdout
    assert 'Started: 2025-06-01 10:00' in result.stdout
    assert 'Reported duration: 0:00:04.200000' in result.stdout
    assert 'Git branch: main' in result.stdout
    assert f'Location: {claude_dir / "projects" / WEBAPP_DIR / BASIC_SESSION_ID}.jsonl' in result.stdout


def test_info_resolves_the_query_once(claude_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    queries: list[str] = []
    find_session = LocalDirectorySource.find_session

    async def counting_find_session(self: LocalDirectorySource, query: str) -> SessionInfo:
        queries.append(query)
        return await find_session(self, query)

    monkeypatch.setattr(LocalDirectorySource, 'find_session', counting_find_session)

    result = runner.invoke(app, ['info', 'quiet-morning-river', '--claude-dir', str(claude_dir)])

    assert result.exit_code == 0
    assert queries == ['quiet-morning-river']


def test_changes(claude_dir: Path) -> None:
    result = runner.invoke(app, ['changes', 'amber-field-notes', '--claude-dir', str(claude_dir)])

    assert result.exit_code == 0
    assert 'Turn 1: /w/greet.py (Edit, +1 -1)' in result.stdout
    assert 'Turn 1: /w/NOTES.md (new file, +2 -0)' in result.stdout
    assert "+    return 'hello'" in result.stdout


def test_changes_of_missing_turn_prints_nothing(claude_dir: Path) -> None:
    result = runner.invoke(app, ['changes', 'amber-field-notes', '--turn', '2', '--claude-dir', str(claude_dir)])

    assert result.exit_code == 0
    assert result.stdout == ''


def test_missing_claude_dir(tmp_path: Path) -> None:
    result = runner.invoke(app, ['list', '--claude-dir', str(tmp_path / 'missing')])

    assert result.exit_code == 1
    assert 'Claude projects directory not found' in result.output


@pytest.mark.parametrize(
    ('size', 'expected'),
    [(0, '0B'), (512, '512B'), (12 * 1024, '12KB'), (int(3.4 * 1024 * 1024), '3.4MB')],
)
def test_format_bytes(size: int, expected: str) -> None:
    assert format_bytes(size) == expected
