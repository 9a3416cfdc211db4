"""Tests for MCP server source selection."""

from __future__ import annotations

import importlib
from pathlib import Path

import pytest

from claude_replay.config.mcp import McpServerSettings
from claude_replay.storage import GitBranchSource, LocalDirectorySource, SessionSource

server_module = importlib.import_module('claude_replay.mcp.server')


def test_local_source_by_default(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(server_module, 'settings', McpServerSettings(CLAUDE_DIR=tmp_path, MCP_GIT_REPO=None))

    source, description = server_module.create_source()

    assert isinstance(source, LocalDirectorySource)
    assert isinstance(source, SessionSource)
    assert source.claude_dir == tmp_path
    assert description == str(tmp_path)


def test_git_source_when_repo_configured(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(
        server_module,
        'settings',
        McpServerSettings(MCP_GIT_REPO=tmp_path, SESSIONS_BRANCH='archive'),
    )

    source, description = server_module.create_source()

    assert isinstance(source, GitBranchSource)
    assert source.branch == 'archive'
    assert description == f'{tmp_path} (archive branch)'
