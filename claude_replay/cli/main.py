#!/usr/bin/env python3
"""
Command-line interface for claude-replay.

Lists projects and sessions, prints reconstructed sessions, and shows line
diffs. Sessions come from the local Claude directory or, with --git, from a
repository's sessions branch.
"""

from __future__ import annotations

import asyncio
import traceback
from collections.abc import Sequence
from datetime import datetime, timedelta
from pathlib import Path

import typer

from claude_replay.cli.logger import CLILogger
from claude_replay.config.base import settings
from claude_replay.exceptions import ReplayError
from claude_replay.paths import encode_path
from claude_replay.schemas.operations.discovery import ProjectInfo, SessionInfo
from claude_replay.services.diff import compute_diff
from claude_replay.services.file_changes import file_changes
from claude_replay.storage import GitBranchSource, LocalDirectorySource, SessionSource

app = typer.Typer(
    name='claude-replay',
    help='Replay Claude Code sessions turn by turn',
    add_completion=False,
)

GIT_OPTION_HELP = 'Read sessions from the sessions branch of this git repository'
CLAUDE_DIR_OPTION_HELP = 'Claude data directory (default: CLAUDE_DIR setting, ~/.claude)'


def _make_source(git_repo: Path | None, claude_dir: Path | None) -> SessionSource:
    """Build the session source selected by the command-line options."""
    if git_repo is not None:
        return GitBranchSource(
            git_repo,
            branch=settings.SESSIONS_BRANCH,
            git_executable=settings.GIT_EXECUTABLE,
            max_line_bytes=settings.MAX_LINE_BYTES,
        )
    return LocalDirectorySource(claude_dir or settings.CLAUDE_DIR, max_line_bytes=settings.MAX_LINE_BYTES)


def _fail(error: Exception) -> typer.Exit:
    typer.secho(f'Error: {error}', fg=typer.colors.RED, err=True)
    return typer.Exit(1)


# ==============================================================================
# Commands
# ==============================================================================


@app.command('list')
def list_(
    project: str | None = typer.Argument(None, help='Project name, directory name or path (default: list projects)'),
    git: Path | None = typer.Option(None, '--git', help=GIT_OPTION_HELP),
    claude_dir: Path | None = typer.Option(None, '--claude-dir', help=CLAUDE_DIR_OPTION_HELP),
) -> None:
    """List projects, or the sessions of one project."""
    asyncio.run(_list_async(project, git, claude_dir))


@app.command()
def show(
    query: str = typer.Argument(..., help='Session ID, ID prefix, slug or .jsonl path'),
    turn: int | None = typer.Option(None, '--turn', '-t', help='Only print this turn (1-based)'),
    git: Path | None = typer.Option(None, '--git', help=GIT_OPTION_HELP),
    claude_dir: Path | None = typer.Option(None, '--claude-dir', help=CLAUDE_DIR_OPTION_HELP),
    verbose: bool = typer.Option(False, '--verbose', '-v', help='Verbose output'),
) -> None:
    """Load a session and print it as JSON."""
    asyncio.run(_show_async(query, turn, git, claude_dir, verbose))


@app.command()
def info(
    query: str = typer.Argument(..., help='Session ID, ID prefix, slug or .jsonl path'),
    git: Path | None = typer.Option(None, '--git', help=GIT_OPTION_HELP),
    claude_dir: Path | None = typer.Option(None, '--claude-dir', help=CLAUDE_DIR_OPTION_HELP),
    verbose: bool = typer.Option(False, '--verbose', '-v', help='Verbose output'),
) -> None:
    """Show a session summary: slug, model, turns and time range."""
    asyncio.run(_info_async(query, git, claude_dir, verbose))


@app.command()
def changes(
    query: str = typer.Argument(..., help='Session ID, ID prefix, slug or .jsonl path'),
    turn: int | None = typer.Option(None, '--turn', '-t', help='Only this turn (1-based)'),
    git: Path | None = typer.Option(None, '--git', help=GIT_OPTION_HELP),
    claude_dir: Path | None = typer.Option(None, '--claude-dir', help=CLAUDE_DIR_OPTION_HELP),
    verbose: bool = typer.Option(False, '--verbose', '-v', help='Verbose output'),
) -> None:
    """Print the Edit/Write file changes of a session as diffs."""
    asyncio.run(_changes_async(query, turn, git, claude_dir, verbose))


@app.command()
def diff(
    old_file: Path = typer.Argument(..., help='Original file'),
    new_file: Path = typer.Argument(..., help='Modified file'),
) -> None:
    """Print a line diff of two files ('+' added, '-' removed, ' ' unchanged)."""
    try:
        old = old_file.read_text(encoding='utf-8')
        new = new_file.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise _fail(e)

    for op in compute_diff(old, new):
        typer.echo(f'{op.prefix}{op.text}')


# ==============================================================================
# Async implementations
# ==============================================================================


async def _list_async(project: str | None, git: Path | None, claude_dir: Path | None) -> None:
    """Async implementation of list command."""
    source = _make_source(git, claude_dir)
    try:
        projects = await source.list_projects()

        if git is not None:
            # A repository is a single project: go straight to its sessions
            if not projects or projects[0].session_count == 0:
                typer.echo(f'No sessions found on branch {settings.SESSIONS_BRANCH}')
                return
            _print_sessions(await source.list_sessions(projects[0].project_id))
            return

        if project is None:
            _print_projects(projects)
            return

        matched = _match_project(projects, project)
        if matched is None:
            typer.secho(f'Error: project not found: {project}', fg=typer.colors.RED, err=True)
            raise typer.Exit(1)
        _print_sessions(await source.list_sessions(matched.project_id))

    except ReplayError as e:
        raise _fail(e)


async def _show_async(query: str, turn: int | None, git: Path | None, claude_dir: Path | None, verbose: bool) -> None:
    """Async implementation of show command."""
    logger = CLILogger(verbose=verbose)
    source = _make_source(git, claude_dir)
    try:
        session = await source.load_session(query, logger)
    except ReplayError as e:
        raise _fail(e)

    if turn is None:
        typer.echo(session.model_dump_json(indent=2))
        return

    if not 1 <= turn <= len(session.turns):
        typer.secho(f'Error: turn {turn} out of range (1-{len(session.turns)})', fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    typer.echo(session.turns[turn - 1].model_dump_json(indent=2))


async def _info_async(query: str, git: Path | None, claude_dir: Path | None, verbose: bool) -> None:
    """Async implementation of info command."""
    logger = CLILogger(verbose=verbose)
    source = _make_source(git, claude_dir)
    try:
        session = await source.load_session(query, logger)
    except ReplayError as e:
        raise _fail(e)
    except Exception as e:
        await logger.error(f'Failed to load session: {e}')
        if verbose:
            traceback.print_exc()
        raise typer.Exit(1)

    typer.echo(f'Session: {session.id}')
    if session.slug:
        typer.echo(f'Slug: {session.slug}')
    typer.echo(f'Location: {session.path}')
    typer.echo()

    typer.secho('Conversation:', bold=True)
    typer.echo(f'  Model: {session.model or "-"}')
    typer.echo(f'  Turns: {len(session.turns)}')
    tool_calls = sum(1 for t in session.turns for b in t.blocks if b.type == 'tool_use')
    typer.echo(f'  Tool calls: {tool_calls}')
    typer.echo()

    typer.secho('Timestamps:', bold=True)
    typer.echo(f'  Started: {_format_time(session.start_time)}')
    typer.echo(f'  Last turn: {_format_time(session.end_time)}')
    total = sum((t.duration for t in session.turns), timedelta())
    if total:
        typer.echo(f'  Reported duration: {total}')

    if session.cwd or session.git_branch or session.version:
        typer.echo()
        typer.secho('Environment:', bold=True)
        if session.cwd:
            typer.echo(f'  Working directory: {session.cwd}')
        if session.git_branch:
            typer.echo(f'  Git branch: {session.git_branch}')
        if session.version:
            typer.echo(f'  Claude Code version: {session.version}')


async def _changes_async(
    query: str,
    turn: int | None,
    git: Path | None,
    claude_dir: Path | None,
    verbose: bool,
) -> None:
    """Async implementation of changes command."""
    logger = CLILogger(verbose=verbose)
    source = _make_source(git, claude_dir)
    try:
        session = await source.load_session(query, logger)
    except ReplayError as e:
        raise _fail(e)

    turns = session.turns if turn is None else [t for t in session.turns if t.number == turn]
    for t in turns:
        for change in file_changes(t):
            label = 'new file' if change.is_new_file else change.tool_name
            typer.secho(
                f'Turn {t.number}: {change.path} ({label}, +{change.added} -{change.removed})',
                fg=typer.colors.CYAN,
            )
            for op in change.ops:
                color = {'added': typer.colors.GREEN, 'removed': typer.colors.RED}.get(op.kind)
                typer.secho(f'{op.prefix}{op.text}', fg=color)


# ==============================================================================
# Output helpers
# ==============================================================================


def _match_project(projects: Sequence[ProjectInfo], query: str) -> ProjectInfo | None:
    """Match a project by display name, directory name, decoded path or real path."""
    encoded = encode_path(query)
    for project in projects:
        dir_name = Path(project.project_id).name
        if query in (project.name, dir_name, project.path) or encoded == dir_name:
            return project
    return None


def _print_projects(projects: Sequence[ProjectInfo]) -> None:
    rows = [[p.name, p.path, str(p.session_count), _format_time(p.last_used)] for p in projects]
    _print_table(['NAME', 'PATH', 'SESSIONS', 'LAST USED'], rows)


def _print_sessions(sessions: Sequence[SessionInfo]) -> None:
    rows = [
        [
            s.slug or '-',
            s.session_id[:8],
            s.model,
            str(s.turn_count),
            _format_time(s.last_time),
            format_bytes(s.size_bytes),
        ]
        for s in sessions
    ]
    _print_table(['SLUG', 'ID', 'MODEL', 'TURNS', 'DATE', 'SIZE'], rows)


def _print_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
    widths = [max(len(row[i]) for row in [headers, *rows]) for i in range(len(headers))]
    for row in [headers, *rows]:
        typer.echo('  '.join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip())


def _format_time(value: datetime | None) -> str:
    return value.strftime('%Y-%m-%d %H:%M') if value is not None else '-'


def format_bytes(size: int) -> str:
    """Human readable size: 512B, 12KB, 3.4MB."""
    if size >= 1024 * 1024:
        return f'{size / (1024 * 1024):.1f}MB'
    if size >= 1024:
        return f'{size / 1024:.0f}KB'
    return f'{size}B'


def main() -> None:
    """Entry point for CLI."""
    app()


if __name__ == '__main__':
    main()
