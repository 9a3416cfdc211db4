"""
Claude Replay MCP Server.

Exposes session listings, reconstructed sessions and line diffs as MCP tools.

Setup:
    claude mcp add --scope user claude-replay -- claude-replay-mcp

    # Serve sessions archived on a git branch instead of ~/.claude
    MCP_GIT_REPO=/path/to/repo claude-replay-mcp

Example:
    # Most recent sessions of a project
    list_sessions(project_id='/Users/me/.claude/projects/-Users-me-app')

    # One turn of a session, by slug
    load_session(query='glittery-tumbling-parrot', turn=3)
"""

from __future__ import annotations

import contextlib
import sys
from collections.abc import AsyncIterator
from typing import Any

import attrs
from mcp.server.fastmcp import Context, FastMCP

from claude_replay.config.mcp import settings
from claude_replay.domain import Session, Turn
from claude_replay.mcp.utils import DualLogger
from claude_replay.schemas.operations.diff import DiffOp, FileChange
from claude_replay.schemas.operations.discovery import ProjectInfo, SessionInfo
from claude_replay.services.diff import compute_diff
from claude_replay.services.file_changes import file_changes
from claude_replay.storage import GitBranchSource, LocalDirectorySource, SessionSource

# ==============================================================================
# Server State (immutable)
# ==============================================================================


@attrs.define(frozen=True)
class ServerState:
    """
    Immutable server state initialized at startup.

    Holds the session source every tool reads from.
    """

    source: SessionSource
    source_description: str


def create_source() -> tuple[SessionSource, str]:
    """Build the session source selected by the MCP settings."""
    if settings.MCP_GIT_REPO is not None:
        source = GitBranchSource(
            settings.MCP_GIT_REPO,
            branch=settings.SESSIONS_BRANCH,
            git_executable=settings.GIT_EXECUTABLE,
            max_line_bytes=settings.MAX_LINE_BYTES,
        )
        return source, f'{settings.MCP_GIT_REPO} ({settings.SESSIONS_BRANCH} branch)'

    return LocalDirectorySource(settings.CLAUDE_DIR, max_line_bytes=settings.MAX_LINE_BYTES), str(settings.CLAUDE_DIR)


# ==============================================================================
# Lifespan
# ==============================================================================


@contextlib.asynccontextmanager
async def lifespan(mcp_server: FastMCP) -> AsyncIterator[None]:
    """
    Manage server lifecycle and state initialization.

    Creates ServerState at startup and registers tools over it.
    """
    source, description = create_source()
    state = ServerState(source=source, source_description=description)

    # Register tools with closure over state
    register_tools(state)

    print(f'[MCP Server] Sessions from: {description}', file=sys.stderr)

    yield  # Setup successful; application active


# ==============================================================================
# Server Setup
# ==============================================================================

server = FastMCP('claude-replay', lifespan=lifespan)


# ==============================================================================
# Tool Registration (Closure Pattern)
# ==============================================================================


def register_tools(state: ServerState) -> None:
    """
    Register MCP tools with closure over server state.

    Args:
        state: Server state containing the session source
    """

    @server.tool()
    async def list_projects() -> list[ProjectInfo]:
        """
        List projects with sessions, most recently used first.

        Returns:
            Projects with display name, decoded path, session count and last use.
            Pass project_id to list_sessions.
        """
        return await state.source.list_projects()

    @server.tool()
    async def list_sessions(project_id: str) -> list[SessionInfo]:
        """
        List sessions of a project, most recent first.

        Args:
            project_id: project_id from list_projects

        Returns:
            Session summaries (slug, model, approximate turn count, time range)
        """
        return await state.source.list_sessions(project_id)

    @server.tool()
    async def find_session(query: str) -> SessionInfo:
        """
        Find a session by ID, unique ID prefix, slug or .jsonl path.

        Args:
            query: Session ID, prefix (e.g. '019b5232') or slug
        """
        return await state.source.find_session(query)

    @server.tool()
    async def load_session(
        query: str,
        turn: int | None = None,
        ctx: Context[Any, Any, Any] | None = None,
    ) -> Session | Turn:
        """
        Load a session reconstructed into turns.

        Args:
            query: Session ID, unique ID prefix, slug or .jsonl path
            turn: Only return this turn (1-based)

        Returns:
            The whole Session, or a single Turn when turn is given

        Examples:
            # Whole session
            session = await load_session('019b5232')

            # Third turn only
            turn = await load_session('glittery-tumbling-parrot', turn=3)
        """
        if ctx is None:
            raise RuntimeError('Context is required - must be called via FastMCP')
        logger = DualLogger(ctx)

        session = await state.source.load_session(query, logger)
        if turn is None:
            return session

        if not 1 <= turn <= len(session.turns):
            raise ValueError(f'Turn {turn} out of range (session has {len(session.turns)} turns)')
        return session.turns[turn - 1]

    @server.tool()
    async def session_file_changes(
        query: str,
        turn: int | None = None,
        ctx: Context[Any, Any, Any] | None = None,
    ) -> list[FileChange]:
        """
        Diffs of the Edit and Write tool invocations in a session.

        Args:
            query: Session ID, unique ID prefix, slug or .jsonl path
            turn: Only this turn (1-based)
        """
        if ctx is None:
            raise RuntimeError('Context is required - must be called via FastMCP')
        logger = DualLogger(ctx)

        session = await state.source.load_session(query, logger)
        turns = [t for t in session.turns if turn is None or t.number == turn]
        changes = [change for t in turns for change in file_changes(t)]

        await logger.info(f'{len(changes)} file changes in {len(turns)} turns')
        return changes

    @server.tool()
    async def diff_text(old: str, new: str) -> list[DiffOp]:
        """
        Line diff of two texts.

        Args:
            old: Original text
            new: Modified text

        Returns:
            Edit script of context/added/removed lines; dropping removed lines
            yields `new`, dropping added lines yields `old`
        """
        return compute_diff(old, new)


# ==============================================================================
# Server Entry Point
# ==============================================================================


def main() -> None:
    """Run the MCP server."""
    server.run()


if __name__ == '__main__':
    main()
