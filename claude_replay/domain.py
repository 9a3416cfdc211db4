"""
Domain models for replaying Claude Code sessions.

This module contains the reconstructed conversation structure built on top of
the decoded events from schemas/session/.

Separation of concerns:
- schemas/session/models.py: Pure JSONL schema representations (parsing)
- schemas/session/events.py: Decoded events, one per line
- domain.py: Turns, blocks and sessions (this file)

Architecture (top-down):
1. Session - one session file, ordered turns plus session-level metadata
2. Turn - one user-initiated exchange
3. Block - one renderable unit within a turn

All models are frozen: a Session handed to a caller is never mutated again and
can be read from several threads without synchronization.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta
from typing import Annotated, Any, Literal

import pydantic

from claude_replay.schemas.base import StrictModel

# ==============================================================================
# Blocks (Discriminated Union)
# ==============================================================================


class TextBlock(StrictModel):
    """Assistant text, or the output of a shell escape."""

    type: Literal['text'] = 'text'
    text: str


class ThinkingBlock(StrictModel):
    """Extended thinking text."""

    type: Literal['thinking'] = 'thinking'
    text: str


class ToolUseBlock(StrictModel):
    """A tool invocation made by the assistant."""

    type: Literal['tool_use'] = 'tool_use'
    name: str
    id: str
    input: Mapping[str, Any] | None = None
    raw_input: str = ''


class ToolResultBlock(StrictModel):
    """
    The result of a tool invocation.

    tool_use_id normally references a ToolUseBlock earlier in the same turn;
    unmatched results are kept as-is.
    """

    type: Literal['tool_result'] = 'tool_result'
    tool_use_id: str
    text: str
    is_error: bool = False


Block = Annotated[
    TextBlock | ThinkingBlock | ToolUseBlock | ToolResultBlock,
    pydantic.Field(discriminator='type'),
]


# ==============================================================================
# Turn
# ==============================================================================

# How the turn was started: typed prompt, shell escape (!cmd) or slash command
TurnOrigin = Literal['prompt', 'shell', 'command']


class Turn(StrictModel):
    """
    One conversational turn: a user message followed by all assistant
    responses and tool exchanges until the next user-initiated message.
    """

    number: int  # 1-based, contiguous within a session
    user_text: str
    origin: TurnOrigin = 'prompt'
    timestamp: datetime | None = None  # Timestamp of the opening user record
    duration: timedelta = timedelta(0)  # From turn_duration system records, zero if never reported
    model: str = ''
    cwd: str = ''
    git_branch: str = ''
    slug: str = ''
    blocks: Sequence[Block] = ()


# ==============================================================================
# Session
# ==============================================================================


class Session(StrictModel):
    """All turns reconstructed from one session file."""

    id: str = ''
    slug: str = ''
    path: str = ''  # Source file or archive location, empty for in-memory streams
    turns: Sequence[Turn]
    model: str = ''
    start_time: datetime | None = None  # Timestamp of the first turn
    end_time: datetime | None = None  # Timestamp of the last turn
    cwd: str = ''
    git_branch: str = ''
    version: str = ''  # Claude Code version that wrote the file
