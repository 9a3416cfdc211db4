"""
Decoded session events.

An Event is one JSONL line after decoding: envelope fields normalized to
plain values and the record's `message` resolved once into a typed payload.
The segmenter only ever sees these models, never raw JSON.

Payload union (discriminator 'kind'):
- UserText: typed prompt (string content)
- UserToolResults: tool results (array content)
- AssistantContent: model name plus text/thinking/tool_use items
- None: message absent or not parseable under its expected shape
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Annotated, Any, Literal

import pydantic

from claude_replay.schemas.base import StrictModel

# ==============================================================================
# User Payloads
# ==============================================================================


class ToolResult(StrictModel):
    """One tool result carried by a user record."""

    tool_use_id: str
    text: str
    is_error: bool = False


class UserText(StrictModel):
    """User message whose content is a plain string."""

    kind: Literal['user_text'] = 'user_text'
    text: str


class UserToolResults(StrictModel):
    """User message whose content is an array; only tool_result entries are kept."""

    kind: Literal['tool_results'] = 'tool_results'
    results: Sequence[ToolResult]


# ==============================================================================
# Assistant Payload
# ==============================================================================


class AssistantText(StrictModel):
    kind: Literal['text'] = 'text'
    text: str


class AssistantThinking(StrictModel):
    kind: Literal['thinking'] = 'thinking'
    thinking: str


class AssistantToolUse(StrictModel):
    kind: Literal['tool_use'] = 'tool_use'
    id: str
    name: str
    input: Mapping[str, Any] | None = None  # None when the input is not a JSON object
    raw_input: str = ''  # Compact JSON of the input, for display


AssistantItem = Annotated[
    AssistantText | AssistantThinking | AssistantToolUse,
    pydantic.Field(discriminator='kind'),
]


class AssistantContent(StrictModel):
    """Assistant message: model name and ordered content items."""

    kind: Literal['assistant'] = 'assistant'
    model: str = ''
    items: Sequence[AssistantItem] = ()


EventPayload = Annotated[
    UserText | UserToolResults | AssistantContent,
    pydantic.Field(discriminator='kind'),
]


# ==============================================================================
# Event
# ==============================================================================

# 'noise' events (progress, file-history-snapshot) never leave the decoder
EventKind = Literal['user', 'assistant', 'system', 'noise']


class Event(StrictModel):
    """One decoded line of a session file."""

    kind: EventKind
    uuid: str = ''
    parent_uuid: str | None = None
    session_id: str = ''
    timestamp: datetime | None = None
    cwd: str = ''
    git_branch: str = ''
    slug: str = ''
    version: str = ''
    is_sidechain: bool = False
    is_meta: bool = False
    subtype: str = ''
    duration_ms: float = 0.0
    payload: EventPayload | None = None
