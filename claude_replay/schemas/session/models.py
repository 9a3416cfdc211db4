"""
Pydantic models for Claude Code session JSONL records (wire format).

These models describe what Claude Code writes, one JSON object per line.
They are deliberately narrower than the files themselves: only the fields
turn reconstruction reads are modeled, everything else is accepted and
ignored (PermissiveModel, extra='allow').

Key findings from real session files:
- `message` is an object {role, content, ...}; `content` is a string for
  typed prompts and an array for tool results and assistant output
- Assistant content arrays mix text, thinking and tool_use blocks; one API
  response is often split across several records sharing `message.id`
- progress and file-history-snapshot records carry no conversation content
- summary, queue-operation and custom-title records have their own minimal
  schemas and no bearing on turns
- system records with subtype=turn_duration carry `durationMs` for the turn
  that just finished (Claude Code 2.1.1+)
- Sidechain records (isSidechain=true) belong to subagent threads

Validation policy:
- Known fields are strict (a boolean written as "true" fails the record)
- Unknown content block types validate as UnknownContent and are ignored
- Timestamps are parsed from ISO 8601 strings with fractional seconds
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Annotated, Any, Literal

import pydantic

from claude_replay.schemas.types import JsonDatetime, PermissiveModel

# ==============================================================================
# Record Types
# ==============================================================================

RECORD_TYPE_USER = 'user'
RECORD_TYPE_ASSISTANT = 'assistant'
RECORD_TYPE_SYSTEM = 'system'
RECORD_TYPE_PROGRESS = 'progress'
RECORD_TYPE_SNAPSHOT = 'file-history-snapshot'

# Records with no conversation content, dropped before segmentation
NOISE_RECORD_TYPES = frozenset({RECORD_TYPE_PROGRESS, RECORD_TYPE_SNAPSHOT})

TURN_DURATION_SUBTYPE = 'turn_duration'


# ==============================================================================
# Message Content Types (left-to-right union with fallback)
# ==============================================================================


class TextContent(PermissiveModel):
    """Text content block from user or assistant messages."""

    type: Literal['text']
    text: str


class ThinkingContent(PermissiveModel):
    """Thinking content block from assistant messages."""

    type: Literal['thinking']
    thinking: str


class ToolUseContent(PermissiveModel):
    """Tool use content block from assistant messages."""

    type: Literal['tool_use']
    id: str = ''
    name: str = ''
    input: Any = None  # Usually an object; kept raw, tool semantics are not interpreted


class ToolResultContent(PermissiveModel):
    """Tool result content block from user messages."""

    type: Literal['tool_result']
    tool_use_id: str = ''
    content: Any = None  # String, array of {type, text} blocks, or missing
    is_error: bool | None = None


class UnknownContent(PermissiveModel):
    """Fallback for content blocks not modeled here (image, document, tool_reference, ...)."""

    type: str | None = None


# Validated left-to-right: the typed blocks first, UnknownContent last
MessageContent = Annotated[
    TextContent | ThinkingContent | ToolUseContent | ToolResultContent | UnknownContent,
    pydantic.Field(union_mode='left_to_right'),
]


# ==============================================================================
# Message Structure
# ==============================================================================


class _MessageBase(PermissiveModel):
    """Common handling for the `message` field of user and assistant records."""

    role: str | None = None

    @pydantic.model_validator(mode='before')
    @classmethod
    def wrap_bare_content(cls, data: Any) -> Any:
        """Accept a bare string or array in place of the {role, content} object."""
        if isinstance(data, (str, list)):
            return {'content': data}
        return data


class UserMessage(_MessageBase):
    """Message of a user record: typed prompt text or tool results."""

    content: str | Sequence[MessageContent] | None = None


class AssistantMessage(_MessageBase):
    """Message of an assistant record (nested Claude API response)."""

    model: str | None = pydantic.Field(None, description='Claude model identifier')
    id: str | None = pydantic.Field(None, description='Message ID from Claude API, shared across split records')
    content: Sequence[MessageContent] | None = None


# ==============================================================================
# Record Envelope
# ==============================================================================


class RecordEnvelope(PermissiveModel):
    """
    Fields shared by every record type that matters for replay.

    `message` stays untyped here: its shape depends on `type` and is resolved
    into a payload by the decoder, so one broken message never takes the
    envelope (and its timestamp or duration) down with it.
    """

    type: str
    uuid: str | None = None
    parentUuid: str | None = None
    sessionId: str | None = None
    timestamp: JsonDatetime | None = None
    cwd: str | None = None
    gitBranch: str | None = None
    slug: str | None = None
    version: str | None = None
    isSidechain: bool | None = None
    isMeta: bool | None = None
    message: Any = None
    subtype: str | None = pydantic.Field(None, description='System record subtype (e.g. turn_duration)')
    durationMs: int | float | None = pydantic.Field(None, description='Turn duration in milliseconds')
