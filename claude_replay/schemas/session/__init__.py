"""
Session JSONL schema models.

models.py holds the wire format (what Claude Code writes); events.py holds
the decoded Event shape the segmenter consumes.
"""

from __future__ import annotations

from claude_replay.schemas.session.events import (
    AssistantContent,
    AssistantItem,
    AssistantText,
    AssistantThinking,
    AssistantToolUse,
    Event,
    EventKind,
    EventPayload,
    ToolResult,
    UserText,
    UserToolResults,
)
from claude_replay.schemas.session.models import (
    NOISE_RECORD_TYPES,
    RECORD_TYPE_ASSISTANT,
    RECORD_TYPE_PROGRESS,
    RECORD_TYPE_SNAPSHOT,
    RECORD_TYPE_SYSTEM,
    RECORD_TYPE_USER,
    TURN_DURATION_SUBTYPE,
    AssistantMessage,
    MessageContent,
    RecordEnvelope,
    TextContent,
    ThinkingContent,
    ToolResultContent,
    ToolUseContent,
    UnknownContent,
    UserMessage,
)

__all__ = [
    # Wire format
    'NOISE_RECORD_TYPES',
    'RECORD_TYPE_ASSISTANT',
    'RECORD_TYPE_PROGRESS',
    'RECORD_TYPE_SNAPSHOT',
    'RECORD_TYPE_SYSTEM',
    'RECORD_TYPE_USER',
    'TURN_DURATION_SUBTYPE',
    'AssistantMessage',
    'MessageContent',
    'RecordEnvelope',
    'TextContent',
    'ThinkingContent',
    'ToolResultContent',
    'ToolUseContent',
    'UnknownContent',
    'UserMessage',
    # Decoded events
    'AssistantContent',
    'AssistantItem',
    'AssistantText',
    'AssistantThinking',
    'AssistantToolUse',
    'Event',
    'EventKind',
    'EventPayload',
    'ToolResult',
    'UserText',
    'UserToolResults',
]
