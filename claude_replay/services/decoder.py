"""
Line decoder - turns a session JSONL stream into ordered Events.

Each line is decoded independently. A line that is not a JSON object, or
whose envelope fails validation, or whose record type is not one replay
understands, is dropped without error: Claude Code adds record types and
fields with every release, and skipping what we cannot read keeps older
versions of this tool working on newer files.

Only stream-level failures (cannot open, cannot read, line too long) raise.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any, BinaryIO

from claude_replay.config.base import DEFAULT_MAX_LINE_BYTES
from claude_replay.exceptions import SessionReadError
from claude_replay.schemas.session import (
    NOISE_RECORD_TYPES,
    RECORD_TYPE_ASSISTANT,
    RECORD_TYPE_SYSTEM,
    RECORD_TYPE_USER,
    AssistantContent,
    AssistantItem,
    AssistantMessage,
    AssistantText,
    AssistantThinking,
    AssistantToolUse,
    Event,
    EventKind,
    RecordEnvelope,
    TextContent,
    ThinkingContent,
    ToolResult,
    ToolResultContent,
    ToolUseContent,
    UserMessage,
    UserText,
    UserToolResults,
)

__all__ = ['decode', 'decode_file', 'decode_line', 'iter_lines', 'tool_result_text']

_RECORD_KINDS: dict[str, EventKind] = {
    RECORD_TYPE_USER: 'user',
    RECORD_TYPE_ASSISTANT: 'assistant',
    RECORD_TYPE_SYSTEM: 'system',
}


# ==============================================================================
# Stream Handling
# ==============================================================================


def iter_lines(stream: BinaryIO, max_line_bytes: int, location: str) -> Iterator[bytes]:
    """
    Yield the non-blank lines of a binary stream, stripped of surrounding whitespace.

    Args:
        stream: Binary stream positioned at the start of the data
        max_line_bytes: Largest accepted line, newline excluded
        location: Path or description of the stream, for error messages

    Raises:
        SessionReadError: If reading fails or a line exceeds max_line_bytes
    """
    while True:
        try:
            line = stream.readline(max_line_bytes + 1)
        except OSError as e:
            raise SessionReadError(location, str(e)) from e

        if not line:
            return

        if len(line) > max_line_bytes and not line.endswith(b'\n'):
            raise SessionReadError(location, f'line exceeds {max_line_bytes} bytes')

        if line := line.strip():
            yield line


# ==============================================================================
# Decoding
# ==============================================================================


def decode(
    stream: BinaryIO,
    *,
    max_line_bytes: int = DEFAULT_MAX_LINE_BYTES,
    location: str = '<stream>',
) -> list[Event]:
    """
    Decode a JSONL stream into ordered Events.

    Unparseable and unrecognized lines are dropped; noise records (progress,
    file-history-snapshot) and sidechain records are filtered out. Input
    order is preserved.

    Raises:
        SessionReadError: If the stream cannot be read or a line is too long
    """
    events = []
    for line in iter_lines(stream, max_line_bytes, location):
        event = decode_line(line)
        if event is None or event.kind == 'noise' or event.is_sidechain:
            continue
        events.append(event)
    return events


def decode_file(path: Path, *, max_line_bytes: int = DEFAULT_MAX_LINE_BYTES) -> list[Event]:
    """
    Decode a session JSONL file.

    Raises:
        SessionReadError: If the file cannot be opened or read
    """
    try:
        f = open(path, 'rb')
    except OSError as e:
        raise SessionReadError(str(path), e.strerror or str(e)) from e

    with f:
        return decode(f, max_line_bytes=max_line_bytes, location=str(path))


def decode_line(line: bytes | str) -> Event | None:
    """
    Decode one JSONL line.

    Returns:
        The Event (including noise and sidechain events), or None if the line is
        malformed or of an unrecognized record type
    """
    try:
        record = RecordEnvelope.model_validate_json(line)
    except ValueError:  # pydantic.ValidationError, including invalid JSON and bad UTF-8
        return None

    if record.type in NOISE_RECORD_TYPES:
        kind: EventKind = 'noise'
    elif record.type in _RECORD_KINDS:
        kind = _RECORD_KINDS[record.type]
    else:
        return None

    payload: UserText | UserToolResults | AssistantContent | None = None
    if kind == 'user':
        payload = _user_payload(record.message)
    elif kind == 'assistant':
        payload = _assistant_payload(record.message)

    return Event(
        kind=kind,
        uuid=record.uuid or '',
        parent_uuid=record.parentUuid,
        session_id=record.sessionId or '',
        timestamp=record.timestamp,
        cwd=record.cwd or '',
        git_branch=record.gitBranch or '',
        slug=record.slug or '',
        version=record.version or '',
        is_sidechain=bool(record.isSidechain),
        is_meta=bool(record.isMeta),
        subtype=record.subtype or '',
        duration_ms=float(record.durationMs or 0),
        payload=payload,
    )


# ==============================================================================
# Payloads
# ==============================================================================


def _user_payload(raw: Any) -> UserText | UserToolResults | None:
    """Resolve a user record's message; None when it does not parse."""
    try:
        message = UserMessage.model_validate(raw)
    except ValueError:
        return None

    content = message.content
    if content is None:
        return UserText(text='')
    if isinstance(content, str):
        return UserText(text=content)

    # Array content: tool results; other entries (text, image) are not replayed
    return UserToolResults(
        results=[
            ToolResult(
                tool_use_id=item.tool_use_id,
                text=tool_result_text(item.content),
                is_error=bool(item.is_error),
            )
            for item in content
            if isinstance(item, ToolResultContent)
        ]
    )


def _assistant_payload(raw: Any) -> AssistantContent | None:
    """Resolve an assistant record's message; None when it does not parse."""
    try:
        message = AssistantMessage.model_validate(raw)
    except ValueError:
        return None

    items: list[AssistantItem] = []
    for block in message.content or ():
        if isinstance(block, TextContent):
            items.append(AssistantText(text=block.text))
        elif isinstance(block, ThinkingContent):
            items.append(AssistantThinking(thinking=block.thinking))
        elif isinstance(block, ToolUseContent):
            items.append(
                AssistantToolUse(
                    id=block.id,
                    name=block.name,
                    input=block.input if isinstance(block.input, dict) else None,
                    raw_input=_compact_json(block.input) if block.input is not None else '',
                )
            )

    return AssistantContent(model=message.model or '', items=items)


def tool_result_text(content: Any) -> str:
    """
    Flatten tool result content to text.

    Content is a string, an array of {type, text} blocks (non-empty texts are
    joined by newlines), or missing. Anything else is returned as compact JSON.
    """
    if content is None:
        return ''
    if isinstance(content, str):
        return content
    if isinstance(content, list) and all(
        isinstance(item, dict) and isinstance(item.get('text', ''), str) for item in content
    ):
        return '\n'.join(item['text'] for item in content if item.get('text'))
    return _compact_json(content)


def _compact_json(value: Any) -> str:
    return json.dumps(value, separators=(',', ':'), ensure_ascii=False)
