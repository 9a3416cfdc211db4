"""
Metadata scanner - session summary fields without full decoding.

Listing UIs need slug, model, time range and a turn count for every session
file; decoding and segmenting each file would be far too slow. The scanner
peeks at each line's JSON structure instead and never builds Events.

The turn count is approximate: it counts user-authored prompts the way the
segmenter opens turns, but does not evaluate shell input, slash commands or
empty prompts.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, BinaryIO

from claude_replay.config.base import DEFAULT_MAX_LINE_BYTES
from claude_replay.exceptions import SessionReadError
from claude_replay.schemas.operations.discovery import SessionScan
from claude_replay.services.decoder import iter_lines
from claude_replay.services.markers import SHELL_OUTPUT_MARKERS

__all__ = ['scan', 'scan_stream']


def scan(path: Path, *, max_line_bytes: int = DEFAULT_MAX_LINE_BYTES) -> SessionScan:
    """
    Scan a session JSONL file for summary fields.

    Raises:
        SessionReadError: If the file cannot be opened or read
    """
    try:
        f = open(path, 'rb')
    except OSError as e:
        raise SessionReadError(str(path), e.strerror or str(e)) from e

    with f:
        return scan_stream(f, max_line_bytes=max_line_bytes, location=str(path))


def scan_stream(
    stream: BinaryIO,
    *,
    max_line_bytes: int = DEFAULT_MAX_LINE_BYTES,
    location: str = '<stream>',
) -> SessionScan:
    """Scan a JSONL stream for summary fields; malformed lines are skipped."""
    slug = ''
    model = ''
    first_timestamp = ''
    last_timestamp = ''
    turn_count = 0

    for line in iter_lines(stream, max_line_bytes, location):
        try:
            record = json.loads(line)
        except ValueError:
            continue
        if not isinstance(record, dict):
            continue

        timestamp = record.get('timestamp')
        if isinstance(timestamp, str) and timestamp:
            if not first_timestamp:
                first_timestamp = timestamp
            last_timestamp = timestamp

        if not slug and _is_text(record.get('slug')):
            slug = record['slug']

        message = _message_object(record.get('message'))
        if message is None:
            continue

        record_type = record.get('type')
        if record_type == 'user' and message.get('role', 'user') in ('user', None):
            # Meta records are expanded skill/command prompts, not typed by the user
            if record.get('isMeta') is True or record.get('isSidechain') is True:
                continue
            if _is_prompt(message.get('content')):
                turn_count += 1
        elif record_type == 'assistant' and not model and _is_text(message.get('model')):
            model = message['model']

    return SessionScan(
        slug=slug,
        model=model,
        first_timestamp=first_timestamp,
        last_timestamp=last_timestamp,
        turn_count=turn_count,
    )


def _message_object(message: Any) -> dict[str, Any] | None:
    """The message as a {role, content} object; a bare string or array is its content, as in the decoder."""
    if isinstance(message, dict):
        return message
    if isinstance(message, (str, list)):
        return {'content': message}
    return None


def _is_prompt(content: Any) -> bool:
    """Plain-string content that is not shell output, or an array not led by a tool result."""
    if isinstance(content, str):
        return not any(marker in content for marker in SHELL_OUTPUT_MARKERS)
    if isinstance(content, list) and content and all(isinstance(item, dict) for item in content):
        return content[0].get('type') != 'tool_result'
    return False


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value)
