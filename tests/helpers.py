"""
Builders for synthetic session records.

Records mirror what Claude Code writes to ~/.claude/projects/*/*.jsonl, with
only the fields the tests care about.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from claude_replay.schemas.session import Event
from claude_replay.services.decoder import decode_line

FIXTURES_DIR = Path(__file__).parent.parent / 'fixtures'
SESSIONS_DIR = FIXTURES_DIR / 'sessions'

BASIC_SESSION_ID = '0a1b2c3d-1111-4aaa-8bbb-000000000001'
SHELL_SESSION_ID = '0a1b2c3d-2222-4aaa-8bbb-000000000002'
EDITS_SESSION_ID = '0a1b2c3d-3333-4aaa-8bbb-000000000003'

MODEL = 'claude-sonnet-4-5-20250929'

# Project directory names as Claude Code encodes them
WEBAPP_DIR = '-home-dev-webapp'
SCRATCH_DIR = '-w'


def user(content: Any, **fields: Any) -> dict[str, Any]:
    """A user record; content is a string or a list of content blocks."""
    return {'type': 'user', 'message': {'role': 'user', 'content': content}, **fields}


def assistant(*content: Mapping[str, Any], model: str = MODEL, **fields: Any) -> dict[str, Any]:
    return {'type': 'assistant', 'message': {'role': 'assistant', 'model': model, 'content': list(content)}, **fields}


def text(value: str) -> dict[str, Any]:
    return {'type': 'text', 'text': value}


def thinking(value: str) -> dict[str, Any]:
    return {'type': 'thinking', 'thinking': value}


def tool_use(tool_id: str, name: str, tool_input: Any) -> dict[str, Any]:
    return {'type': 'tool_use', 'id': tool_id, 'name': name, 'input': tool_input}


def tool_result(tool_id: str, content: Any, is_error: bool | None = None) -> dict[str, Any]:
    block: dict[str, Any] = {'type': 'tool_result', 'tool_use_id': tool_id, 'content': content}
    if is_error is not None:
        block['is_error'] = is_error
    return block


def turn_duration(ms: float) -> dict[str, Any]:
    return {'type': 'system', 'subtype': 'turn_duration', 'durationMs': ms}


def jsonl(*records: Mapping[str, Any] | str) -> bytes:
    """Serialize records one per line; strings are written verbatim (for malformed lines)."""
    lines = [r if isinstance(r, str) else json.dumps(r) for r in records]
    return ('\n'.join(lines) + '\n').encode('utf-8')


def events(*records: Mapping[str, Any]) -> list[Event]:
    """Decode records the way the decoder would, without the noise/sidechain filter."""
    decoded = [decode_line(json.dumps(r)) for r in records]
    assert all(e is not None for e in decoded), 'test record failed to decode'
    return [e for e in decoded if e is not None]


class RecordingLogger:
    """LoggerProtocol implementation that keeps messages for assertions."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    async def info(self, message: str) -> None:
        self.messages.append(('info', message))

    async def warning(self, message: str) -> None:
        self.messages.append(('warning', message))

    async def error(self, message: str) -> None:
        self.messages.append(('error', message))
