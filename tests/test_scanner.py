"""Tests for the metadata scanner."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from claude_replay.exceptions import SessionReadError
from claude_replay.services.decoder import decode
from claude_replay.services.scanner import scan, scan_stream
from claude_replay.services.segmenter import segment
from tests.helpers import SESSIONS_DIR, assistant, jsonl, text, tool_result, user


def test_scan_basic_fixture() -> None:
    summary = scan(SESSIONS_DIR / 'basic.jsonl')

    assert summary.slug == 'quiet-morning-river'
    assert summary.model == 'claude-sonnet-4-5-20250929'
    assert summary.first_timestamp == '2025-06-01T10:00:00.000Z'
    assert summary.last_timestamp == '2025-06-01T10:05:04.000Z'
    assert summary.turn_count == 2


def test_scan_shell_fixture_counts_input_and_command_but_not_output() -> None:
    summary = scan(SESSIONS_DIR / 'shell_and_commands.jsonl')

    assert summary.turn_count == 3
    assert summary.model == 'claude-opus-4-1-20250805'


def test_turn_count_rules() -> None:
    data = jsonl(
        user('counted'),
        user('meta prompt', isMeta=True),
        user('side prompt', isSidechain=True),
        user('<bash-stdout>out</bash-stdout><bash-stderr></bash-stderr>'),
        user([tool_result('t1', 'ok')]),
        user([text('array prompt')]),
        user([]),
        {'type': 'user', 'message': {'role': 'assistant', 'content': 'wrong role'}},
    )

    assert scan_stream(io.BytesIO(data)).turn_count == 2


@pytest.mark.parametrize(
    'records',
    [
        [{'type': 'user', 'message': 'hi'}, {'type': 'user', 'message': 'again'}],
        [{'type': 'user', 'message': 'hi'}, {'type': 'user', 'message': [tool_result('t1', 'ok')]}],
        [{'type': 'user', 'message': {'content': 'no role'}}],
        [{'type': 'user', 'message': {'role': None, 'content': 'null role'}}],
        [user('object form'), {'type': 'user', 'message': '<bash-stdout>x</bash-stdout><bash-stderr></bash-stderr>'}],
        [{'type': 'user', 'message': [tool_result('t0', 'orphan')]}],
    ],
    ids=['bare-string', 'bare-tool-results', 'no-role', 'null-role', 'bare-shell-output', 'only-tool-results'],
)
def test_turn_count_agrees_with_segmenter_across_message_shapes(records: list[dict[str, object]]) -> None:
    data = jsonl(*records)

    turns = segment(decode(io.BytesIO(data))).turns

    assert scan_stream(io.BytesIO(data)).turn_count == len(turns)


def test_bare_string_session_is_counted() -> None:
    data = jsonl({'type': 'user', 'message': 'hi'}, {'type': 'assistant', 'message': [text('hello')]})

    assert scan_stream(io.BytesIO(data)).turn_count == 1


def test_first_values_win_and_timestamps_span_all_lines() -> None:
    data = jsonl(
        {'type': 'progress', 'timestamp': '2025-01-01T00:00:00Z'},
        user('hi', slug='first-slug', timestamp='2025-01-01T00:00:01Z'),
        assistant(text('a'), model='model-a'),
        assistant(text('b'), model='model-b', slug='second-slug'),
        '{malformed',
        {'type': 'summary', 'timestamp': '2025-01-01T00:09:00Z'},
    )

    summary = scan_stream(io.BytesIO(data))

    assert summary.slug == 'first-slug'
    assert summary.model == 'model-a'
    assert summary.first_timestamp == '2025-01-01T00:00:00Z'
    assert summary.last_timestamp == '2025-01-01T00:09:00Z'


def test_empty_stream() -> None:
    summary = scan_stream(io.BytesIO(b''))

    assert summary.turn_count == 0
    assert summary.slug == ''
    assert summary.first_timestamp == ''


def test_scan_missing_file(tmp_path: Path) -> None:
    with pytest.raises(SessionReadError, match='file unreadable'):
        scan(tmp_path / 'nope.jsonl')


def test_scan_oversize_line() -> None:
    data = jsonl(user('x' * 500))

    with pytest.raises(SessionReadError):
        scan_stream(io.BytesIO(data), max_line_bytes=64)
