"""
File change extraction - diffs for file-editing tool invocations in a turn.

Renderers show Edit and Write invocations as diffs rather than raw tool
input. This module derives those diffs from a turn's blocks:

- Edit: old_string vs new_string from the tool input
- Write: the last known content of the path earlier in the turn vs the
  written content; a Write with no known content is a new file (every line
  added)

Known content comes from successful Read results (with their line-number
gutter removed), earlier Writes, and Edits applied to either.

A change whose tool result is an error is not reported.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from claude_replay.domain import ToolResultBlock, ToolUseBlock, Turn
from claude_replay.schemas.operations.diff import FileChange
from claude_replay.services.diff import compute_diff, count_changes

__all__ = ['file_changes', 'strip_line_numbers']

# Read results are rendered like `cat -n`: right-aligned number, then a tab (or an arrow in older versions)
LINE_NUMBER_RE = re.compile(r'^ *\d+(?:\t|→)')


def file_changes(turn: Turn) -> list[FileChange]:
    """Return the Edit/Write file changes of a turn, in invocation order."""
    results: dict[str, ToolResultBlock] = {}
    for block in turn.blocks:
        if isinstance(block, ToolResultBlock):
            results.setdefault(block.tool_use_id, block)

    known_contents: dict[str, str] = {}
    changes: list[FileChange] = []
    for block in turn.blocks:
        if not isinstance(block, ToolUseBlock) or block.input is None:
            continue

        result = results.get(block.id)
        if result is not None and result.is_error:
            continue

        path = _str_field(block.input, 'file_path')
        if not path:
            continue

        if block.name == 'Read':
            if result is not None:
                known_contents[path] = strip_line_numbers(result.text)
        elif block.name == 'Edit':
            old = _str_field(block.input, 'old_string')
            new = _str_field(block.input, 'new_string')
            changes.append(_change(block, path, old, new))

            content = known_contents.get(path)
            if content is not None and old and old in content:
                count = -1 if block.input.get('replace_all') is True else 1
                known_contents[path] = content.replace(old, new, count)
        elif block.name == 'Write':
            content = _str_field(block.input, 'content')
            previous = known_contents.get(path)
            changes.append(_change(block, path, previous or '', content, is_new_file=previous is None))
            known_contents[path] = content

    return changes


def strip_line_numbers(text: str) -> str:
    """
    Remove the `cat -n` style gutter from Read tool output.

    Text is returned unchanged unless every line carries a gutter.
    """
    lines = text.split('\n')
    if not text or not all(LINE_NUMBER_RE.match(line) for line in lines):
        return text
    return '\n'.join(LINE_NUMBER_RE.sub('', line, count=1) for line in lines)


def _change(block: ToolUseBlock, path: str, old: str, new: str, is_new_file: bool = False) -> FileChange:
    ops = compute_diff(old, new)
    added, removed = count_changes(ops)
    return FileChange(
        tool_use_id=block.id,
        tool_name='Edit' if block.name == 'Edit' else 'Write',
        path=path,
        ops=ops,
        added=added,
        removed=removed,
        is_new_file=is_new_file,
    )


def _str_field(tool_input: Mapping[str, Any], key: str) -> str:
    value = tool_input.get(key)
    return value if isinstance(value, str) else ''
