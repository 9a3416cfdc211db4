"""
Diff operation schemas.

Models for line-level edit scripts and the file changes derived from tool
invocations. Computed on demand for display; never persisted.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Literal

from claude_replay.schemas.base import StrictModel

DiffKind = Literal['context', 'added', 'removed']


class DiffOp(StrictModel):
    """One line of an edit script."""

    kind: DiffKind
    text: str  # Line content, without the newline

    @property
    def prefix(self) -> str:
        """Unified-diff style marker: ' ', '+' or '-'."""
        return {'context': ' ', 'added': '+', 'removed': '-'}[self.kind]


class FileChange(StrictModel):
    """
    A file modification made by an Edit or Write tool invocation.

    For Write, the old side is the last content of the same path seen earlier
    in the turn (Read result or previous Write); without one the write is
    reported as a new file.
    """

    tool_use_id: str
    tool_name: Literal['Edit', 'Write']
    path: str
    ops: Sequence[DiffOp]
    added: int
    removed: int
    is_new_file: bool = False
