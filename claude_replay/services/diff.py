"""
Line-level diff engine.

Computes a minimal edit script between two texts with a longest common
subsequence table. Inputs are single tool-call sized blobs (an Edit's
old/new strings, a file before and after a Write), so the O(m*n) table is
acceptable.

Alignment rule: when consuming a line from either side scores the same, the
backtrack consumes from the new side. Built back to front, this places
Removed lines before Added lines in every changed hunk, and keeps output
stable for identical inputs.
"""

from __future__ import annotations

from collections.abc import Sequence

from claude_replay.schemas.operations.diff import DiffOp

__all__ = ['compute_diff', 'count_changes', 'split_lines']


def split_lines(text: str) -> list[str]:
    """Split on newlines; the empty string has no lines ("a\\n" is ["a", ""])."""
    if not text:
        return []
    return text.split('\n')


def compute_diff(old: str, new: str) -> list[DiffOp]:
    """
    Compute the line-level edit script turning old into new.

    Joining the context+added lines with newlines reproduces new; joining the
    context+removed lines reproduces old.
    """
    old_lines = split_lines(old)
    new_lines = split_lines(new)
    m, n = len(old_lines), len(new_lines)

    # lcs[i][j] = LCS length of old_lines[:i] and new_lines[:j]
    lcs = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(1, m + 1):
        for j in range(1, n + 1):
            if old_lines[i - 1] == new_lines[j - 1]:
                lcs[i][j] = lcs[i - 1][j - 1] + 1
            else:
                lcs[i][j] = max(lcs[i - 1][j], lcs[i][j - 1])

    ops: list[DiffOp] = []
    i, j = m, n
    while i > 0 or j > 0:
        if i > 0 and j > 0 and old_lines[i - 1] == new_lines[j - 1]:
            ops.append(DiffOp(kind='context', text=old_lines[i - 1]))
            i -= 1
            j -= 1
        elif j > 0 and (i == 0 or lcs[i][j - 1] >= lcs[i - 1][j]):
            ops.append(DiffOp(kind='added', text=new_lines[j - 1]))
            j -= 1
        else:
            ops.append(DiffOp(kind='removed', text=old_lines[i - 1]))
            i -= 1

    ops.reverse()
    return ops


def count_changes(ops: Sequence[DiffOp]) -> tuple[int, int]:
    """Return the number of (added, removed) lines."""
    added = sum(1 for op in ops if op.kind == 'added')
    removed = sum(1 for op in ops if op.kind == 'removed')
    return added, removed
