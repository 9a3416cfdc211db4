"""
StrictModel, the base of every model claude-replay builds itself.

Events, turns, blocks, sessions, listings and diffs all inherit from it.
"""

from __future__ import annotations

from claude_replay.schemas.types import BaseStrictModel


class StrictModel(BaseStrictModel):
    """Frozen, closed, strictly typed model (see BaseStrictModel)."""
