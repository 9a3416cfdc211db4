"""
Discovery operation schemas.

Models for project and session listings, returned by session sources and
consumed by listing UIs without loading whole sessions.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime

import pydantic

from claude_replay.schemas.base import StrictModel
from claude_replay.schemas.types import PermissiveModel


class SessionScan(StrictModel):
    """
    Summary fields read from a session file in one cheap pass.

    Timestamps are kept as the raw strings from the file; turn_count is an
    approximation of the number of turns full segmentation would produce.
    """

    slug: str = ''
    model: str = ''
    first_timestamp: str = ''
    last_timestamp: str = ''
    turn_count: int = 0


class ProjectInfo(StrictModel):
    """
    A project holding sessions.

    For the local source, project_id is the project directory path; for the
    git source it is the repository path. The display path is decoded from
    the directory name and is best-effort (the encoding is lossy).
    """

    project_id: str
    name: str
    path: str
    session_count: int
    last_used: datetime | None = None


class SessionInfo(StrictModel):
    """Information about a discovered session, without its turns."""

    session_id: str
    location: str  # JSONL path (local) or archive path on the sessions branch (git)
    slug: str = ''
    model: str = ''
    turn_count: int = 0
    first_time: datetime | None = None
    last_time: datetime | None = None
    size_bytes: int = 0


class ArchiveMeta(PermissiveModel):
    """
    Sidecar written next to each archived session on the sessions branch
    (sessions/<id>.meta.json).

    Written by external archiving tools; unknown fields are accepted.
    """

    session_id: str
    slug: str = ''
    started: str = ''
    last_updated: str = ''
    models: Sequence[str] = ()
    client_version: str = ''
    git_branch: str = ''
    user_turns: int = 0
    assistant_turns: int = 0
    tools_used: Mapping[str, int] = pydantic.Field(default_factory=dict)
    compressed_size: int = 0
