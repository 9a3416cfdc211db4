"""Schemas returned by listing and diff operations."""

from claude_replay.schemas.operations.diff import DiffKind, DiffOp, FileChange
from claude_replay.schemas.operations.discovery import ArchiveMeta, ProjectInfo, SessionInfo, SessionScan

__all__ = ['ArchiveMeta', 'DiffKind', 'DiffOp', 'FileChange', 'ProjectInfo', 'SessionInfo', 'SessionScan']
