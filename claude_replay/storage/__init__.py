"""Session sources: where sessions are listed and loaded from."""

from claude_replay.storage.git import GitBranchSource
from claude_replay.storage.local import LocalDirectorySource
from claude_replay.storage.protocol import SessionSource

__all__ = ['GitBranchSource', 'LocalDirectorySource', 'SessionSource']
