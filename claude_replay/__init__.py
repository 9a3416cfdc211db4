"""claude-replay: read Claude Code session transcripts as replayable turns."""

__version__ = '0.1.0'
