"""Command-line interface for claude-replay."""
