"""Configuration for claude-replay entry points."""
