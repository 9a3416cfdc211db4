"""
Path encoding utilities for Claude Code project directories.

Claude Code encodes paths for directory names by replacing:
- `/` -> `-`
- `.` -> `-`
- ` ` -> `-`
- `~` -> `-`

WARNING: This encoding is LOSSY. decode_project_dir() only produces a
display guess: "-Users-me-my-app" comes back as "/Users/me/my/app". The real
path is in the `cwd` field of the session records.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

__all__ = ['decode_project_dir', 'encode_path', 'project_display_name']


def encode_path(path: Path | str) -> str:
    """
    Encode path for Claude's directory naming.

    Examples:
        >>> encode_path("/Users/chris/project")
        '-Users-chris-project'

        >>> encode_path("/Users/chris/My Project.app")
        '-Users-chris-My-Project-app'
    """
    result = str(path) if isinstance(path, Path) else path
    for char in ['/', '.', ' ', '~']:
        result = result.replace(char, '-')
    return result


def decode_project_dir(dir_name: str) -> str:
    """
    Best-effort decoding of a project directory name, treating every hyphen as a separator.

    Examples:
        >>> decode_project_dir("-Users-gilles-Documents-trailblaze")
        '/Users/gilles/Documents/trailblaze'
    """
    parts = [part for part in dir_name.split('-') if part]
    return '/' + '/'.join(parts)


def project_display_name(dir_name: str) -> str:
    """Last component of the decoded directory name (e.g. "trailblaze")."""
    return PurePosixPath(decode_project_dir(dir_name)).name
