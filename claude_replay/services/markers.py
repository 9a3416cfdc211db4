"""
Recognition of the tags Claude Code embeds in user message text.

Claude Code stores several kinds of synthetic user messages as plain strings
wrapped in XML-like tags:

- Shell escapes (`!cmd` in the prompt):
    <bash-input>cmd</bash-input>
    <bash-stdout>...</bash-stdout><bash-stderr>...</bash-stderr>
- Slash commands (`/name args`):
    <command-message>...</command-message>
    <command-name>/name</command-name>
    <command-args>...</command-args>
"""

from __future__ import annotations

import re

__all__ = [
    'SHELL_OUTPUT_MARKERS',
    'command_name',
    'is_shell_output',
    'shell_input',
    'shell_output',
]

COMMAND_NAME_RE = re.compile(r'<command-name>(/[^<]+)</command-name>')
SHELL_INPUT_RE = re.compile(r'<bash-input>([\s\S]*)</bash-input>')  # Must span the whole text
SHELL_STDOUT_RE = re.compile(r'<bash-stdout>([\s\S]*?)</bash-stdout>')
SHELL_STDERR_RE = re.compile(r'<bash-stderr>([\s\S]*?)</bash-stderr>')

# Substrings the metadata scanner looks for, without regex matching
SHELL_OUTPUT_MARKERS = ('bash-stdout', 'bash-stderr')


def is_shell_output(text: str) -> bool:
    """Return True if the text carries shell escape output."""
    return SHELL_STDOUT_RE.search(text) is not None or SHELL_STDERR_RE.search(text) is not None


def shell_output(text: str) -> str:
    """
    Combine stdout and stderr of a shell escape output message.

    Returns stdout, then stderr on a new line; either may be empty.
    """
    stdout_match = SHELL_STDOUT_RE.search(text)
    stderr_match = SHELL_STDERR_RE.search(text)
    stdout = stdout_match.group(1) if stdout_match else ''
    stderr = stderr_match.group(1) if stderr_match else ''
    if stdout and stderr:
        return f'{stdout}\n{stderr}'
    return stdout or stderr


def shell_input(text: str) -> str | None:
    """Return the command of a shell escape input message, or None if the text is not one."""
    match = SHELL_INPUT_RE.fullmatch(text)
    return match.group(1) if match else None


def command_name(text: str) -> str | None:
    """
    Extract a slash command name (e.g. "/session-trail:backfill") from a command message.

    Returns None when the text embeds no command name.
    """
    match = COMMAND_NAME_RE.search(text)
    return match.group(1) if match else None
