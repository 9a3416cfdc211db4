"""
Turn segmenter - folds decoded Events into ordered, immutable Turns.

The segmenter is a fold over the event list: `step(state, event)` applies one
event to an explicit accumulator (SegmentState) and `finish(state)` closes
whatever is still open. Nothing lives at module level, so independent calls
can run concurrently.

User events are classified by the first matching rule:

1. Meta-flagged: ignored (expanded skill/command prompts, not typed by the user)
2. Shell output (<bash-stdout>/<bash-stderr>): text block on the open turn
3. Shell input (<bash-input>cmd</bash-input>): opens a turn "!cmd"
4. Tool result array: tool result blocks on the open turn
5. Slash command (<command-name>/name</command-name>): opens a turn "/name"
6. Non-empty text: opens a turn with that text
7. Empty text: nothing

Assistant events add text, thinking and tool_use blocks to the open turn.
System turn_duration events set a pending duration that is flushed onto the
turn closed by the next opening transition, or onto the last turn at the end.

Blocks that arrive while no turn is open are dropped, never buffered.
"""

from __future__ import annotations

import functools
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from claude_replay.domain import (
    Block,
    Session,
    TextBlock,
    ThinkingBlock,
    ToolResultBlock,
    ToolUseBlock,
    Turn,
    TurnOrigin,
)
from claude_replay.schemas.base import StrictModel
from claude_replay.schemas.session import (
    TURN_DURATION_SUBTYPE,
    AssistantContent,
    AssistantText,
    AssistantThinking,
    AssistantToolUse,
    Event,
    UserText,
    UserToolResults,
)
from claude_replay.services.markers import command_name, is_shell_output, shell_input, shell_output

__all__ = ['SegmentResult', 'SegmentState', 'build_session', 'finish', 'segment', 'step']


# ==============================================================================
# Accumulator
# ==============================================================================


@dataclass
class _OpenTurn:
    """The one turn still accepting blocks. Sealed into a frozen Turn when closed."""

    number: int
    user_text: str
    origin: TurnOrigin
    timestamp: datetime | None
    cwd: str
    git_branch: str
    slug: str
    model: str = ''
    blocks: list[Block] = field(default_factory=list)

    def seal(self, duration: timedelta) -> Turn:
        return Turn(
            number=self.number,
            user_text=self.user_text,
            origin=self.origin,
            timestamp=self.timestamp,
            duration=duration,
            model=self.model,
            cwd=self.cwd,
            git_branch=self.git_branch,
            slug=self.slug,
            blocks=tuple(self.blocks),
        )


@dataclass
class SegmentState:
    """Fold accumulator: sealed turns, the open turn, the pending duration and session fields."""

    turns: list[Turn] = field(default_factory=list)
    open_turn: _OpenTurn | None = None
    pending_duration: timedelta | None = None

    # Session-level fields, first non-empty value wins
    session_id: str = ''
    slug: str = ''
    version: str = ''
    cwd: str = ''
    git_branch: str = ''
    model: str = ''


class SegmentResult(StrictModel):
    """Output of segmentation: sealed turns plus session-level fields."""

    turns: Sequence[Turn]
    session_id: str = ''
    slug: str = ''
    version: str = ''
    cwd: str = ''
    git_branch: str = ''
    model: str = ''


# ==============================================================================
# Fold
# ==============================================================================


def segment(events: Iterable[Event]) -> SegmentResult:
    """Segment an ordered event sequence into turns."""
    return finish(functools.reduce(step, events, SegmentState()))


def step(state: SegmentState, event: Event) -> SegmentState:
    """Apply one event to the accumulator and return it."""
    if not state.session_id and event.session_id:
        state.session_id = event.session_id
    if not state.slug and event.slug:
        state.slug = event.slug
    if not state.version and event.version:
        state.version = event.version

    if event.kind == 'user':
        _apply_user(state, event)
    elif event.kind == 'assistant':
        _apply_assistant(state, event)
    elif event.kind == 'system':
        _apply_system(state, event)
    return state


def finish(state: SegmentState) -> SegmentResult:
    """Close the open turn (with any pending duration) and freeze the result."""
    _close_turn(state)
    return SegmentResult(
        turns=tuple(state.turns),
        session_id=state.session_id,
        slug=state.slug,
        version=state.version,
        cwd=state.cwd,
        git_branch=state.git_branch,
        model=state.model,
    )


def build_session(events: Iterable[Event], *, session_id: str = '', path: str = '') -> Session:
    """
    Segment events and assemble a Session.

    Args:
        events: Decoded events in file order
        session_id: Known session ID; falls back to the first sessionId in the events
        path: Location the events were read from
    """
    result = segment(events)
    turns = result.turns
    return Session(
        id=session_id or result.session_id,
        slug=result.slug,
        path=path,
        turns=turns,
        model=result.model,
        start_time=turns[0].timestamp if turns else None,
        end_time=turns[-1].timestamp if turns else None,
        cwd=result.cwd,
        git_branch=result.git_branch,
        version=result.version,
    )


# ==============================================================================
# Event Handlers
# ==============================================================================


def _apply_user(state: SegmentState, event: Event) -> None:
    if event.is_meta:
        return

    payload = event.payload
    if not isinstance(payload, (UserText, UserToolResults)):
        return
    text = payload.text if isinstance(payload, UserText) else ''

    if text and is_shell_output(text):
        output = shell_output(text)
        if state.open_turn is not None and output:
            state.open_turn.blocks.append(TextBlock(text=output))
    elif (command := shell_input(text)) is not None:
        _open_turn(state, event, f'!{command}', 'shell')
    elif isinstance(payload, UserToolResults):
        if state.open_turn is not None:
            state.open_turn.blocks.extend(
                ToolResultBlock(tool_use_id=result.tool_use_id, text=result.text, is_error=result.is_error)
                for result in payload.results
            )
    elif (name := command_name(text)) is not None:
        _open_turn(state, event, name, 'command')
    elif text:
        _open_turn(state, event, text, 'prompt')


def _apply_assistant(state: SegmentState, event: Event) -> None:
    turn = state.open_turn
    payload = event.payload
    if turn is None or not isinstance(payload, AssistantContent):
        return

    if not turn.model and payload.model:
        turn.model = payload.model
        if not state.model:
            state.model = payload.model

    for item in payload.items:
        if isinstance(item, AssistantText):
            if text := item.text.strip():
                turn.blocks.append(TextBlock(text=text))
        elif isinstance(item, AssistantThinking):
            if item.thinking:
                turn.blocks.append(ThinkingBlock(text=item.thinking))
        elif isinstance(item, AssistantToolUse):
            turn.blocks.append(ToolUseBlock(name=item.name, id=item.id, input=item.input, raw_input=item.raw_input))


def _apply_system(state: SegmentState, event: Event) -> None:
    if event.subtype != TURN_DURATION_SUBTYPE or not event.duration_ms > 0:
        return
    try:
        state.pending_duration = timedelta(milliseconds=event.duration_ms)
    except OverflowError:
        # Infinite, or beyond timedelta's range: same as never reported
        return


# ==============================================================================
# Transitions
# ==============================================================================


def _open_turn(state: SegmentState, event: Event, user_text: str, origin: TurnOrigin) -> None:
    """Close the current turn and open the next one."""
    _close_turn(state)
    state.open_turn = _OpenTurn(
        number=len(state.turns) + 1,
        user_text=user_text,
        origin=origin,
        timestamp=event.timestamp,
        cwd=event.cwd,
        git_branch=event.git_branch,
        slug=event.slug,
    )
    if not state.cwd:
        state.cwd = event.cwd
    if not state.git_branch:
        state.git_branch = event.git_branch


def _close_turn(state: SegmentState) -> None:
    """Seal the open turn, flushing the pending duration onto it. No-op when none is open."""
    if state.open_turn is None:
        return
    duration = state.pending_duration or timedelta(0)
    state.pending_duration = None
    state.turns.append(state.open_turn.seal(duration))
    state.open_turn = None
