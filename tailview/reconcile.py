"""Reconcile bounded log tail snapshots against what is already displayed.

Each fetch returns the last N lines of a process's output. Consecutive
snapshots overlap, so the engine looks for the previously last line inside
the new snapshot and only appends what follows it. When the overlap has
rotated out of the fetch window there is no way to prove continuity and the
display is replaced instead.

All functions here are pure: they take a ``DisplayState`` and return a new
one alongside a ``RenderInstruction``.
"""

from __future__ import annotations

from typing import Sequence

import structlog

from tailview.cleaning import clean_snapshot
from tailview.models import (
    DisplayState,
    DisplayStatus,
    LogLine,
    ReconcileResult,
    RenderInstruction,
    RenderMode,
)

logger = structlog.get_logger(__name__)

DEFAULT_TAIL_LINES = 100
NO_LOGS_MESSAGE = "No logs available"
WAITING_MESSAGE = "Logs cleared - waiting for new logs..."


def _agreeing_run(previous: Sequence[str], current: Sequence[str], index: int) -> int:
    """Count lines that agree walking backwards from previous[-1] and current[index]."""
    run = 0
    while run <= index and run < len(previous) and current[index - run] == previous[-1 - run]:
        run += 1
    return run


def find_overlap(previous: Sequence[str], current: Sequence[str]) -> int | None:
    """Return the index in *current* of the line that was last in *previous*.

    Every occurrence of the previous last line is a candidate. Candidates are
    ranked by how many of the preceding lines also agree with *previous*, so
    repeated lines do not cause already shown output to be appended again.
    Equal ranks resolve to the first occurrence.
    """
    if not previous:
        return None
    last = previous[-1]
    best_index: int | None = None
    best_run = 0
    for index, text in enumerate(current):
        if text != last:
            continue
        run = _agreeing_run(previous, current, index)
        if run > best_run:
            best_index, best_run = index, run
    return best_index


def _noop(state: DisplayState, **update) -> ReconcileResult:
    return ReconcileResult(
        instruction=RenderInstruction(mode=RenderMode.APPEND, status=state.status),
        state=state.model_copy(update=update),
    )


def _replace(
    lines: Sequence[LogLine],
    previous: Sequence[str],
    sequence: int,
    auto_scroll: bool,
) -> ReconcileResult:
    state = DisplayState(
        lines=tuple(lines),
        previous_lines=tuple(previous),
        needs_replace=False,
        sequence=sequence,
        status=DisplayStatus.CONTENT,
    )
    instruction = RenderInstruction(
        mode=RenderMode.REPLACE,
        lines=tuple(lines),
        auto_scroll=auto_scroll,
        status=DisplayStatus.CONTENT,
    )
    return ReconcileResult(instruction=instruction, state=state)


def reconcile(
    state: DisplayState,
    raw_text: str | None,
    *,
    forced_reload: bool = False,
    was_at_bottom: bool = True,
    tail_lines: int = DEFAULT_TAIL_LINES,
) -> ReconcileResult:
    """Merge the latest fetched tail into *state*.

    Args:
        state: Display state produced by the previous call (or a fresh one).
        raw_text: Full text of the latest tail fetch. Empty or None means the
            collaborator has no logs for the target.
        forced_reload: Render the snapshot from scratch regardless of state.
        was_at_bottom: Whether the viewer was scrolled to the bottom before
            this update; incremental updates only auto-scroll when it was.
        tail_lines: Number of most recent lines kept on display.
    """
    sequence = state.sequence + 1
    lines = clean_snapshot(raw_text)
    if not lines:
        logger.debug("Log snapshot empty", sequence=sequence)
        return ReconcileResult(
            instruction=RenderInstruction(
                mode=RenderMode.REPLACE,
                auto_scroll=True,
                status=DisplayStatus.EMPTY,
                message=NO_LOGS_MESSAGE,
            ),
            state=DisplayState(sequence=sequence, status=DisplayStatus.EMPTY),
        )

    window = lines[-tail_lines:]
    window_texts = [line.text for line in window]
    texts = [line.text for line in lines]

    fresh_start = forced_reload or not state.previous_lines
    if fresh_start or (state.needs_replace and state.cleared_at is None):
        logger.debug("Replacing log display", sequence=sequence, lines=len(window))
        return _replace(window, window_texts, sequence, auto_scroll=True)

    overlap = find_overlap(state.previous_lines, texts)

    if state.cleared_at is not None:
        if overlap is None:
            # Boundary rotated out; everything in the snapshot is unseen.
            logger.info("Clear boundary not found; showing full snapshot", sequence=sequence)
            return _replace(window, window_texts, sequence, auto_scroll=was_at_bottom)
        after = lines[overlap + 1:][-tail_lines:]
        if not after:
            return _noop(state, sequence=sequence)
        logger.debug("Lines found after clear boundary", sequence=sequence, lines=len(after))
        return _replace(after, window_texts, sequence, auto_scroll=was_at_bottom)

    if overlap is None:
        logger.info(
            "Log overlap lost; replacing display",
            sequence=sequence,
            previous_last=state.previous_lines[-1],
        )
        return _replace(window, window_texts, sequence, auto_scroll=was_at_bottom)

    appended = lines[overlap + 1:][-tail_lines:]
    if not appended:
        return _noop(state, sequence=sequence, previous_lines=tuple(window_texts))

    displayed = (state.lines + tuple(appended))[-tail_lines:]
    logger.debug("Appending log lines", sequence=sequence, lines=len(appended))
    return ReconcileResult(
        instruction=RenderInstruction(
            mode=RenderMode.APPEND,
            lines=tuple(appended),
            auto_scroll=was_at_bottom,
            status=DisplayStatus.CONTENT,
        ),
        state=DisplayState(
            lines=displayed,
            previous_lines=tuple(window_texts),
            needs_replace=False,
            sequence=sequence,
            status=DisplayStatus.CONTENT,
        ),
    )


def clear_display(state: DisplayState) -> ReconcileResult:
    """Hide everything currently shown until lines newer than it arrive."""
    boundary = state.previous_lines[-1] if state.previous_lines else None
    cleared = state.model_copy(
        update={
            "lines": (),
            "cleared_at": boundary,
            "needs_replace": True,
            "status": DisplayStatus.WAITING,
        }
    )
    logger.debug("Log display cleared", boundary=boundary)
    return ReconcileResult(
        instruction=RenderInstruction(
            mode=RenderMode.REPLACE,
            status=DisplayStatus.WAITING,
            message=WAITING_MESSAGE,
        ),
        state=cleared,
    )


def fetch_failed(state: DisplayState, message: str) -> ReconcileResult:
    """Show a one-shot error and reset *state* as if the target was reselected."""
    return ReconcileResult(
        instruction=RenderInstruction(
            mode=RenderMode.REPLACE,
            status=DisplayStatus.ERROR,
            message=message or "Failed to load logs",
        ),
        state=DisplayState(sequence=state.sequence + 1, status=DisplayStatus.ERROR),
    )
