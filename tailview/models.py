"""Pydantic models for log display state, search state and parsed diffs."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, computed_field


class Severity(str, Enum):
    """Severity tag derived from a cleaned log line."""
    ERROR = "error"
    WARN = "warn"
    NORMAL = "normal"


class LogLine(BaseModel):
    """A single cleaned, classified unit of display."""
    model_config = ConfigDict(frozen=True)

    text: str
    severity: Severity = Severity.NORMAL


class DisplayStatus(str, Enum):
    """What the log view is currently showing."""
    IDLE = "idle"
    CONTENT = "content"
    EMPTY = "empty"  # collaborator returned no logs
    WAITING = "waiting"  # cleared, waiting for lines after the boundary
    ERROR = "error"


class RenderMode(str, Enum):
    REPLACE = "replace"
    APPEND = "append"


class DisplayState(BaseModel):
    """Reconciliation engine memory between fetches.

    ``lines`` is what is rendered; ``previous_lines`` is the cleaned text of
    the last snapshot and is what overlap detection runs against.
    """
    model_config = ConfigDict(frozen=True)

    lines: tuple[LogLine, ...] = ()
    previous_lines: tuple[str, ...] = ()
    cleared_at: str | None = None
    needs_replace: bool = True
    sequence: int = 0
    status: DisplayStatus = DisplayStatus.IDLE

    @property
    def text(self) -> str:
        """Rendered text of the displayed lines, newline separated."""
        return "\n".join(line.text for line in self.lines)


class RenderInstruction(BaseModel):
    """Ordered draw instruction for the renderer collaborator."""
    model_config = ConfigDict(frozen=True)

    mode: RenderMode
    lines: tuple[LogLine, ...] = ()
    auto_scroll: bool = False
    status: DisplayStatus = DisplayStatus.CONTENT
    message: str | None = None

    @property
    def is_noop(self) -> bool:
        return self.mode == RenderMode.APPEND and not self.lines


class ReconcileResult(BaseModel):
    """Output of one reconciliation step."""
    model_config = ConfigDict(frozen=True)

    instruction: RenderInstruction
    state: DisplayState


class SearchState(BaseModel):
    """Active search term and match selection over the displayed text."""
    model_config = ConfigDict(frozen=True)

    term: str = ""
    match_count: int = 0
    current_index: int = -1


class HighlightResult(BaseModel):
    """Highlighted markup plus the recomputed match selection."""
    model_config = ConfigDict(frozen=True)

    highlighted_text: str
    match_count: int
    current_index: int


class LogViewState(BaseModel):
    """Everything one log view owns: display memory and search selection."""
    model_config = ConfigDict(frozen=True)

    target: str | None = None
    display: DisplayState = DisplayState()
    search: SearchState = SearchState()


class ChangeKind(str, Enum):
    """How a file changed in a diff."""
    ADDED = "added"
    DELETED = "deleted"
    RENAMED = "renamed"
    MODIFIED = "modified"


class LineKind(str, Enum):
    """Rendering class of a single diff line."""
    ADDED = "added"
    REMOVED = "removed"
    HUNK_HEADER = "hunk-header"
    FILE_METADATA = "file-metadata"
    HEADER = "header"
    CONTEXT = "context"


class DiffLine(BaseModel):
    """A raw diff line and its rendering class."""
    model_config = ConfigDict(frozen=True)

    text: str
    kind: LineKind


class FileDiffRecord(BaseModel):
    """One file's slice of a larger diff."""
    model_config = ConfigDict(frozen=True)

    path: str
    kind: ChangeKind = ChangeKind.MODIFIED
    rename_from: str | None = None
    rename_to: str | None = None
    old_path: str | None = None
    new_path: str | None = None
    hunks: int = 0
    lines: tuple[DiffLine, ...] = ()

    @property
    def raw_lines(self) -> list[str]:
        return [line.text for line in self.lines]

    @computed_field
    @property
    def patch(self) -> str:
        return "\n".join(self.raw_lines)


class ErrorDetail(BaseModel):
    """Structured error payload for API responses."""
    code: str
    message: str
    details: dict | None


class ErrorResponse(BaseModel):
    """Top-level error envelope for API responses."""
    error: ErrorDetail
