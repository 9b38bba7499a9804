"""Pydantic request/response models for API endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field

from tailview.models import DisplayState, FileDiffRecord


# --- Request Models ---


class ParseDiffRequest(BaseModel):
    """Request body for parsing raw unified diff text."""

    diff: str = ""


class ReconcileRequest(BaseModel):
    """Request body for one reconciliation step."""

    state: DisplayState = DisplayState()
    raw_text: str | None = None
    is_forced_reload: bool = False
    was_scrolled_to_bottom: bool = True
    tail_lines: int | None = Field(default=None, ge=1)


class ClearRequest(BaseModel):
    """Request body for a manual clear of the log display."""

    state: DisplayState = DisplayState()


class HighlightRequest(BaseModel):
    """Request body for highlighting a search term."""

    text: str = ""
    term: str = ""
    prior_index: int = Field(default=-1, ge=-1)


# --- Response Models ---


class HealthResponse(BaseModel):
    """Response for the health endpoint."""

    ok: bool
    version: str


class DiffResponse(BaseModel):
    """Raw diff text with its per-file breakdown."""

    diff: str
    files: list[FileDiffRecord]


class LogTailResponse(BaseModel):
    """Raw tail text fetched for a container; None when it has no logs."""

    target: str
    logs: str | None
