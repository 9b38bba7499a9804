"""Exceptions raised by the log and diff fetch collaborators."""

from __future__ import annotations


class FetchError(Exception):
    """A collaborator could not obtain text (process or I/O failure)."""

    code = "FETCH_FAILED"


class ToolUnavailableError(FetchError):
    """The docker or git executable is missing."""

    code = "TOOL_UNAVAILABLE"


class CommandFailedError(FetchError):
    """The collaborator command exited non-zero or timed out."""

    code = "COMMAND_FAILED"

    def __init__(self, message: str, *, exit_code: int | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr
