"""Endpoints for fetching and parsing unified diffs."""

from __future__ import annotations

from pathlib import Path as FsPath

import structlog
from fastapi import APIRouter, Depends, Path, Query

from tailview.api.errors import raise_fetch_error, raise_http_error
from tailview.api.schemas import DiffResponse, ParseDiffRequest
from tailview.diff import parse_git_diff
from tailview.errors import FetchError
from tailview.fetch import GitDiffFetcher

router = APIRouter(tags=["diff"])
logger = structlog.get_logger(__name__)

_COMMIT_PATTERN = r"^[0-9A-Za-z][0-9A-Za-z._/~^-]*$"


def get_git_fetcher() -> GitDiffFetcher:
    return GitDiffFetcher()


def _require_directory(path: str) -> str:
    target = FsPath(path).expanduser()
    if not target.is_dir():
        logger.info("Diff requested for missing directory", path=path)
        raise_http_error("NOT_FOUND", "Directory not found", 404)
    return str(target)


@router.post("/diff/parse", response_model=DiffResponse)
async def parse_diff(payload: ParseDiffRequest) -> DiffResponse:
    """Split raw diff text into per-file records."""
    files = parse_git_diff(payload.diff)
    logger.info("Diff parsed", files=len(files))
    return DiffResponse(diff=payload.diff, files=files)


@router.get("/git/diff", response_model=DiffResponse)
async def get_working_diff(
    path: str = Query(..., min_length=1),
    file: str | None = Query(default=None),
    staged: bool = Query(default=False),
    fetcher: GitDiffFetcher = Depends(get_git_fetcher),
) -> DiffResponse:
    """Return the working tree or staged diff of a repository."""
    repo = _require_directory(path)
    logger.info("Working diff requested", path=repo, file=file, staged=staged)
    try:
        diff_text = await fetcher.file_diff(repo, file, staged=staged)
    except FetchError as exc:
        logger.warning("git diff failed", path=repo, error=str(exc))
        raise_fetch_error(exc)
    return DiffResponse(diff=diff_text, files=parse_git_diff(diff_text))


@router.get("/git/commits/{commit}/diff", response_model=DiffResponse)
async def get_commit_diff(
    commit: str = Path(..., pattern=_COMMIT_PATTERN),
    path: str = Query(..., min_length=1),
    fetcher: GitDiffFetcher = Depends(get_git_fetcher),
) -> DiffResponse:
    """Return the patch introduced by one commit."""
    repo = _require_directory(path)
    logger.info("Commit diff requested", path=repo, commit=commit)
    try:
        diff_text = await fetcher.commit_diff(repo, commit)
    except FetchError as exc:
        logger.warning("git show failed", path=repo, commit=commit, error=str(exc))
        raise_fetch_error(exc)
    return DiffResponse(diff=diff_text, files=parse_git_diff(diff_text))
