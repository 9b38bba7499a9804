"""Endpoints for log tail reconciliation and search highlighting."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Path, Query

from tailview.api.errors import raise_fetch_error
from tailview.api.schemas import (
    ClearRequest,
    HighlightRequest,
    LogTailResponse,
    ReconcileRequest,
)
from tailview.errors import FetchError
from tailview.fetch import DockerLogFetcher
from tailview.models import HighlightResult, ReconcileResult
from tailview.reconcile import clear_display, reconcile
from tailview.search import apply_highlight
from tailview.settings import settings

router = APIRouter(tags=["logs"])
logger = structlog.get_logger(__name__)


def get_log_fetcher() -> DockerLogFetcher:
    return DockerLogFetcher()


@router.post("/logs/reconcile", response_model=ReconcileResult)
async def reconcile_logs(payload: ReconcileRequest) -> ReconcileResult:
    """Merge a fetched tail into the caller's display state."""
    return reconcile(
        payload.state,
        payload.raw_text,
        forced_reload=payload.is_forced_reload,
        was_at_bottom=payload.was_scrolled_to_bottom,
        tail_lines=payload.tail_lines or settings.tail_lines(),
    )


@router.post("/logs/clear", response_model=ReconcileResult)
async def clear_logs(payload: ClearRequest) -> ReconcileResult:
    """Clear the caller's display until newer lines arrive."""
    return clear_display(payload.state)


@router.post("/logs/highlight", response_model=HighlightResult)
async def highlight_logs(payload: HighlightRequest) -> HighlightResult:
    """Highlight every match of a literal search term."""
    return apply_highlight(payload.text, payload.term, payload.prior_index)


@router.get("/logs/containers/{container_id}/tail", response_model=LogTailResponse)
async def get_container_tail(
    container_id: str = Path(..., pattern=r"^[A-Za-z0-9][A-Za-z0-9_.-]*$"),
    tail: int | None = Query(default=None, ge=1),
    fetcher: DockerLogFetcher = Depends(get_log_fetcher),
) -> LogTailResponse:
    """Fetch the raw combined output tail of a container."""
    lines = tail or settings.tail_lines()
    try:
        logs = await fetcher.fetch(container_id, lines)
    except FetchError as exc:
        logger.warning("docker logs failed", container_id=container_id, error=str(exc))
        raise_fetch_error(exc)
    return LogTailResponse(target=container_id, logs=logs)
