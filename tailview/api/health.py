"""Health endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from tailview import __version__
from tailview.api.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(ok=True, version=__version__)
