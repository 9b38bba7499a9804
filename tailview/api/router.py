"""Composition of API routers."""

from __future__ import annotations

from fastapi import APIRouter

from tailview.api.diff import router as diff_router
from tailview.api.health import router as health_router
from tailview.api.logs import router as logs_router

api_router = APIRouter(prefix="/api")
api_router.include_router(health_router)
api_router.include_router(diff_router)
api_router.include_router(logs_router)
