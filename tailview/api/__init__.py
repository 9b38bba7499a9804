"""API package exposing log and diff processing to the host UI."""

from __future__ import annotations

from tailview.api.router import api_router

__all__ = ["api_router"]
