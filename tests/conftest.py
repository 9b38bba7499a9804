"""Shared pytest fixtures for tailview tests."""

import os
from typing import AsyncGenerator

import httpx
import pytest

# Keep test output quiet and independent of the developer's environment.
for key in list(os.environ.keys()):
    if key.startswith("TAILVIEW_"):
        os.environ.pop(key, None)
os.environ["TAILVIEW_LOG_LEVEL"] = "WARNING"

from tailview.main import app


@pytest.fixture
async def api_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """Create an async HTTP client bound to the ASGI app."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Force the AnyIO pytest plugin to run tests under asyncio.

    LogView schedules its poll loop with asyncio.create_task, which is
    incompatible with the trio backend.
    """
    return "asyncio"
