"""FastAPI application entrypoint for the tailview server."""

from __future__ import annotations

import structlog
import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError

from tailview import __version__
from tailview.api import api_router
from tailview.log_config import configure_logging
from tailview.middleware import (
    http_exception_handler,
    request_logging_middleware,
    validation_exception_handler,
)
from tailview.settings import settings

configure_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(title="tailview", version=__version__)

app.middleware("http")(request_logging_middleware)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

app.include_router(api_router)


def run() -> None:
    """Entry point for the tailview console script."""
    logger.info("Starting tailview", host=settings.host(), port=settings.port())
    uvicorn.run(
        "tailview.main:app",
        host=settings.host(),
        port=settings.port(),
        reload=False,
    )


if __name__ == "__main__":
    run()
