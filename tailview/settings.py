"""Centralized environment configuration for tailview.

All environment variables are read through this module using the TAILVIEW_
prefix for consistency.

Usage:
    from tailview.settings import settings

    interval = settings.poll_interval_seconds()
    tail = settings.tail_lines()
"""

from __future__ import annotations

import os


def _get(name: str, default: str = "") -> str:
    """Get an environment variable value."""
    return os.environ.get(name, "").strip() or default


def _get_int(name: str, default: int = 0) -> int:
    """Get an integer environment variable."""
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(name: str, default: float = 0.0) -> float:
    """Get a float environment variable."""
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


class Settings:
    """Centralized settings for tailview.

    Environment variables use the TAILVIEW_ prefix.
    """

    # -------------------------------------------------------------------------
    # Server Settings
    # -------------------------------------------------------------------------

    @staticmethod
    def host() -> str:
        """Host to bind the HTTP server to.

        Env: TAILVIEW_HOST (default: 127.0.0.1)
        """
        return _get("TAILVIEW_HOST", default="127.0.0.1")

    @staticmethod
    def port() -> int:
        """Port to bind the HTTP server to.

        Env: TAILVIEW_PORT (default: 8790)
        """
        return _get_int("TAILVIEW_PORT", default=8790)

    # -------------------------------------------------------------------------
    # Logging Settings
    # -------------------------------------------------------------------------

    @staticmethod
    def log_level() -> str:
        """Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).

        Env: TAILVIEW_LOG_LEVEL (default: INFO)
        """
        return _get("TAILVIEW_LOG_LEVEL", default="INFO").upper()

    @staticmethod
    def log_format() -> str:
        """Log format: "console" for dev-friendly, "json" for structured.

        Env: TAILVIEW_LOG_FORMAT (default: console)
        """
        return _get("TAILVIEW_LOG_FORMAT", default="console").lower()

    # -------------------------------------------------------------------------
    # Log Tail Settings
    # -------------------------------------------------------------------------

    @staticmethod
    def tail_lines() -> int:
        """Number of most recent lines fetched and retained per update.

        Env: TAILVIEW_TAIL_LINES (default: 100)
        """
        value = _get_int("TAILVIEW_TAIL_LINES", default=100)
        return value if value > 0 else 100

    @staticmethod
    def poll_interval_seconds() -> float:
        """Seconds between log refetches while a target is selected.

        Env: TAILVIEW_POLL_INTERVAL_SECONDS (default: 5)
        """
        value = _get_float("TAILVIEW_POLL_INTERVAL_SECONDS", default=5.0)
        return value if value > 0 else 5.0

    @staticmethod
    def scroll_threshold_px() -> int:
        """Distance from the bottom still treated as "scrolled to bottom".

        Env: TAILVIEW_SCROLL_THRESHOLD_PX (default: 50)
        """
        return _get_int("TAILVIEW_SCROLL_THRESHOLD_PX", default=50)

    # -------------------------------------------------------------------------
    # Collaborator Settings
    # -------------------------------------------------------------------------

    @staticmethod
    def docker_bin() -> str:
        """Docker executable name or path.

        Env: TAILVIEW_DOCKER_BIN (default: docker)
        """
        return _get("TAILVIEW_DOCKER_BIN", default="docker")

    @staticmethod
    def git_bin() -> str:
        """Git executable name or path.

        Env: TAILVIEW_GIT_BIN (default: git)
        """
        return _get("TAILVIEW_GIT_BIN", default="git")

    @staticmethod
    def fetch_timeout_seconds() -> float:
        """Maximum seconds a docker/git subprocess may run.

        Env: TAILVIEW_FETCH_TIMEOUT_SECONDS (default: 15)
        """
        value = _get_float("TAILVIEW_FETCH_TIMEOUT_SECONDS", default=15.0)
        return value if value > 0 else 15.0


# Singleton instance for convenient imports
settings = Settings()
