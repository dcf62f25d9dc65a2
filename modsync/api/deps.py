"""
modsync.api.deps — FastAPI dependency injection
================================================
"""

from __future__ import annotations

import os
import secrets
from functools import lru_cache
from typing import Annotated

from fastapi import Header
from fastapi.requests import HTTPConnection
from sqlalchemy import Engine

from modsync.database.engine import create_db_engine
from modsync.errors import Unauthorized
from modsync.services.broadcast import ConnectionManager

_WEAK_KEYS = frozenset({
    "change-me",
    "secret",
    "dev",
    "",
})

_MIN_KEY_LENGTH = 16


def _load_api_key() -> str:
    """Load and validate MODSYNC_API_KEY from the environment.

    Raises RuntimeError at import time if the key is missing, too short
    or a known weak default.
    """
    key = os.getenv("MODSYNC_API_KEY", "")
    if not key:
        raise RuntimeError(
            "MODSYNC_API_KEY environment variable is not set. "
            "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\""
        )
    if key in _WEAK_KEYS:
        raise RuntimeError(
            f"MODSYNC_API_KEY is set to a known weak default ('{key}'). "
            "Please set a strong, unique key."
        )
    if len(key) < _MIN_KEY_LENGTH:
        raise RuntimeError(
            f"MODSYNC_API_KEY is too short ({len(key)} chars). "
            f"Minimum length is {_MIN_KEY_LENGTH} characters."
        )
    return key


API_KEY: str = _load_api_key()


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


def get_hub(conn: HTTPConnection) -> ConnectionManager:
    """The app-wide broadcast hub (works for HTTP and WebSocket routes)."""
    return conn.app.state.hub


def api_key_matches(candidate: str | None) -> bool:
    if not candidate:
        return False
    return secrets.compare_digest(candidate.encode(), API_KEY.encode())


def require_api_key(
    x_api_key: Annotated[str | None, Header()] = None,
) -> None:
    """Reject the request with 401 unless ``x-api-key`` matches."""
    if not api_key_matches(x_api_key):
        raise Unauthorized()
