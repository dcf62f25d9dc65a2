"""
modsync.services.backend_client — Bot → API HTTP client
========================================================

The bot never touches the database.  It reads guild configuration and
reports violations through the API, authenticating with the shared
``x-api-key`` header.  One :class:`httpx.AsyncClient` is shared for the
bot's lifetime so connections are pooled.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from modsync.engine.events import EventKind

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"


class BackendClient:
    """Thin async wrapper around the ModSync API.

    Parameters
    ----------
    base_url:
        API root, e.g. ``http://localhost:8000``.  Paths are appended
        under ``/api``.
    api_key:
        Shared secret sent as ``x-api-key``.
    timeout:
        Per-request timeout in seconds.
    transport:
        Optional custom transport (tests pass :class:`httpx.MockTransport`).
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/api",
            headers={API_KEY_HEADER: api_key},
            timeout=timeout,
            transport=transport or httpx.AsyncHTTPTransport(retries=1),
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # -------------------------------------------------------------------
    # Config
    # -------------------------------------------------------------------
    async def fetch_config(self, guild_id: int) -> Any:
        """GET the guild's config document.

        Raises :class:`httpx.HTTPError` on transport failure or non-2xx
        status and :class:`ValueError` if the body isn't JSON.
        """
        resp = await self._client.get(f"/config/{guild_id}")
        resp.raise_for_status()
        return resp.json()

    # -------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------
    async def post_event(self, payload: dict[str, Any]) -> bool:
        """POST one domain event.  Returns False instead of raising."""
        try:
            resp = await self._client.post("/event", json=payload)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning(
                "Event report failed for guild %s: %s",
                payload.get("guildId"), exc,
            )
            return False
        return True

    async def report_violation(
        self, guild_id: int, violation: str, user_id: int,
    ) -> bool:
        return await self.post_event({
            "guildId": str(guild_id),
            "kind": EventKind.VIOLATION.value,
            "type": violation,
            "userId": str(user_id),
        })
