"""
modsync.engine.cache — Read-through TTL cache for guild configuration
======================================================================

Shields the bot's hot path (every guild message) from a network round trip
to the API.  Entries live for ``ttl`` seconds; after that they are treated
as absent and refetched.  Within the window a stale read is accepted,
after it never.

Concurrent misses for the same guild are not coalesced: two messages that
arrive during one miss may both fetch.  The later result simply replaces
the earlier one.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

import httpx

from modsync.config import DEFAULT_CACHE_TTL_SECONDS
from modsync.engine.automod_config import AutomodConfig, decode_config
from modsync.errors import ConfigUnavailable

if TYPE_CHECKING:
    from modsync.services.backend_client import BackendClient

logger = logging.getLogger(__name__)


class AutomodConfigCache:
    """Process-local ``guild_id → (AutomodConfig, expires_at)`` cache.

    Usage:
        cache = AutomodConfigCache(client, ttl=30)
        config = await cache.get(guild_id)   # may raise ConfigUnavailable

    ``clock`` defaults to :func:`time.monotonic`; tests inject a fake.
    """

    def __init__(
        self,
        client: BackendClient,
        ttl: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[int, tuple[AutomodConfig, float]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, guild_id: int) -> AutomodConfig:
        """Return the guild's config, fetching it if absent or expired.

        Raises
        ------
        ConfigUnavailable
            The fetch failed (transport error, non-2xx, body not a JSON
            object).  Nothing is cached for the guild in that case.
        """
        now = self._clock()
        cached = self._entries.get(guild_id)
        if cached is not None and now < cached[1]:
            return cached[0]

        config = await self._fetch(guild_id)
        self._entries[guild_id] = (config, now + self._ttl)
        return config

    async def _fetch(self, guild_id: int) -> AutomodConfig:
        try:
            raw = await self._client.fetch_config(guild_id)
        except httpx.HTTPError as exc:
            raise ConfigUnavailable(guild_id, str(exc) or type(exc).__name__) from exc
        except ValueError as exc:
            raise ConfigUnavailable(guild_id, "response body is not JSON") from exc

        try:
            config = decode_config(raw)
        except TypeError as exc:
            raise ConfigUnavailable(guild_id, str(exc)) from exc

        logger.debug("Config cache refreshed for guild %d", guild_id)
        return config

    def invalidate(self, guild_id: int) -> None:
        """Drop one guild's entry so the next ``get`` refetches."""
        self._entries.pop(guild_id, None)

    def clear(self) -> None:
        self._entries.clear()
