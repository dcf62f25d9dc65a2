"""
modsync.bot.core — Bot Instance & Cog Loader
=============================================

Defines :class:`ModSyncBot`, a ``commands.Bot`` subclass that carries the
shared state every cog needs:

* ``bot.cfg``     — the parsed :class:`ModSyncConfig`
* ``bot.backend`` — the :class:`BackendClient` used to reach the API
* ``bot.cache``   — the :class:`AutomodConfigCache` in front of it

The bot has no database access of its own.
"""

from __future__ import annotations

import logging

import discord
from discord.ext import commands

from modsync.config import ModSyncConfig
from modsync.engine.cache import AutomodConfigCache
from modsync.services.backend_client import BackendClient

logger = logging.getLogger(__name__)

# Cog modules to load on startup.
EXTENSIONS: list[str] = [
    "modsync.bot.cogs.automod",
]


class ModSyncBot(commands.Bot):
    """Custom Bot subclass that carries project-wide state."""

    def __init__(
        self,
        cfg: ModSyncConfig,
        backend: BackendClient,
        cache: AutomodConfigCache,
    ) -> None:
        # MESSAGE_CONTENT is privileged: needed to evaluate rules.
        # MEMBERS is needed for role exemptions and member sanctions.
        intents = discord.Intents.default()
        intents.message_content = True
        intents.members = True
        intents.presences = False

        super().__init__(
            command_prefix=cfg.bot_prefix,
            intents=intents,
            description=f"{cfg.community_name} — automod",
        )

        self.cfg = cfg
        self.backend = backend
        self.cache = cache

    async def setup_hook(self) -> None:
        """Load cog extensions.  One broken cog must not stop the others."""
        for ext in EXTENSIONS:
            try:
                await self.load_extension(ext)
                logger.info("Loaded extension: %s", ext)
            except Exception as exc:
                logger.error("Failed to load extension %s: %s", ext, exc)

    async def on_ready(self) -> None:
        assert self.user is not None  # guaranteed after on_ready
        logger.info(
            "Logged in as %s (ID: %s) — watching %d guilds",
            self.user.name, self.user.id, len(self.guilds),
        )

    async def close(self) -> None:
        """Graceful shutdown — release the pooled HTTP connections."""
        logger.info("Bot shutting down…")
        self.cache.clear()
        await self.backend.aclose()
        await super().close()
