"""
modsync.bot.__main__ — Entry point for ``python -m modsync.bot``
================================================================

Wiring:
1. Load .env (secrets).
2. Load config.yaml (infrastructure settings).
3. Build the API client and the config cache in front of it.
4. Create the ModSyncBot and start it (blocking).
"""

from __future__ import annotations

import logging
import os
import sys

from dotenv import load_dotenv

from modsync.bot.core import ModSyncBot
from modsync.config import load_config
from modsync.engine.cache import AutomodConfigCache
from modsync.services.backend_client import BackendClient

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("modsync")


def main() -> None:
    """Bootstrap and run the ModSync bot."""

    # 1. Environment variables (secrets).
    load_dotenv()

    token = os.getenv("DISCORD_TOKEN")
    if not token or token == "your-discord-bot-token-here":
        logger.critical(
            "DISCORD_TOKEN is not set.  "
            "Copy .env.example → .env and paste your bot token."
        )
        sys.exit(1)

    api_key = os.getenv("MODSYNC_API_KEY")
    if not api_key:
        logger.critical("MODSYNC_API_KEY is not set; the bot cannot reach the API.")
        sys.exit(1)

    # 2. Soft configuration.
    cfg = load_config()
    logger.info("Config loaded — %s → %s", cfg.community_name, cfg.api_base_url)

    # 3. API client + read-through cache.
    backend = BackendClient(cfg.api_base_url, api_key, timeout=cfg.http_timeout_seconds)
    cache = AutomodConfigCache(backend, ttl=cfg.cache_ttl_seconds)

    # 4. Bot.
    bot = ModSyncBot(cfg=cfg, backend=backend, cache=cache)

    logger.info("Starting ModSync bot…")
    try:
        bot.run(token, log_handler=None)
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully…")


if __name__ == "__main__":
    main()
