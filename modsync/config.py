"""
modsync.config — YAML Configuration Loader
===========================================

Reads ``config.yaml`` for **infrastructure-only** settings (bot identity,
backend location, cache and HTTP tuning).  Per-community moderation
settings do not live here: they are stored by the API in the
``guild_configs`` table and reach the bot through
:class:`~modsync.engine.cache.AutomodConfigCache`.

Secrets (``DISCORD_TOKEN``, ``MODSYNC_API_KEY``, ``DATABASE_URL``) come from
the environment / ``.env`` and are never read from this file.

Usage::

    from modsync.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.api_base_url)      # "http://localhost:8000"
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

DEFAULT_CACHE_TTL_SECONDS = 30.0
DEFAULT_HTTP_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True, slots=True)
class ModSyncConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    community_name: str

    # Discord
    bot_prefix: str

    # Backend API the bot reads configuration from and reports events to
    api_base_url: str

    # Tuning
    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS

    # Dashboard / API
    dashboard_port: int = 8000


def load_config(path: str | Path = "config.yaml") -> ModSyncConfig:
    """Read *path* and return a :class:`ModSyncConfig` instance.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    return ModSyncConfig(
        community_name=raw["community_name"],
        bot_prefix=raw["bot_prefix"],
        api_base_url=str(raw["api_base_url"]).rstrip("/"),
        cache_ttl_seconds=float(
            raw.get("cache_ttl_seconds", DEFAULT_CACHE_TTL_SECONDS)
        ),
        http_timeout_seconds=float(
            raw.get("http_timeout_seconds", DEFAULT_HTTP_TIMEOUT_SECONDS)
        ),
        dashboard_port=int(raw.get("dashboard_port", 8000)),
    )
