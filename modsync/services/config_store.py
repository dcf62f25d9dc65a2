"""
modsync.services.config_store — Guild config documents
=======================================================

Authoritative read/write access to the ``guild_configs`` table.

Writes replace the whole document (last write wins).  There is no merge,
no version check, and no schema validation: malformed sub-fields are kept
as-is and read as "disabled" by the bot.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Engine
from sqlalchemy.orm import Session

from modsync.database.engine import get_session
from modsync.database.models import GuildConfig
from modsync.engine.automod_config import default_config_document

logger = logging.getLogger(__name__)


def read_config(engine: Engine, guild_id: int) -> dict[str, Any]:
    """Return the stored document, or the default one if none exists."""
    with Session(engine) as session:
        row = session.get(GuildConfig, guild_id)
        if row is None or not isinstance(row.config_json, dict):
            return default_config_document()
        return row.config_json


def write_config(engine: Engine, guild_id: int, document: dict[str, Any]) -> None:
    """Replace the guild's document wholesale."""
    with get_session(engine) as session:
        row = session.get(GuildConfig, guild_id)
        if row is None:
            session.add(GuildConfig(guild_id=guild_id, config_json=document))
        else:
            row.config_json = document
    logger.info("Config written for guild %d", guild_id)
