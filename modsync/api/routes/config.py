"""
modsync.api.routes.config — Config distribution
================================================

``GET /api/config/{guild_id}`` serves the stored document (or the default
one).  ``POST /api/config`` replaces it and tells every dashboard to
re-read.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, Field, field_validator
from sqlalchemy import Engine

from modsync.api.deps import get_engine, get_hub, require_api_key
from modsync.database.engine import run_db
from modsync.engine.events import parse_community_id
from modsync.errors import BadRequest
from modsync.services.broadcast import CONFIG_UPDATE, ConnectionManager
from modsync.services.config_store import read_config, write_config

router = APIRouter(tags=["config"], dependencies=[Depends(require_api_key)])
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class ConfigUpdate(BaseModel):
    """Only the envelope is validated; the document itself is opaque."""

    community_id: int = Field(validation_alias=AliasChoices("communityId", "guildId"))
    config: dict[str, Any]

    @field_validator("community_id", mode="before")
    @classmethod
    def numeric_community_id(cls, value: Any) -> int:
        # Same rules as event ingestion: booleans and non-numeric strings
        # are not ids.
        try:
            return parse_community_id({"communityId": value})
        except BadRequest as exc:
            raise ValueError(str(exc)) from None


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@router.get("/config/{guild_id}")
async def get_guild_config(guild_id: int, engine: Engine = Depends(get_engine)):
    return await run_db(read_config, engine, guild_id)


@router.post("/config")
async def update_guild_config(
    body: ConfigUpdate,
    engine: Engine = Depends(get_engine),
    hub: ConnectionManager = Depends(get_hub),
):
    """Replace a guild's config document (last write wins)."""
    await run_db(write_config, engine, body.community_id, body.config)
    await hub.notify(CONFIG_UPDATE, body.community_id)
    return {"success": True}
