"""
modsync.api.routes.events — Event ingestion & stats
====================================================
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy import Engine

from modsync.api.deps import get_engine, get_hub, require_api_key
from modsync.database.engine import run_db
from modsync.engine.events import EventKind, parse_event
from modsync.services.broadcast import STATS_UPDATE, TICKET_EVENT, ConnectionManager
from modsync.services.stats_service import ingest_event, read_stats

router = APIRouter(tags=["events"], dependencies=[Depends(require_api_key)])
logger = logging.getLogger(__name__)


@router.post("/event")
async def post_event(
    body: dict[str, Any] = Body(...),
    engine: Engine = Depends(get_engine),
    hub: ConnectionManager = Depends(get_hub),
):
    """Fold one domain event into the guild's stats, then notify dashboards.

    A malformed body is rejected before anything is written.
    """
    event = parse_event(body)
    await run_db(ingest_event, engine, event)

    await hub.notify(STATS_UPDATE, event.community_id)
    if event.kind is EventKind.TICKET:
        await hub.notify(
            TICKET_EVENT,
            event.community_id,
            action=event.action,
            subjectId=str(event.subject_id) if event.subject_id is not None else None,
        )
    return {"success": True}


@router.get("/stats/{guild_id}")
async def get_guild_stats(guild_id: int, engine: Engine = Depends(get_engine)):
    return await run_db(read_stats, engine, guild_id)
