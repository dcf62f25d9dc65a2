"""
modsync.services.stats_service — Stats read + event ingestion
==============================================================

Folds one :class:`~modsync.engine.events.DomainEvent` into the guild's
counters document: read, apply :func:`fold_event`, write back the whole
document.

The read and the write happen in separate sessions and nothing locks the
row in between.  Two folds racing on the same guild can therefore lose an
increment; the counters are advisory dashboard figures, so that is
accepted.  A per-counter atomic increment would be the fix if they ever
need to be exact.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Engine
from sqlalchemy.orm import Session

from modsync.database.engine import get_session
from modsync.database.models import GuildStats
from modsync.engine.events import DomainEvent, fold_event, normalize_stats

logger = logging.getLogger(__name__)


def read_stats(engine: Engine, guild_id: int) -> dict[str, Any]:
    """Return the guild's counters, zero-valued if nothing was folded yet."""
    with Session(engine) as session:
        row = session.get(GuildStats, guild_id)
        return normalize_stats(row.stats_json if row is not None else None)


def write_stats(engine: Engine, guild_id: int, stats: dict[str, Any]) -> None:
    """Overwrite the guild's counters document."""
    with get_session(engine) as session:
        row = session.get(GuildStats, guild_id)
        if row is None:
            session.add(GuildStats(guild_id=guild_id, stats_json=stats))
        else:
            row.stats_json = stats


def ingest_event(engine: Engine, event: DomainEvent) -> dict[str, Any]:
    """Fold *event* into the stored counters and return the new document."""
    current = read_stats(engine, event.community_id)
    updated = fold_event(current, event)
    write_stats(engine, event.community_id, updated)
    logger.info(
        "Event folded: guild=%d kind=%s action=%s",
        event.community_id, event.kind, event.action,
    )
    return updated
