"""
modsync.services.transcript_store — Ticket transcripts
=======================================================

Plain key → HTML storage for closed-ticket transcripts.  Writing an
existing key replaces it.
"""

from __future__ import annotations

from sqlalchemy import Engine
from sqlalchemy.orm import Session

from modsync.database.engine import get_session
from modsync.database.models import Transcript


def put_transcript(engine: Engine, key: str, html: str) -> None:
    with get_session(engine) as session:
        row = session.get(Transcript, key)
        if row is None:
            session.add(Transcript(key=key, html=html))
        else:
            row.html = html


def get_transcript(engine: Engine, key: str) -> str | None:
    with Session(engine) as session:
        row = session.get(Transcript, key)
        return row.html if row is not None else None
