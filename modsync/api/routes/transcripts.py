"""
modsync.api.routes.transcripts — Ticket transcript storage
===========================================================

Uploads need the shared secret.  Reads do not: transcript links are
opened directly in a browser, and keys are unguessable ticket ids.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy import Engine

from modsync.api.deps import get_engine, require_api_key
from modsync.database.engine import run_db
from modsync.errors import BadRequest
from modsync.services.transcript_store import get_transcript, put_transcript

router = APIRouter(prefix="/transcripts", tags=["transcripts"])

NOT_FOUND_HTML = "<h1>Transcript not found</h1>"


@router.put("/{key}", dependencies=[Depends(require_api_key)])
async def upload_transcript(
    key: str,
    request: Request,
    engine: Engine = Depends(get_engine),
):
    raw = await request.body()
    if not raw:
        raise BadRequest("Empty transcript")
    try:
        html = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise BadRequest("Transcript must be UTF-8 HTML") from None

    await run_db(put_transcript, engine, key, html)
    return {"success": True}


@router.get("/{key}", response_class=HTMLResponse)
async def read_transcript(key: str, engine: Engine = Depends(get_engine)):
    html = await run_db(get_transcript, engine, key)
    if html is None:
        return HTMLResponse(NOT_FOUND_HTML, status_code=404)
    return HTMLResponse(html)
