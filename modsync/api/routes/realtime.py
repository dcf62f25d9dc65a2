"""
modsync.api.routes.realtime — Dashboard WebSocket
==================================================

Server push only.  Browsers cannot set custom headers on the upgrade
request, so the shared secret may also be passed as ``?key=…``.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status

from modsync.api.deps import api_key_matches, get_hub
from modsync.services.broadcast import ConnectionManager

router = APIRouter(tags=["realtime"])
logger = logging.getLogger(__name__)


@router.websocket("/ws")
async def dashboard_socket(
    websocket: WebSocket,
    hub: ConnectionManager = Depends(get_hub),
):
    key = websocket.headers.get("x-api-key") or websocket.query_params.get("key")
    if not api_key_matches(key):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    hub.subscribe(websocket)
    try:
        # Client frames carry no protocol; drain them until the socket closes.
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    except WebSocketDisconnect:
        pass
    finally:
        hub.unsubscribe(websocket)
