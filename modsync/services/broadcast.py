"""
modsync.services.broadcast — Dashboard fan-out
===============================================

Keeps the set of live dashboard WebSockets and pushes change notifications
to all of them.  Notifications are signals, not deltas: a dashboard that
receives ``{"type": "stats:update", "communityId": "…"}`` re-reads the
full state over HTTP.  Nothing is buffered or replayed, so a connection
registered after a publish never sees it.

The manager is an explicit object created by the API lifespan and handed
to routes through :func:`modsync.api.deps.get_hub`.  It owns no business
state; rebuilding it after a restart loses nothing but open sockets.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

from modsync.errors import DeliveryFailure

logger = logging.getLogger(__name__)

__all__ = [
    "BroadcastReport",
    "Connection",
    "ConnectionManager",
    "CONFIG_UPDATE",
    "STATS_UPDATE",
    "TICKET_EVENT",
]

# Message types pushed to dashboards
CONFIG_UPDATE = "config:update"
STATS_UPDATE = "stats:update"
TICKET_EVENT = "ticket:event"


class Connection(Protocol):
    """Anything with an async ``send_text`` (Starlette's WebSocket)."""

    async def send_text(self, data: str) -> None: ...


@dataclass(slots=True)
class BroadcastReport:
    """Outcome of one publish."""

    delivered: int = 0
    failures: list[DeliveryFailure] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return self.delivered + len(self.failures)


class ConnectionManager:
    """Registry of subscriber connections with best-effort fan-out.

    Parameters
    ----------
    on_connect, on_disconnect:
        Called with the connection after it is added / removed.
    on_send_failure:
        Called with ``(connection, exception)`` when a send raises.
    drop_on_failure:
        Unregister a connection on its first failed send.  Off by default:
        a failing socket stays registered until its own handler sees the
        close and unsubscribes it.
    """

    def __init__(
        self,
        *,
        on_connect: Callable[[Connection], None] | None = None,
        on_disconnect: Callable[[Connection], None] | None = None,
        on_send_failure: Callable[[Connection, Exception], None] | None = None,
        drop_on_failure: bool = False,
    ) -> None:
        self._connections: set[Connection] = set()
        self._on_connect = on_connect
        self._on_disconnect = on_disconnect
        self._on_send_failure = on_send_failure
        self.drop_on_failure = drop_on_failure

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, conn: object) -> bool:
        return conn in self._connections

    # -------------------------------------------------------------------
    # Membership
    # -------------------------------------------------------------------
    def subscribe(self, conn: Connection) -> None:
        if conn in self._connections:
            return
        self._connections.add(conn)
        logger.info("Dashboard subscribed (%d live)", len(self._connections))
        if self._on_connect is not None:
            self._on_connect(conn)

    def unsubscribe(self, conn: Connection) -> None:
        if conn not in self._connections:
            return
        self._connections.discard(conn)
        logger.info("Dashboard unsubscribed (%d live)", len(self._connections))
        if self._on_disconnect is not None:
            self._on_disconnect(conn)

    # -------------------------------------------------------------------
    # Fan-out
    # -------------------------------------------------------------------
    async def publish(self, payload: dict[str, Any]) -> BroadcastReport:
        """Serialize *payload* once and send it to every current subscriber.

        Sends run concurrently, so a slow socket does not hold up the
        others.  A failed send is recorded in the report and never stops
        delivery to the remaining subscribers or raises into the caller.
        """
        raw = json.dumps(payload, default=str)
        report = BroadcastReport()

        # Snapshot: subscribe/unsubscribe during the sends below must not
        # change who receives this payload.
        targets = list(self._connections)
        results = await asyncio.gather(
            *(conn.send_text(raw) for conn in targets),
            return_exceptions=True,
        )
        for conn, result in zip(targets, results):
            if isinstance(result, Exception):
                report.failures.append(DeliveryFailure(str(result) or type(result).__name__))
                self._handle_send_failure(conn, result)
            elif isinstance(result, BaseException):
                raise result
            else:
                report.delivered += 1

        logger.debug(
            "Broadcast %s → %d/%d subscribers",
            payload.get("type"), report.delivered, report.attempted,
        )
        return report

    def _handle_send_failure(self, conn: Connection, exc: Exception) -> None:
        logger.warning("Broadcast send failed: %s", exc)
        if self._on_send_failure is not None:
            try:
                self._on_send_failure(conn, exc)
            except Exception:
                logger.exception("on_send_failure hook raised")
        if self.drop_on_failure:
            self.unsubscribe(conn)

    async def notify(self, event_type: str, community_id: int, **extra: Any) -> BroadcastReport:
        """Publish the standard ``{type, communityId, ...}`` envelope."""
        return await self.publish({
            "type": event_type,
            "communityId": str(community_id),
            **extra,
        })
