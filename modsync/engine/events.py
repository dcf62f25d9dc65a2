"""
modsync.engine.events — DomainEvent and the stats fold
=======================================================

A :class:`DomainEvent` describes one occurrence (a rule violation, a ticket
opened or closed).  Events are never stored; only their effect on the
guild's counters document survives, via :func:`fold_event`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from modsync.errors import BadRequest

__all__ = [
    "DomainEvent",
    "EventKind",
    "TICKET_CLOSE",
    "TICKET_OPEN",
    "fold_event",
    "normalize_stats",
    "parse_community_id",
    "parse_event",
    "zero_stats",
]

TICKET_OPEN = "open"
TICKET_CLOSE = "close"


class EventKind(enum.StrEnum):
    VIOLATION = "violation"
    TICKET = "ticket"


@dataclass(frozen=True, slots=True)
class DomainEvent:
    """One ingested occurrence.

    ``action`` is the violation label for ``VIOLATION`` events and
    ``"open"`` / ``"close"`` for ``TICKET`` events.
    """

    community_id: int
    kind: EventKind
    action: str
    subject_id: int | None = None


# ---------------------------------------------------------------------------
# Parsing (request body → DomainEvent)
# ---------------------------------------------------------------------------
def _first(body: dict, *keys: str) -> Any:
    for key in keys:
        value = body.get(key)
        if value not in (None, ""):
            return value
    return None


def _optional_id(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_community_id(body: dict) -> int:
    """Read ``communityId`` (or ``guildId``) as an int.

    Raises :class:`BadRequest` if it is missing or not numeric.
    """
    raw_id = _first(body, "communityId", "guildId")
    if raw_id is None or isinstance(raw_id, bool):
        raise BadRequest("Missing communityId")
    try:
        return int(raw_id)
    except (TypeError, ValueError):
        raise BadRequest("communityId must be a numeric id") from None


def parse_event(body: Any) -> DomainEvent:
    """Validate an ingestion request body.

    Accepted shapes::

        {"guildId": "1", "kind": "violation", "type": "links", "userId": "2"}
        {"guildId": "1", "type": "links", "userId": "2"}      # kind implied
        {"guildId": "1", "kind": "ticket", "action": "open"}
        {"guildId": "1", "type": "ticket", "action": "close"}

    ``communityId`` is accepted in place of ``guildId``.

    Raises
    ------
    BadRequest
        Missing/non-numeric community id, missing kind, or an unknown
        ticket action.
    """
    if not isinstance(body, dict):
        raise BadRequest("Event body must be a JSON object")

    community_id = parse_community_id(body)

    kind = _first(body, "kind")
    event_type = _first(body, "type")
    subject_id = _optional_id(_first(body, "subjectId", "userId"))

    if kind == EventKind.TICKET or (kind is None and event_type == EventKind.TICKET):
        action = _first(body, "action")
        if action not in (TICKET_OPEN, TICKET_CLOSE):
            raise BadRequest("Ticket events need action 'open' or 'close'")
        return DomainEvent(community_id, EventKind.TICKET, action, subject_id)

    if kind not in (None, EventKind.VIOLATION):
        raise BadRequest(f"Unknown event kind: {kind}")

    label = _first(body, "violation", "type", "action")
    if label is None or label == EventKind.VIOLATION:
        raise BadRequest("Missing event type")
    return DomainEvent(community_id, EventKind.VIOLATION, str(label), subject_id)


# ---------------------------------------------------------------------------
# Fold (counters document × event → counters document)
# ---------------------------------------------------------------------------
def zero_stats() -> dict[str, Any]:
    return {"openTickets": 0, "totalTickets": 0, "violations": {}}


def _count(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return max(0, value)


def normalize_stats(raw: Any) -> dict[str, Any]:
    """Coerce a stored document into the counters shape.

    Missing or invalid counters read as zero, so a partially written or
    legacy row never breaks the fold.
    """
    stats = zero_stats()
    if not isinstance(raw, dict):
        return stats
    stats["openTickets"] = _count(raw.get("openTickets"))
    stats["totalTickets"] = _count(raw.get("totalTickets"))
    violations = raw.get("violations")
    if isinstance(violations, dict):
        stats["violations"] = {
            str(label): _count(n) for label, n in violations.items()
        }
    return stats


def fold_event(stats: dict[str, Any], event: DomainEvent) -> dict[str, Any]:
    """Return a new counters document with *event* applied.

    * violation ``T`` → ``violations[T] += 1``
    * ticket open     → ``openTickets += 1`` and ``totalTickets += 1``
    * ticket close    → ``openTickets -= 1``, floored at 0

    The close floor absorbs duplicate or out-of-order closes; it does not
    try to pair a close with an earlier open.
    """
    result = normalize_stats(stats)

    if event.kind is EventKind.VIOLATION:
        violations = result["violations"]
        violations[event.action] = violations.get(event.action, 0) + 1
    elif event.action == TICKET_OPEN:
        result["openTickets"] += 1
        result["totalTickets"] += 1
    elif event.action == TICKET_CLOSE:
        result["openTickets"] = max(0, result["openTickets"] - 1)

    return result
