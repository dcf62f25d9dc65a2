"""
tests/test_events.py — DomainEvent parsing and the stats fold
==============================================================
"""

from __future__ import annotations

import pytest

from modsync.engine.events import (
    DomainEvent,
    EventKind,
    fold_event,
    normalize_stats,
    parse_event,
    zero_stats,
)
from modsync.errors import BadRequest


def _ticket(action: str, guild_id: int = 1) -> DomainEvent:
    return DomainEvent(guild_id, EventKind.TICKET, action)


def _violation(label: str, guild_id: int = 1) -> DomainEvent:
    return DomainEvent(guild_id, EventKind.VIOLATION, label)


# ===========================================================================
# parse_event
# ===========================================================================
class TestParseEvent:
    def test_legacy_violation_shape(self):
        event = parse_event({"guildId": "123", "type": "links", "userId": "42"})
        assert event == DomainEvent(123, EventKind.VIOLATION, "links", 42)

    def test_explicit_violation_kind(self):
        event = parse_event({"communityId": 5, "kind": "violation", "violation": "caps"})
        assert event.kind is EventKind.VIOLATION
        assert event.action == "caps"
        assert event.subject_id is None

    @pytest.mark.parametrize("body", [
        {"guildId": "9", "kind": "ticket", "action": "open"},
        {"guildId": "9", "type": "ticket", "action": "open"},
    ])
    def test_ticket_shapes(self, body):
        event = parse_event(body)
        assert event == DomainEvent(9, EventKind.TICKET, "open")

    def test_community_id_preferred_over_guild_id(self):
        event = parse_event({"communityId": "1", "guildId": "2", "type": "links"})
        assert event.community_id == 1

    @pytest.mark.parametrize("body", [
        {},
        {"type": "links"},
        {"guildId": "", "type": "links"},
        {"guildId": "abc", "type": "links"},
        {"guildId": True, "type": "links"},
    ])
    def test_missing_or_bad_community_id(self, body):
        with pytest.raises(BadRequest):
            parse_event(body)

    def test_missing_type(self):
        with pytest.raises(BadRequest, match="Missing event type"):
            parse_event({"guildId": "1"})

    def test_violation_kind_without_label(self):
        with pytest.raises(BadRequest):
            parse_event({"guildId": "1", "kind": "violation"})

    def test_unknown_ticket_action(self):
        with pytest.raises(BadRequest, match="open"):
            parse_event({"guildId": "1", "kind": "ticket", "action": "reopen"})

    def test_unknown_kind(self):
        with pytest.raises(BadRequest, match="Unknown event kind"):
            parse_event({"guildId": "1", "kind": "reaction", "type": "x"})

    def test_non_object_body(self):
        with pytest.raises(BadRequest):
            parse_event(["guildId", "1"])

    def test_non_numeric_user_id_is_dropped(self):
        event = parse_event({"guildId": "1", "type": "links", "userId": "someone"})
        assert event.subject_id is None


# ===========================================================================
# fold_event
# ===========================================================================
class TestFold:
    def test_open_open_close(self):
        stats = zero_stats()
        for action in ("open", "open", "close"):
            stats = fold_event(stats, _ticket(action))
        assert stats["openTickets"] == 1
        assert stats["totalTickets"] == 2

    def test_spurious_close_never_goes_negative(self):
        stats = zero_stats()
        for action in ("open", "open", "close", "close", "close", "close"):
            stats = fold_event(stats, _ticket(action))
        assert stats["openTickets"] == 0
        assert stats["totalTickets"] == 2

    def test_close_from_zero(self):
        stats = fold_event(zero_stats(), _ticket("close"))
        assert stats == zero_stats()

    def test_violations_counted_per_type(self):
        stats = zero_stats()
        for label in ("links", "caps", "links"):
            stats = fold_event(stats, _violation(label))
        assert stats["violations"] == {"links": 2, "caps": 1}
        assert stats["openTickets"] == 0
        assert stats["totalTickets"] == 0

    def test_fold_does_not_mutate_input(self):
        before = {"openTickets": 1, "totalTickets": 1, "violations": {"links": 1}}
        fold_event(before, _violation("links"))
        fold_event(before, _ticket("open"))
        assert before == {"openTickets": 1, "totalTickets": 1, "violations": {"links": 1}}

    def test_fold_from_legacy_document(self):
        stats = fold_event({"openTickets": "3", "extra": 1}, _ticket("open"))
        assert stats == {"openTickets": 1, "totalTickets": 1, "violations": {}}


class TestNormalizeStats:
    def test_none_is_zero(self):
        assert normalize_stats(None) == zero_stats()

    def test_negative_counters_clamped(self):
        stats = normalize_stats({"openTickets": -4, "violations": {"caps": -1}})
        assert stats["openTickets"] == 0
        assert stats["violations"] == {"caps": 0}

    def test_bool_is_not_a_count(self):
        assert normalize_stats({"totalTickets": True})["totalTickets"] == 0
