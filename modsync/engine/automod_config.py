"""
modsync.engine.automod_config — Typed moderation settings
==========================================================

The API stores each guild's settings as an untyped JSON document.  The bot
decodes it exactly once, when it enters the cache, into the frozen
dataclasses below.  Every optional feature is either ``None`` (disabled) or
a params object (enabled), so enforcement code never has to ask whether a
key was present.

A missing, ``null`` or malformed sub-document decodes as *disabled*; the
decoder never raises for anything below the top level.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

__all__ = [
    "ActionSettings",
    "AutomodConfig",
    "BadWordsRule",
    "CapsRule",
    "EmojiRule",
    "Exceptions",
    "FilterSettings",
    "TimeoutAction",
    "decode_config",
    "default_config_document",
]


# ---------------------------------------------------------------------------
# Filters (rules)
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class CapsRule:
    min_length: int
    percent: float


@dataclass(frozen=True, slots=True)
class BadWordsRule:
    words: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class EmojiRule:
    max: int


@dataclass(frozen=True, slots=True)
class FilterSettings:
    """Enabled rules.  ``links`` and ``everyone`` carry no parameters."""

    links: bool = False
    everyone: bool = False
    caps: CapsRule | None = None
    bad_words: BadWordsRule | None = None
    emojis: EmojiRule | None = None


# ---------------------------------------------------------------------------
# Actions (sanctions)
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class TimeoutAction:
    duration_seconds: int


@dataclass(frozen=True, slots=True)
class ActionSettings:
    delete: bool = False
    warn: bool = False
    timeout: TimeoutAction | None = None
    kick: bool = False
    ban: bool = False


# ---------------------------------------------------------------------------
# Exceptions + top level
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class Exceptions:
    users: frozenset[int] = frozenset()
    channels: frozenset[int] = frozenset()
    roles: frozenset[int] = frozenset()


@dataclass(frozen=True, slots=True)
class AutomodConfig:
    enabled: bool = False
    filters: FilterSettings = field(default_factory=FilterSettings)
    actions: ActionSettings = field(default_factory=ActionSettings)
    exceptions: Exceptions = field(default_factory=Exceptions)
    log_channel_id: int | None = None


def default_config_document() -> dict[str, Any]:
    """The document served for a guild that has never been configured."""
    return {
        "enabled": False,
        "filters": {},
        "actions": {},
        "exceptions": {"users": [], "channels": [], "roles": []},
        "logs": {},
    }


# ---------------------------------------------------------------------------
# Decoding helpers
# ---------------------------------------------------------------------------
def _section(raw: Any, key: str) -> dict:
    value = raw.get(key) if isinstance(raw, dict) else None
    return value if isinstance(value, dict) else {}


def _enabled(value: Any) -> bool:
    """``{"enabled": true}`` or a bare ``true`` both count as enabled."""
    if isinstance(value, dict):
        return value.get("enabled") is True
    return value is True


def _number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _snowflake(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _snowflakes(values: Any) -> frozenset[int]:
    if not isinstance(values, list):
        return frozenset()
    ids = (_snowflake(v) for v in values)
    return frozenset(i for i in ids if i is not None)


def _decode_filters(raw: dict) -> FilterSettings:
    caps = None
    caps_raw = raw.get("caps")
    if isinstance(caps_raw, dict) and _enabled(caps_raw):
        min_length = _number(caps_raw.get("minLength"))
        percent = _number(caps_raw.get("percent"))
        if min_length is not None and percent is not None:
            caps = CapsRule(min_length=int(min_length), percent=percent)

    bad_words = None
    words_raw = raw.get("badWords")
    if isinstance(words_raw, dict) and _enabled(words_raw):
        words = tuple(
            w.lower() for w in words_raw.get("words") or []
            if isinstance(w, str) and w
        )
        if words:
            bad_words = BadWordsRule(words=words)

    emojis = None
    emojis_raw = raw.get("emojis")
    if isinstance(emojis_raw, dict) and _enabled(emojis_raw):
        limit = _number(emojis_raw.get("max"))
        if limit is not None:
            emojis = EmojiRule(max=int(limit))

    return FilterSettings(
        links=_enabled(raw.get("links")),
        everyone=_enabled(raw.get("everyone")),
        caps=caps,
        bad_words=bad_words,
        emojis=emojis,
    )


def _decode_actions(raw: dict) -> ActionSettings:
    timeout = None
    timeout_raw = raw.get("timeout")
    if isinstance(timeout_raw, dict) and _enabled(timeout_raw):
        duration = _number(timeout_raw.get("duration"))
        if duration is not None and duration > 0:
            timeout = TimeoutAction(duration_seconds=int(duration))

    return ActionSettings(
        delete=_enabled(raw.get("delete")),
        warn=_enabled(raw.get("warn")),
        timeout=timeout,
        kick=_enabled(raw.get("kick")),
        ban=_enabled(raw.get("ban")),
    )


def decode_config(raw: dict) -> AutomodConfig:
    """Decode a stored config document into an :class:`AutomodConfig`.

    Raises
    ------
    TypeError
        If *raw* is not a JSON object.  Anything malformed below the top
        level decodes as disabled instead.
    """
    if not isinstance(raw, dict):
        raise TypeError(f"config document must be an object, got {type(raw).__name__}")

    exceptions = _section(raw, "exceptions")
    return AutomodConfig(
        enabled=raw.get("enabled") is True,
        filters=_decode_filters(_section(raw, "filters")),
        actions=_decode_actions(_section(raw, "actions")),
        exceptions=Exceptions(
            users=_snowflakes(exceptions.get("users")),
            channels=_snowflakes(exceptions.get("channels")),
            roles=_snowflakes(exceptions.get("roles")),
        ),
        log_channel_id=_snowflake(_section(raw, "logs").get("channelId")),
    )
