"""
modsync.engine.rules — Violation detection
===========================================

Evaluates the enabled filters against one message's content in a fixed
priority order and reports the first one that matches:

    links → everyone → caps → badWords → emojis

At most one violation is reported per message.  The order is policy: a
message with a link *and* shouting is a ``links`` violation.
"""

from __future__ import annotations

import re

import regex

from modsync.engine.automod_config import Exceptions, FilterSettings

__all__ = [
    "VIOLATION_LINKS",
    "VIOLATION_EVERYONE",
    "VIOLATION_CAPS",
    "VIOLATION_BAD_WORDS",
    "VIOLATION_EMOJIS",
    "count_emojis",
    "detect_violation",
    "is_exempt",
    "percent_caps",
]

# Labels reported to the stats fold (match the config document keys)
VIOLATION_LINKS = "links"
VIOLATION_EVERYONE = "everyone"
VIOLATION_CAPS = "caps"
VIOLATION_BAD_WORDS = "badWords"
VIOLATION_EMOJIS = "emojis"

_LINK_REGEX = re.compile(r"(https?://|discord\.gg)", re.IGNORECASE)

# Discord custom emoji markup plus any Extended_Pictographic code point.
# Skin-tone modifiers and ZWJ sequences are not collapsed, so a compound
# emoji may count more than once.
_EMOJI_REGEX = regex.compile(r"<a?:[a-zA-Z0-9_]+:[0-9]+>|\p{Extended_Pictographic}")


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------
def percent_caps(text: str) -> float:
    """Share of alphabetic characters that are uppercase, as 0–100.

    Non-letters are excluded from both sides of the ratio; text without
    letters scores 0.
    """
    letters = [ch for ch in text if ch.isalpha()]
    if not letters:
        return 0.0
    upper = sum(1 for ch in letters if ch.isupper())
    return upper / len(letters) * 100


def count_emojis(text: str) -> int:
    """Count Unicode pictographs and custom emojis (``<:name:id>``)."""
    return len(_EMOJI_REGEX.findall(text))


# ---------------------------------------------------------------------------
# Exemptions
# ---------------------------------------------------------------------------
def is_exempt(
    exceptions: Exceptions,
    *,
    user_id: int,
    channel_id: int,
    role_ids: list[int] | set[int] | frozenset[int],
) -> bool:
    """Return True if the author, channel or any author role is exempt.

    Checked user → channel → roles; the first match short-circuits.
    """
    if user_id in exceptions.users:
        return True
    if channel_id in exceptions.channels:
        return True
    return any(role_id in exceptions.roles for role_id in role_ids)


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------
def detect_violation(content: str, filters: FilterSettings) -> str | None:
    """Return the label of the first enabled filter *content* violates."""
    if filters.links and _LINK_REGEX.search(content):
        return VIOLATION_LINKS

    if filters.everyone and ("@everyone" in content or "@here" in content):
        return VIOLATION_EVERYONE

    caps = filters.caps
    if caps is not None and len(content) >= caps.min_length:
        if percent_caps(content) >= caps.percent:
            return VIOLATION_CAPS

    bad_words = filters.bad_words
    if bad_words is not None:
        lowered = content.lower()
        if any(word in lowered for word in bad_words.words):
            return VIOLATION_BAD_WORDS

    emojis = filters.emojis
    if emojis is not None and count_emojis(content) > emojis.max:
        return VIOLATION_EMOJIS

    return None
