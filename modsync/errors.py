"""
modsync.errors — Error taxonomy
================================

``BadRequest`` and ``Unauthorized`` surface to API callers (400 / 401).
The remaining errors are recovered locally: ``ConfigUnavailable`` skips
enforcement for one message, ``DeliveryFailure`` and ``ActionFailure``
are recorded in an outcome report and never block sibling work.
"""

from __future__ import annotations


class ModSyncError(Exception):
    """Base class for predictable ModSync errors."""


class BadRequest(ModSyncError):
    """A required field is missing or malformed."""


class Unauthorized(ModSyncError):
    """The shared-secret header is absent or does not match."""


class ConfigUnavailable(ModSyncError):
    """Configuration could not be fetched or decoded for a guild."""

    def __init__(self, guild_id: int, reason: str) -> None:
        super().__init__(f"Config unavailable for guild {guild_id}: {reason}")
        self.guild_id = guild_id
        self.reason = reason


class DeliveryFailure(ModSyncError):
    """A single broadcast send failed."""


class ActionFailure(ModSyncError):
    """A single sanction action failed."""

    def __init__(self, action: str, reason: str) -> None:
        super().__init__(f"{action} failed: {reason}")
        self.action = action
        self.reason = reason
