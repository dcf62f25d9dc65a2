"""
modsync.engine.sanctions — Sanction pipeline
=============================================

Applies every enabled action for a violation, in order
delete → warn → timeout → kick → ban.  Each action runs whether or not
the previous one succeeded; a failure is recorded as an
:class:`ActionResult` and the pipeline moves on.  The caller gets a
:class:`SanctionReport` describing what actually happened.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING

from modsync.engine.automod_config import ActionSettings
from modsync.errors import ActionFailure

if TYPE_CHECKING:
    import discord

logger = logging.getLogger(__name__)

__all__ = ["ActionResult", "SanctionReport", "apply_sanctions"]


@dataclass(frozen=True, slots=True)
class ActionResult:
    action: str
    ok: bool
    reason: str | None = None


@dataclass(slots=True)
class SanctionReport:
    violation: str
    results: list[ActionResult] = field(default_factory=list)

    @property
    def applied(self) -> list[str]:
        return [r.action for r in self.results if r.ok]

    @property
    def failed(self) -> list[ActionResult]:
        return [r for r in self.results if not r.ok]


def _audit_reason(violation: str) -> str:
    return f"Automod: {violation}"


def _planned_actions(
    message: discord.Message, actions: ActionSettings, violation: str,
) -> list[tuple[str, Callable[[], Awaitable[object]]]]:
    """Build the (name, thunk) list for every enabled action, in order."""
    author = message.author
    reason = _audit_reason(violation)
    guild_name = message.guild.name if message.guild else "this server"
    planned: list[tuple[str, Callable[[], Awaitable[object]]]] = []

    if actions.delete:
        planned.append(("delete", lambda: message.delete()))
    if actions.warn:
        notice = f"\u26a0\ufe0f Warning in **{guild_name}**\nReason: {violation}"
        planned.append(("warn", lambda: author.send(notice)))
    if actions.timeout is not None:
        duration = timedelta(seconds=actions.timeout.duration_seconds)
        planned.append(("timeout", lambda: author.timeout(duration, reason=reason)))
    if actions.kick:
        planned.append(("kick", lambda: author.kick(reason=reason)))
    if actions.ban:
        planned.append(("ban", lambda: author.ban(reason=reason)))
    return planned


async def _run_action(name: str, thunk: Callable[[], Awaitable[object]]) -> ActionResult:
    try:
        await thunk()
    except Exception as exc:
        failure = ActionFailure(name, str(exc) or type(exc).__name__)
        logger.warning("Sanction %s", failure)
        return ActionResult(action=name, ok=False, reason=failure.reason)
    return ActionResult(action=name, ok=True)


async def apply_sanctions(
    message: discord.Message, actions: ActionSettings, violation: str,
) -> SanctionReport:
    """Run every enabled action against *message* and its author."""
    report = SanctionReport(violation=violation)
    for name, thunk in _planned_actions(message, actions, violation):
        report.results.append(await _run_action(name, thunk))

    if report.failed:
        logger.info(
            "Sanctions for %s: applied=%s failed=%s",
            violation, report.applied, [r.action for r in report.failed],
        )
    return report
