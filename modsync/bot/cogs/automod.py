"""
modsync.bot.cogs.automod — Message enforcement pipeline
========================================================

Pipeline per guild message:
1. Gate: ignore bots and DMs.
2. Fetch the guild's config through the read-through cache.  If the API
   can't be reached, skip this message rather than block or retry.
3. Gate: automod disabled, or author / channel / role exempt.
4. Detect at most one violation (fixed rule priority).
5. Apply every enabled sanction independently.
6. Report the violation to the API (stats + dashboards).
7. Post a notice to the guild's log channel, if one is configured.

``/automod-refresh`` drops the cached config for the guild and refetches it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from modsync.engine.rules import detect_violation, is_exempt
from modsync.engine.sanctions import SanctionReport, apply_sanctions
from modsync.errors import ConfigUnavailable

if TYPE_CHECKING:
    from modsync.bot.core import ModSyncBot

logger = logging.getLogger(__name__)

LOG_EMBED_COLOR = 0xFF0000
LOG_CONTENT_LIMIT = 1500


def build_log_embed(message: discord.Message, violation: str) -> discord.Embed:
    """Embed posted to the guild's moderation log channel."""
    content = message.content[:LOG_CONTENT_LIMIT]
    embed = discord.Embed(
        title="\U0001f6e1\ufe0f Automod",
        color=LOG_EMBED_COLOR,
        description=(
            f"**User**: {message.author.mention}\n"
            f"**Type**: {violation}\n"
            f"**Channel**: {message.channel.mention}\n"
            f"**Message**:\n```\n{content}\n```"
        ),
        timestamp=discord.utils.utcnow(),
    )
    return embed


class Automod(commands.Cog, name="Automod"):
    """Enforces each guild's moderation config on incoming messages."""

    def __init__(self, bot: ModSyncBot) -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        try:
            await self._handle_message(message)
        except Exception:
            logger.exception(
                "Error moderating message %s from user %s",
                message.id,
                message.author.id,
            )

    async def _handle_message(self, message: discord.Message) -> SanctionReport | None:
        """Inner handler (separated for error isolation).

        Returns the sanction report when a violation was enforced.
        """
        if message.author.bot or message.guild is None:
            return None

        guild = message.guild
        try:
            config = await self.bot.cache.get(guild.id)
        except ConfigUnavailable as exc:
            logger.warning("Skipping enforcement: %s", exc)
            return None

        if not config.enabled:
            return None

        role_ids = [role.id for role in getattr(message.author, "roles", [])]
        if is_exempt(
            config.exceptions,
            user_id=message.author.id,
            channel_id=message.channel.id,
            role_ids=role_ids,
        ):
            return None

        violation = detect_violation(message.content, config.filters)
        if violation is None:
            return None

        logger.info(
            "Violation %s by %s in guild %s",
            violation, message.author.id, guild.id,
        )
        report = await apply_sanctions(message, config.actions, violation)
        await self.bot.backend.report_violation(guild.id, violation, message.author.id)

        if config.log_channel_id is not None:
            await self._post_log(message, config.log_channel_id, violation)
        return report

    async def _post_log(
        self, message: discord.Message, channel_id: int, violation: str,
    ) -> None:
        assert message.guild is not None
        channel = message.guild.get_channel(channel_id)
        if channel is None or not hasattr(channel, "send"):
            logger.debug("Log channel %d not found in guild %s", channel_id, message.guild.id)
            return
        try:
            await channel.send(embed=build_log_embed(message, violation))
        except Exception as exc:
            logger.warning("Failed to post automod log to %d: %s", channel_id, exc)

    # -------------------------------------------------------------------
    # /automod-refresh
    # -------------------------------------------------------------------
    @commands.hybrid_command(  # type: ignore[arg-type]
        name="automod-refresh",
        description="Re-read this server's automod settings from the dashboard now.",
    )
    @commands.guild_only()
    @commands.has_permissions(manage_guild=True)
    async def automod_refresh(self, ctx: commands.Context) -> None:
        assert ctx.guild is not None
        self.bot.cache.invalidate(ctx.guild.id)
        try:
            config = await self.bot.cache.get(ctx.guild.id)
        except ConfigUnavailable as exc:
            logger.warning("Manual refresh failed: %s", exc)
            await ctx.send(
                "\u274c Couldn't reach the ModSync API. Try again shortly.",
                ephemeral=True,
            )
            return
        state = "enabled" if config.enabled else "disabled"
        await ctx.send(
            f"\u2705 Automod settings reloaded. Automod is **{state}**.",
            ephemeral=True,
        )


async def setup(bot: ModSyncBot) -> None:
    await bot.add_cog(Automod(bot))
