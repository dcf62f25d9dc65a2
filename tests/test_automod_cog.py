"""
tests/test_automod_cog.py — Message enforcement pipeline
=========================================================

The cog is driven with mocked discord objects; the cache and backend
client are mocks too, so no gateway or HTTP is involved.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from modsync.bot.cogs.automod import LOG_CONTENT_LIMIT, Automod, build_log_embed
from modsync.engine.automod_config import decode_config
from modsync.engine.sanctions import apply_sanctions
from modsync.errors import ConfigUnavailable

GUILD_ID = 1000
LOG_CHANNEL_ID = 2000
AUTHOR_ID = 42
CHANNEL_ID = 3000
ROLE_ID = 4000

CONFIG_DOC = {
    "enabled": True,
    "filters": {"links": {"enabled": True}, "caps": {"enabled": True, "minLength": 10, "percent": 70}},
    "actions": {
        "delete": {"enabled": True},
        "warn": {"enabled": True},
        "timeout": {"enabled": True, "duration": 60},
        "kick": {"enabled": True},
        "ban": {"enabled": False},
    },
    "exceptions": {"users": [], "channels": [], "roles": []},
    "logs": {"channelId": str(LOG_CHANNEL_ID)},
}


# Helper to run async tests without pytest-asyncio
def run_async(coro):
    return asyncio.run(coro)


def _config(**overrides):
    doc = {**CONFIG_DOC, **overrides}
    return decode_config(doc)


def _message(content: str = "visit https://spam.example", *, bot_author: bool = False):
    log_channel = MagicMock()
    log_channel.send = AsyncMock()

    guild = MagicMock()
    guild.id = GUILD_ID
    guild.name = "Test Guild"
    guild.get_channel = MagicMock(return_value=log_channel)

    role = MagicMock()
    role.id = ROLE_ID

    author = MagicMock()
    author.id = AUTHOR_ID
    author.bot = bot_author
    author.mention = f"<@{AUTHOR_ID}>"
    author.roles = [role]
    author.send = AsyncMock()
    author.timeout = AsyncMock()
    author.kick = AsyncMock()
    author.ban = AsyncMock()

    channel = MagicMock()
    channel.id = CHANNEL_ID
    channel.mention = f"<#{CHANNEL_ID}>"

    message = MagicMock()
    message.id = 1
    message.content = content
    message.author = author
    message.guild = guild
    message.channel = channel
    message.delete = AsyncMock()
    return message


@pytest.fixture
def bot():
    fake = MagicMock()
    fake.cache.get = AsyncMock(return_value=_config())
    fake.backend.report_violation = AsyncMock(return_value=True)
    return fake


@pytest.fixture
def cog(bot):
    return Automod(bot)


class TestGates:
    def test_bot_author_ignored(self, cog, bot):
        result = run_async(cog._handle_message(_message(bot_author=True)))
        assert result is None
        bot.cache.get.assert_not_awaited()

    def test_dm_ignored(self, cog, bot):
        message = _message()
        message.guild = None
        assert run_async(cog._handle_message(message)) is None
        bot.cache.get.assert_not_awaited()

    def test_config_unavailable_skips_message(self, cog, bot):
        bot.cache.get.side_effect = ConfigUnavailable(GUILD_ID, "refused")
        message = _message()
        assert run_async(cog._handle_message(message)) is None
        message.delete.assert_not_awaited()
        bot.backend.report_violation.assert_not_awaited()

    def test_disabled_config_does_nothing(self, cog, bot):
        bot.cache.get.return_value = _config(enabled=False)
        message = _message()
        assert run_async(cog._handle_message(message)) is None
        message.delete.assert_not_awaited()

    @pytest.mark.parametrize("exceptions", [
        {"users": [str(AUTHOR_ID)]},
        {"channels": [str(CHANNEL_ID)]},
        {"roles": [str(ROLE_ID)]},
    ])
    def test_exempt_author_is_untouched(self, cog, bot, exceptions):
        bot.cache.get.return_value = _config(exceptions=exceptions)
        message = _message()

        assert run_async(cog._handle_message(message)) is None
        message.delete.assert_not_awaited()
        message.author.send.assert_not_awaited()
        bot.backend.report_violation.assert_not_awaited()

    def test_clean_message(self, cog, bot):
        message = _message("hello everyone, good morning")
        assert run_async(cog._handle_message(message)) is None
        bot.backend.report_violation.assert_not_awaited()


class TestEnforcement:
    def test_violation_sanctions_reports_and_logs(self, cog, bot):
        message = _message()
        report = run_async(cog._handle_message(message))

        assert report.violation == "links"
        assert report.applied == ["delete", "warn", "timeout", "kick"]
        message.delete.assert_awaited_once()
        message.author.send.assert_awaited_once()
        message.author.timeout.assert_awaited_once()
        message.author.kick.assert_awaited_once()
        message.author.ban.assert_not_awaited()
        bot.backend.report_violation.assert_awaited_once_with(GUILD_ID, "links", AUTHOR_ID)

        message.guild.get_channel.assert_called_once_with(LOG_CHANNEL_ID)
        log_channel = message.guild.get_channel.return_value
        embed = log_channel.send.await_args.kwargs["embed"]
        assert "links" in embed.description

    def test_failed_action_does_not_stop_the_rest(self, cog, bot):
        message = _message()
        message.delete.side_effect = discord.NotFound(MagicMock(status=404), "Unknown Message")
        message.author.send.side_effect = RuntimeError("DMs closed")

        report = run_async(cog._handle_message(message))

        assert [r.action for r in report.failed] == ["delete", "warn"]
        assert report.applied == ["timeout", "kick"]
        message.author.kick.assert_awaited_once()
        bot.backend.report_violation.assert_awaited_once()

    def test_report_failure_does_not_block_log(self, cog, bot):
        bot.backend.report_violation.return_value = False
        message = _message()
        run_async(cog._handle_message(message))
        message.guild.get_channel.return_value.send.assert_awaited_once()

    def test_no_log_channel_configured(self, cog, bot):
        bot.cache.get.return_value = _config(logs={})
        message = _message()
        run_async(cog._handle_message(message))
        message.guild.get_channel.assert_not_called()

    def test_missing_log_channel_is_skipped(self, cog, bot):
        message = _message()
        message.guild.get_channel.return_value = None
        report = run_async(cog._handle_message(message))
        assert report.violation == "links"

    def test_log_send_failure_swallowed(self, cog, bot):
        message = _message()
        message.guild.get_channel.return_value.send.side_effect = RuntimeError("no perms")
        report = run_async(cog._handle_message(message))
        assert report is not None

    def test_on_message_contains_unexpected_errors(self, cog, bot):
        bot.cache.get.side_effect = RuntimeError("boom")
        run_async(cog.on_message(_message()))


class TestSanctions:
    def test_timeout_duration_and_reason(self):
        message = _message()
        config = _config()
        run_async(apply_sanctions(message, config.actions, "caps"))

        duration = message.author.timeout.await_args.args[0]
        assert duration.total_seconds() == 60
        assert message.author.timeout.await_args.kwargs["reason"] == "Automod: caps"

    def test_warn_dm_names_guild_and_reason(self):
        message = _message()
        run_async(apply_sanctions(message, _config().actions, "caps"))
        notice = message.author.send.await_args.args[0]
        assert "Test Guild" in notice
        assert "caps" in notice

    def test_no_actions_enabled(self):
        message = _message()
        report = run_async(apply_sanctions(message, _config(actions={}).actions, "links"))
        assert report.results == []


def test_log_embed_truncates_content():
    message = _message("x" * (LOG_CONTENT_LIMIT + 500))
    embed = build_log_embed(message, "caps")
    assert "x" * LOG_CONTENT_LIMIT in embed.description
    assert "x" * (LOG_CONTENT_LIMIT + 1) not in embed.description
    assert embed.color.value == 0xFF0000


class TestRefreshCommand:
    def _ctx(self):
        ctx = MagicMock()
        ctx.guild.id = GUILD_ID
        ctx.send = AsyncMock()
        return ctx

    def test_refresh_invalidates_and_refetches(self, cog, bot):
        ctx = self._ctx()
        run_async(cog.automod_refresh.callback(cog, ctx))

        bot.cache.invalidate.assert_called_once_with(GUILD_ID)
        bot.cache.get.assert_awaited_once_with(GUILD_ID)
        assert "enabled" in ctx.send.await_args.args[0]

    def test_refresh_reports_unreachable_api(self, cog, bot):
        bot.cache.get.side_effect = ConfigUnavailable(GUILD_ID, "refused")
        ctx = self._ctx()
        run_async(cog.automod_refresh.callback(cog, ctx))

        assert "Couldn't reach" in ctx.send.await_args.args[0]
