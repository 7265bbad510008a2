"""
Bastion - Prefix Command Tests
==============================
"""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest
from discord.ext import commands

from bastion.commands.prefix import (
    MISSING_PERMISSION,
    MISSING_TARGET,
    PrefixCommandsCog,
    join_reason,
    parse_int,
)

from conftest import http_error, make_member

SNOWFLAKE = 123456789012345678


@pytest.fixture
def cog(mock_bot):
    return PrefixCommandsCog(mock_bot)


@pytest.fixture
def target(mock_guild):
    member = make_member(member_id=SNOWFLAKE, name="spammer", guild=mock_guild)
    mock_guild.get_member = MagicMock(side_effect=lambda i: member if i == SNOWFLAKE else None)
    return member


@pytest.fixture
def ctx(mock_moderator, mock_guild, mock_channel):
    ctx = MagicMock()
    ctx.author = mock_moderator
    ctx.guild = mock_guild
    ctx.channel = mock_channel
    ctx.clean_prefix = "!"
    ctx.message.guild = mock_guild
    ctx.message.mentions = []
    ctx.reply = AsyncMock()
    ctx.send = AsyncMock()
    return ctx


def replied(ctx):
    return ctx.reply.call_args.args[0]


class TestHelpers:
    def test_parse_int(self):
        assert parse_int("15") == 15
        assert parse_int("-3") == -3
        assert parse_int("ten") is None
        assert parse_int(None) is None

    def test_join_reason(self):
        assert join_reason("too", "loud") == "too loud"
        assert join_reason(None, None) == "No reason provided"


class TestGuard:
    @pytest.mark.asyncio
    async def test_dm_commands_rejected(self, cog, ctx):
        ctx.guild = None
        assert await cog.cog_check(ctx) is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("command", ["kick", "ban", "timeout", "clear"])
    async def test_moderation_requires_moderate_members(self, cog, ctx, target, command):
        ctx.author.guild_permissions.moderate_members = False
        await getattr(cog, command).callback(cog, ctx, str(SNOWFLAKE))
        ctx.reply.assert_awaited_once_with(MISSING_PERMISSION)
        target.kick.assert_not_called()
        target.timeout.assert_not_called()


class TestGeneral:
    @pytest.mark.asyncio
    async def test_ping(self, cog, ctx):
        await cog.ping.callback(cog, ctx)
        ctx.reply.assert_awaited_once_with("Pong! 🏓 Latency: 42ms")

    @pytest.mark.asyncio
    async def test_help_lists_prefix_commands(self, cog, ctx):
        await cog.help.callback(cog, ctx)
        embed = ctx.reply.call_args.kwargs["embed"]
        assert "Prefix: `!`" in embed.description
        assert "`!kick @user [reason]`" in embed.fields[1].value


class TestKick:
    @pytest.mark.asyncio
    async def test_kick_by_raw_id(self, cog, ctx, target, audit_log):
        await cog.kick.callback(cog, ctx, str(SNOWFLAKE), reason="flooding chat")
        target.kick.assert_awaited_once_with(reason="flooding chat")
        assert replied(ctx) == "✅ Kicked spammer for: flooding chat"
        assert audit_log.log_event.call_args.args[1] == "User Kicked"

    @pytest.mark.asyncio
    async def test_kick_by_mention(self, cog, ctx, mock_guild):
        mentioned = make_member(member_id=555, name="mentioned", guild=mock_guild)
        ctx.message.mentions = [mentioned]
        await cog.kick.callback(cog, ctx, "<@555>")
        mentioned.kick.assert_awaited_once_with(reason="No reason provided")

    @pytest.mark.asyncio
    async def test_missing_target(self, cog, ctx):
        await cog.kick.callback(cog, ctx, None)
        ctx.reply.assert_awaited_once_with(MISSING_TARGET)

    @pytest.mark.asyncio
    async def test_unknown_id(self, cog, ctx):
        await cog.kick.callback(cog, ctx, "999999999999999999")
        ctx.reply.assert_awaited_once_with(MISSING_TARGET)

    @pytest.mark.asyncio
    async def test_cannot_kick_higher_rank(self, cog, ctx, target):
        target.top_role.position = 99
        await cog.kick.callback(cog, ctx, str(SNOWFLAKE))
        assert replied(ctx) == "❌ I cannot kick this user."


class TestBan:
    @pytest.mark.asyncio
    async def test_ban(self, cog, ctx, target, mock_guild):
        await cog.ban.callback(cog, ctx, str(SNOWFLAKE), reason="raid")
        mock_guild.ban.assert_awaited_once_with(target, reason="raid", delete_message_seconds=0)
        assert replied(ctx) == "✅ Banned spammer for: raid"


class TestTimeout:
    @pytest.mark.asyncio
    async def test_explicit_minutes(self, cog, ctx, target):
        await cog.timeout.callback(cog, ctx, str(SNOWFLAKE), "30", reason="slow down")
        target.timeout.assert_awaited_once_with(timedelta(minutes=30), reason="slow down")
        assert replied(ctx) == "✅ Timed out spammer for 30 minutes. Reason: slow down"

    @pytest.mark.asyncio
    async def test_default_minutes(self, cog, ctx, target):
        await cog.timeout.callback(cog, ctx, str(SNOWFLAKE))
        target.timeout.assert_awaited_once_with(timedelta(minutes=10), reason="No reason provided")

    @pytest.mark.asyncio
    async def test_non_numeric_minutes_become_reason(self, cog, ctx, target):
        await cog.timeout.callback(cog, ctx, str(SNOWFLAKE), "being", reason="rude")
        target.timeout.assert_awaited_once_with(timedelta(minutes=10), reason="being rude")

    @pytest.mark.asyncio
    async def test_over_maximum(self, cog, ctx, target):
        await cog.timeout.callback(cog, ctx, str(SNOWFLAKE), "2000")
        assert replied(ctx) == "❌ Maximum timeout duration is 1440 minutes (24 hours)."
        target.timeout.assert_not_called()

    @pytest.mark.asyncio
    async def test_below_minimum(self, cog, ctx, target):
        await cog.timeout.callback(cog, ctx, str(SNOWFLAKE), "0")
        assert replied(ctx) == "❌ Timeout duration must be at least 1 minute."
        target.timeout.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure(self, cog, ctx, target):
        target.timeout.side_effect = http_error(discord.Forbidden, 403, "Missing Permissions")
        await cog.timeout.callback(cog, ctx, str(SNOWFLAKE), "5")
        assert replied(ctx) == "❌ Failed to timeout user."


class TestClear:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [None, "abc", "0", "101"])
    async def test_invalid_amount(self, cog, ctx, mock_channel, amount):
        await cog.clear.callback(cog, ctx, amount)
        ctx.reply.assert_awaited_once_with("❌ Please provide a number between 1 and 100.")
        mock_channel.purge.assert_not_called()

    @pytest.mark.asyncio
    async def test_deletes_amount_plus_command(self, cog, ctx, mock_channel, audit_log):
        mock_channel.purge.return_value = [MagicMock() for _ in range(6)]

        await cog.clear.callback(cog, ctx, "5")

        assert mock_channel.purge.call_args.kwargs["limit"] == 6
        ctx.send.assert_awaited_once_with("✅ Deleted 5 messages.", delete_after=3)
        assert audit_log.log_event.call_args.args[2] == "moduser cleared 5 messages in general"

    @pytest.mark.asyncio
    async def test_failure(self, cog, ctx, mock_channel):
        mock_channel.purge.side_effect = http_error(status=400, text="Bad Request")
        await cog.clear.callback(cog, ctx, "5")
        assert replied(ctx) == "❌ Failed to delete messages. Messages might be older than 14 days."


class TestCommandErrors:
    @pytest.mark.asyncio
    async def test_check_failure_is_silent(self, cog, ctx):
        await cog.cog_command_error(ctx, commands.CheckFailure())
        ctx.reply.assert_not_called()


class TestReplyBeforeAudit:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("command, args", [
        ("kick", ()),
        ("ban", ()),
        ("timeout", ("5",)),
    ])
    async def test_confirmation_sent_first(self, cog, ctx, target, audit_log, command, args):
        async def audit_after_reply(*a, **kw):
            assert ctx.reply.await_count == 1
            return True

        audit_log.log_event.side_effect = audit_after_reply

        await getattr(cog, command).callback(cog, ctx, str(SNOWFLAKE), *args)

        assert replied(ctx).startswith("✅")
        audit_log.log_event.assert_awaited_once()
