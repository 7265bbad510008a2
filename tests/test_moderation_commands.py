"""
Bastion - Slash Moderation Command Tests
========================================

Calls the command callbacks directly; permission checks are Discord's job.
"""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from bastion.commands.moderation import ModerationCog
from bastion.services.antispam import Severity

from conftest import http_error, make_member


@pytest.fixture
def cog(mock_bot):
    return ModerationCog(mock_bot)


@pytest.fixture
def cached(mock_guild, mock_member):
    """Make mock_member resolvable through guild.get_member."""
    mock_guild.get_member = MagicMock(side_effect=lambda i: mock_member if i == mock_member.id else None)
    return mock_member


def reply_text(interaction):
    return interaction.response.send_message.call_args.args[0]


class TestContextMenuRegistration:
    def test_context_menus_added_to_tree(self, cog, mock_bot):
        names = {call.args[0].name for call in mock_bot.tree.add_command.call_args_list}
        assert names == {"Quick Timeout", "Delete & Warn User"}

    @pytest.mark.asyncio
    async def test_context_menus_removed_on_unload(self, cog, mock_bot):
        await cog.cog_unload()
        assert mock_bot.tree.remove_command.call_count == 2


# =============================================================================
# /kick
# =============================================================================

class TestKick:
    @pytest.mark.asyncio
    async def test_kicks_and_audits(self, cog, mock_interaction, cached, audit_log, mock_guild):
        await cog.kick.callback(cog, mock_interaction, cached, "spamming")

        cached.kick.assert_awaited_once_with(reason="spamming")
        assert reply_text(mock_interaction) == "✅ Kicked testuser for: spamming"
        audit_log.log_event.assert_awaited_once_with(
            mock_guild,
            "User Kicked",
            "testuser was kicked by moduser. Reason: spamming",
            Severity.MODERATE,
        )

    @pytest.mark.asyncio
    async def test_default_reason(self, cog, mock_interaction, cached):
        await cog.kick.callback(cog, mock_interaction, cached, None)
        assert reply_text(mock_interaction) == "✅ Kicked testuser for: No reason provided"

    @pytest.mark.asyncio
    async def test_user_not_in_guild(self, cog, mock_interaction, mock_member):
        await cog.kick.callback(cog, mock_interaction, mock_member, None)
        mock_interaction.response.send_message.assert_awaited_once_with(
            "❌ User not found in this server!", ephemeral=True
        )

    @pytest.mark.asyncio
    async def test_cannot_kick_self(self, cog, mock_interaction, mock_moderator, mock_guild):
        mock_guild.get_member = MagicMock(return_value=mock_moderator)
        await cog.kick.callback(cog, mock_interaction, mock_moderator, None)
        assert reply_text(mock_interaction) == "❌ You cannot kick yourself!"
        mock_moderator.kick.assert_not_called()

    @pytest.mark.asyncio
    async def test_kick_failure(self, cog, mock_interaction, cached, audit_log):
        cached.kick.side_effect = http_error(discord.Forbidden, 403, "Missing Permissions")
        await cog.kick.callback(cog, mock_interaction, cached, None)
        mock_interaction.response.send_message.assert_awaited_once_with(
            "❌ Failed to kick user.", ephemeral=True
        )
        audit_log.log_event.assert_not_called()


# =============================================================================
# /ban
# =============================================================================

class TestBan:
    @pytest.mark.asyncio
    async def test_bans_non_member(self, cog, mock_interaction, mock_member, mock_guild, audit_log):
        await cog.ban.callback(cog, mock_interaction, mock_member, "raiding", 2)

        mock_guild.ban.assert_awaited_once_with(
            mock_member, reason="raiding", delete_message_seconds=2 * 86400
        )
        assert reply_text(mock_interaction) == "✅ Banned testuser for: raiding"
        assert audit_log.log_event.call_args.args[1] == "User Banned"
        assert audit_log.log_event.call_args.args[3] is Severity.ERROR

    @pytest.mark.asyncio
    async def test_refuses_higher_ranked_member(self, cog, mock_interaction, mock_guild):
        boss = make_member(guild=mock_guild, top_position=50)
        mock_guild.get_member = MagicMock(return_value=boss)
        await cog.ban.callback(cog, mock_interaction, boss, None, 0)
        assert reply_text(mock_interaction) == "❌ I cannot ban this user!"
        mock_guild.ban.assert_not_called()


# =============================================================================
# /timeout
# =============================================================================

class TestTimeout:
    @pytest.mark.asyncio
    async def test_times_out(self, cog, mock_interaction, cached, audit_log):
        await cog.timeout.callback(cog, mock_interaction, cached, 30, "calm down")

        cached.timeout.assert_awaited_once_with(timedelta(minutes=30), reason="calm down")
        assert reply_text(mock_interaction) == "✅ Timed out testuser for 30 minutes. Reason: calm down"
        audit_log.log_event.assert_awaited_once()
        assert audit_log.log_event.call_args.args[2] == (
            "testuser was timed out by moduser for 30 minutes. Reason: calm down"
        )

    @pytest.mark.asyncio
    async def test_admin_cannot_be_timed_out(self, cog, mock_interaction, mock_guild):
        admin = make_member(guild=mock_guild, administrator=True)
        mock_guild.get_member = MagicMock(return_value=admin)
        await cog.timeout.callback(cog, mock_interaction, admin, 10, None)
        assert reply_text(mock_interaction) == "❌ I cannot timeout this user!"


# =============================================================================
# /clear
# =============================================================================

class TestClear:
    @pytest.mark.asyncio
    async def test_reports_deleted_count(self, cog, mock_interaction, mock_channel, audit_log):
        mock_channel.purge.return_value = [MagicMock() for _ in range(7)]

        await cog.clear.callback(cog, mock_interaction, 10)

        mock_interaction.response.defer.assert_awaited_once_with(ephemeral=True)
        assert mock_channel.purge.call_args.kwargs["limit"] == 10
        mock_interaction.followup.send.assert_awaited_once_with("✅ Deleted 7 messages.", ephemeral=True)
        assert audit_log.log_event.call_args.args[2] == "moduser cleared 7 messages in general"

    @pytest.mark.asyncio
    async def test_failure_message(self, cog, mock_interaction, mock_channel):
        mock_channel.purge.side_effect = http_error(status=400, text="Bad Request")

        await cog.clear.callback(cog, mock_interaction, 5)

        mock_interaction.followup.send.assert_awaited_once_with(
            "❌ Failed to delete messages. Messages might be older than 14 days.",
            ephemeral=True,
        )


# =============================================================================
# /warn
# =============================================================================

class TestWarn:
    @pytest.mark.asyncio
    async def test_dm_sent(self, cog, mock_interaction, mock_member, audit_log):
        await cog.warn.callback(cog, mock_interaction, mock_member, "be nice")

        embed = mock_member.send.call_args.kwargs["embed"]
        assert embed.title == "⚠️ Warning"
        assert embed.description == "You have been warned in Test Server"
        assert reply_text(mock_interaction) == "✅ Warned testuser for: be nice (DM sent)"
        assert audit_log.log_event.call_args.args[1] == "User Warned"

    @pytest.mark.asyncio
    async def test_dm_failed(self, cog, mock_interaction, mock_member):
        mock_member.send.side_effect = http_error(discord.Forbidden, 403, "Cannot send messages to this user")
        await cog.warn.callback(cog, mock_interaction, mock_member, "be nice")
        assert reply_text(mock_interaction) == "✅ Warned testuser for: be nice (DM failed)"


# =============================================================================
# Context Menus
# =============================================================================

class TestQuickTimeout:
    @pytest.mark.asyncio
    async def test_ten_minute_timeout(self, cog, mock_interaction, cached, audit_log):
        await cog._quick_timeout(mock_interaction, cached)

        cached.timeout.assert_awaited_once_with(
            timedelta(minutes=10), reason="Quick timeout via context menu"
        )
        mock_interaction.response.send_message.assert_awaited_once_with(
            "✅ testuser has been timed out for 10 minutes!", ephemeral=True
        )
        assert audit_log.log_event.call_args.args[1] == "Quick Timeout"
        assert audit_log.log_event.call_args.args[2] == "testuser was quickly timed out by moduser"

    @pytest.mark.asyncio
    async def test_user_not_found(self, cog, mock_interaction, mock_member):
        await cog._quick_timeout(mock_interaction, mock_member)
        assert reply_text(mock_interaction) == "❌ User not found!"

    @pytest.mark.asyncio
    async def test_outside_guild(self, cog, mock_interaction, mock_member):
        mock_interaction.guild = None
        await cog._quick_timeout(mock_interaction, mock_member)
        assert reply_text(mock_interaction) == "❌ This command can only be used in a server."


class TestDeleteAndWarn:
    @pytest.mark.asyncio
    async def test_refuses_bot_author(self, cog, mock_interaction, mock_message):
        mock_message.author.bot = True
        await cog._delete_and_warn(mock_interaction, mock_message)
        assert reply_text(mock_interaction) == "❌ Cannot warn bots!"
        mock_message.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_deletes_and_warns(self, cog, mock_interaction, mock_message, audit_log):
        await cog._delete_and_warn(mock_interaction, mock_message)

        mock_message.delete.assert_awaited_once()
        embed = mock_message.author.send.call_args.kwargs["embed"]
        assert embed.description == "Your message was deleted in Test Server"
        assert reply_text(mock_interaction) == "✅ Deleted message and warned testuser!"
        assert audit_log.log_event.call_args.args[1] == "Message Deleted & User Warned"

    @pytest.mark.asyncio
    async def test_closed_dms_still_succeed(self, cog, mock_interaction, mock_message):
        mock_message.author.send.side_effect = http_error(discord.Forbidden, 403, "Cannot send")
        await cog._delete_and_warn(mock_interaction, mock_message)
        assert reply_text(mock_interaction) == "✅ Deleted message and warned testuser!"

    @pytest.mark.asyncio
    async def test_delete_failure(self, cog, mock_interaction, mock_message, audit_log):
        mock_message.delete.side_effect = http_error(discord.Forbidden, 403, "Missing Permissions")
        await cog._delete_and_warn(mock_interaction, mock_message)
        assert reply_text(mock_interaction) == "❌ Failed to delete message!"
        audit_log.log_event.assert_not_called()


# =============================================================================
# Response Ordering
# =============================================================================

class TestReplyBeforeAudit:
    """The interaction is answered before the (possibly slow) log channel is written."""

    @pytest.fixture
    def ordered(self, mock_interaction, audit_log):
        async def audit_after_reply(*args, **kwargs):
            assert mock_interaction.response.send_message.await_count == 1
            return True

        audit_log.log_event.side_effect = audit_after_reply
        return audit_log

    @pytest.mark.asyncio
    async def test_kick(self, cog, mock_interaction, cached, ordered):
        await cog.kick.callback(cog, mock_interaction, cached, None)
        ordered.log_event.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_ban(self, cog, mock_interaction, mock_member, ordered):
        await cog.ban.callback(cog, mock_interaction, mock_member, None, 0)
        ordered.log_event.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_timeout(self, cog, mock_interaction, cached, ordered):
        await cog.timeout.callback(cog, mock_interaction, cached, 5, None)
        ordered.log_event.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_quick_timeout(self, cog, mock_interaction, cached, ordered):
        await cog._quick_timeout(mock_interaction, cached)
        ordered.log_event.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_warn(self, cog, mock_interaction, mock_member, ordered):
        await cog.warn.callback(cog, mock_interaction, mock_member, "be nice")
        ordered.log_event.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_and_warn(self, cog, mock_interaction, mock_message, ordered):
        await cog._delete_and_warn(mock_interaction, mock_message)
        ordered.log_event.assert_awaited_once()
