"""
Bastion - Moderation Cog
========================

Slash moderation commands and moderation context menus.

Commands:
    /kick, /ban, /timeout, /clear, /warn

Context Menus:
    Quick Timeout (user), Delete & Warn User (message)

DESIGN:
    Visibility is gated with default_permissions so members without the
    permission never see the command; the matching has_permissions check
    enforces it server-side. Target checks go through
    validate_moderation_target() so slash and prefix refuse the same cases.
    Every command answers the interaction before writing the audit entry,
    keeping the first response inside Discord's three-second window.
"""

from typing import TYPE_CHECKING, Optional

import discord
from discord import app_commands
from discord.ext import commands

from bastion.core.constants import (
    DEFAULT_REASON,
    GUILD_ONLY_REPLY,
    MAX_BAN_DELETE_DAYS,
    MAX_CLEAR_AMOUNT,
    MAX_TIMEOUT_MINUTES,
    MIN_CLEAR_AMOUNT,
    MIN_TIMEOUT_MINUTES,
    QUICK_TIMEOUT_MINUTES,
)
from bastion.core.logger import logger
from bastion.core.moderation_validation import can_bot_act_on, validate_moderation_target
from bastion.services.antispam import Severity
from bastion.utils.discord_rate_limit import log_http_error
from bastion.utils.dm_helpers import build_warning_dm, safe_send_dm

from .moderation_helpers import (
    ban_user,
    clear_messages,
    fetch_guild_member,
    kick_member,
    log_ban,
    log_kick,
    log_timeout,
    timeout_member,
)

if TYPE_CHECKING:
    from bastion.bot import BastionBot


QUICK_TIMEOUT_REASON = "Quick timeout via context menu"


class ModerationCog(commands.Cog):
    """Kick, ban, timeout, clear and warn."""

    def __init__(self, bot: "BastionBot") -> None:
        self.bot = bot
        self.audit_log = bot.audit_log

        self.quick_timeout_ctx = app_commands.ContextMenu(
            name="Quick Timeout",
            callback=self._quick_timeout,
        )
        self.quick_timeout_ctx.default_permissions = discord.Permissions(moderate_members=True)

        self.delete_warn_ctx = app_commands.ContextMenu(
            name="Delete & Warn User",
            callback=self._delete_and_warn,
        )
        self.delete_warn_ctx.default_permissions = discord.Permissions(manage_messages=True)

        self.bot.tree.add_command(self.quick_timeout_ctx)
        self.bot.tree.add_command(self.delete_warn_ctx)

    async def cog_unload(self) -> None:
        """Remove context menus when cog unloads."""
        self.bot.tree.remove_command(self.quick_timeout_ctx.name, type=self.quick_timeout_ctx.type)
        self.bot.tree.remove_command(self.delete_warn_ctx.name, type=self.delete_warn_ctx.type)

    # =========================================================================
    # /kick
    # =========================================================================

    @app_commands.command(name="kick", description="Kick a user from the server")
    @app_commands.describe(user="User to kick", reason="Reason for kick")
    @app_commands.default_permissions(kick_members=True)
    @app_commands.checks.has_permissions(kick_members=True)
    @app_commands.guild_only()
    async def kick(
        self,
        interaction: discord.Interaction,
        user: discord.User,
        reason: Optional[str] = None,
    ) -> None:
        reason = reason or DEFAULT_REASON
        member = await fetch_guild_member(interaction.guild, user.id)

        result = validate_moderation_target(interaction.user, member, "kick")
        if not result.is_valid:
            await interaction.response.send_message(result.error_message, ephemeral=True)
            return

        try:
            await kick_member(interaction.user, member, reason)
        except discord.HTTPException as e:
            log_http_error(e, "Kick", [("User", f"{user} ({user.id})")])
            await interaction.response.send_message("❌ Failed to kick user.", ephemeral=True)
            return

        await interaction.response.send_message(f"✅ Kicked {user} for: {reason}")
        await log_kick(self.audit_log, interaction.user, member, reason)

    # =========================================================================
    # /ban
    # =========================================================================

    @app_commands.command(name="ban", description="Ban a user from the server")
    @app_commands.describe(
        user="User to ban",
        reason="Reason for ban",
        delete_days="Days of messages to delete (0-7)",
    )
    @app_commands.default_permissions(ban_members=True)
    @app_commands.checks.has_permissions(ban_members=True)
    @app_commands.guild_only()
    async def ban(
        self,
        interaction: discord.Interaction,
        user: discord.User,
        reason: Optional[str] = None,
        delete_days: app_commands.Range[int, 0, MAX_BAN_DELETE_DAYS] = 0,
    ) -> None:
        reason = reason or DEFAULT_REASON
        member = await fetch_guild_member(interaction.guild, user.id)

        if member is None and user.id == interaction.user.id:
            await interaction.response.send_message("❌ You cannot ban yourself!", ephemeral=True)
            return

        result = validate_moderation_target(interaction.user, member, "ban", require_member=False)
        if not result.is_valid:
            await interaction.response.send_message(result.error_message, ephemeral=True)
            return

        try:
            await ban_user(interaction.guild, interaction.user, user, reason, delete_days)
        except discord.HTTPException as e:
            log_http_error(e, "Ban", [("User", f"{user} ({user.id})")])
            await interaction.response.send_message("❌ Failed to ban user.", ephemeral=True)
            return

        await interaction.response.send_message(f"✅ Banned {user} for: {reason}")
        await log_ban(self.audit_log, interaction.guild, interaction.user, user, reason)

    # =========================================================================
    # /timeout
    # =========================================================================

    @app_commands.command(name="timeout", description="Timeout a user")
    @app_commands.describe(
        user="User to timeout",
        duration="Duration in minutes (1-1440)",
        reason="Reason for timeout",
    )
    @app_commands.default_permissions(moderate_members=True)
    @app_commands.checks.has_permissions(moderate_members=True)
    @app_commands.guild_only()
    async def timeout(
        self,
        interaction: discord.Interaction,
        user: discord.User,
        duration: app_commands.Range[int, MIN_TIMEOUT_MINUTES, MAX_TIMEOUT_MINUTES],
        reason: Optional[str] = None,
    ) -> None:
        reason = reason or DEFAULT_REASON
        member = await fetch_guild_member(interaction.guild, user.id)

        result = validate_moderation_target(interaction.user, member, "timeout")
        if not result.is_valid:
            await interaction.response.send_message(result.error_message, ephemeral=True)
            return

        try:
            await timeout_member(interaction.user, member, duration, reason)
        except discord.HTTPException as e:
            log_http_error(e, "Timeout", [("User", f"{user} ({user.id})")])
            await interaction.response.send_message("❌ Failed to timeout user.", ephemeral=True)
            return

        await interaction.response.send_message(
            f"✅ Timed out {user} for {duration} minutes. Reason: {reason}"
        )
        await log_timeout(self.audit_log, interaction.user, member, duration, reason)

    # =========================================================================
    # /clear
    # =========================================================================

    @app_commands.command(name="clear", description="Clear messages from channel")
    @app_commands.describe(amount="Number of messages to delete (1-100)")
    @app_commands.default_permissions(manage_messages=True)
    @app_commands.checks.has_permissions(manage_messages=True)
    @app_commands.guild_only()
    async def clear(
        self,
        interaction: discord.Interaction,
        amount: app_commands.Range[int, MIN_CLEAR_AMOUNT, MAX_CLEAR_AMOUNT],
    ) -> None:
        await interaction.response.defer(ephemeral=True)

        try:
            count = await clear_messages(self.audit_log, interaction.user, interaction.channel, amount)
        except discord.HTTPException as e:
            log_http_error(e, "Clear", [("Channel", str(interaction.channel))])
            await interaction.followup.send(
                "❌ Failed to delete messages. Messages might be older than 14 days.",
                ephemeral=True,
            )
            return

        await interaction.followup.send(f"✅ Deleted {count} messages.", ephemeral=True)

    # =========================================================================
    # /warn
    # =========================================================================

    @app_commands.command(name="warn", description="Warn a user")
    @app_commands.describe(user="User to warn", reason="Reason for warning")
    @app_commands.default_permissions(moderate_members=True)
    @app_commands.checks.has_permissions(moderate_members=True)
    @app_commands.guild_only()
    async def warn(
        self,
        interaction: discord.Interaction,
        user: discord.User,
        reason: str,
    ) -> None:
        embed = build_warning_dm(
            description=f"You have been warned in {interaction.guild.name}",
            reason=reason,
            moderator=interaction.user,
        )
        delivered = await safe_send_dm(user, embed=embed, context="Warn DM")

        await interaction.response.send_message(
            f"✅ Warned {user} for: {reason} ({'DM sent' if delivered else 'DM failed'})"
        )

        await self.audit_log.log_event(
            interaction.guild,
            "User Warned",
            f"{user} was warned by {interaction.user}. Reason: {reason}",
            Severity.WARNING,
        )
        logger.tree("USER WARNED", [
            ("User", f"{user} ({user.id})"),
            ("Moderator", f"{interaction.user} ({interaction.user.id})"),
            ("Reason", reason),
            ("DM", "Sent" if delivered else "Failed"),
        ], emoji="⚠️")

    # =========================================================================
    # Context Menus
    # =========================================================================

    async def _quick_timeout(self, interaction: discord.Interaction, user: discord.User) -> None:
        """Right-click user -> Apps -> Quick Timeout (10 minutes)."""
        if interaction.guild is None:
            await interaction.response.send_message(GUILD_ONLY_REPLY, ephemeral=True)
            return

        member = await fetch_guild_member(interaction.guild, user.id)
        if member is None:
            await interaction.response.send_message("❌ User not found!", ephemeral=True)
            return

        if member.id == interaction.user.id or not can_bot_act_on(member, "timeout"):
            await interaction.response.send_message("❌ Cannot timeout this user!", ephemeral=True)
            return

        try:
            await timeout_member(
                interaction.user,
                member,
                QUICK_TIMEOUT_MINUTES,
                QUICK_TIMEOUT_REASON,
                title="Quick Timeout",
            )
        except discord.HTTPException as e:
            log_http_error(e, "Quick Timeout", [("User", f"{user} ({user.id})")])
            await interaction.response.send_message("❌ Failed to timeout user!", ephemeral=True)
            return

        await interaction.response.send_message(
            f"✅ {user} has been timed out for {QUICK_TIMEOUT_MINUTES} minutes!",
            ephemeral=True,
        )
        await log_timeout(
            self.audit_log,
            interaction.user,
            member,
            QUICK_TIMEOUT_MINUTES,
            QUICK_TIMEOUT_REASON,
            title="Quick Timeout",
            description=f"{user} was quickly timed out by {interaction.user}",
        )

    async def _delete_and_warn(self, interaction: discord.Interaction, message: discord.Message) -> None:
        """Right-click message -> Apps -> Delete & Warn User."""
        if interaction.guild is None:
            await interaction.response.send_message(GUILD_ONLY_REPLY, ephemeral=True)
            return

        user = message.author
        if user.bot:
            await interaction.response.send_message("❌ Cannot warn bots!", ephemeral=True)
            return

        try:
            await message.delete()
        except discord.HTTPException as e:
            log_http_error(e, "Delete & Warn", [("Message ID", str(message.id))])
            await interaction.response.send_message("❌ Failed to delete message!", ephemeral=True)
            return

        embed = build_warning_dm(
            description=f"Your message was deleted in {interaction.guild.name}",
            reason="Message deleted by moderator",
            moderator=interaction.user,
        )
        await safe_send_dm(user, embed=embed, context="Delete & Warn DM")

        await interaction.response.send_message(
            f"✅ Deleted message and warned {user}!",
            ephemeral=True,
        )

        await self.audit_log.log_event(
            interaction.guild,
            "Message Deleted & User Warned",
            f"{user}'s message was deleted and user warned by {interaction.user}",
            Severity.MODERATE,
        )


async def setup(bot: "BastionBot") -> None:
    """Load the ModerationCog."""
    await bot.add_cog(ModerationCog(bot))
    logger.tree("Moderation Cog Loaded", [
        ("Commands", "/kick, /ban, /timeout, /clear, /warn"),
        ("Context Menus", "Quick Timeout, Delete & Warn User"),
    ], emoji="🔨")


__all__ = ["ModerationCog"]
