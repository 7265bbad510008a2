"""
Bastion - General Cog
=====================

Informational slash commands and the User Info context menu.

Commands:
    /ping, /stats, /help, /serverinfo

The embed builders are shared with the legacy prefix commands.
"""

import platform
from datetime import datetime
from typing import TYPE_CHECKING, Optional, Union

import discord
import psutil
from discord import app_commands
from discord.ext import commands

from bastion.core.config import Config, EmbedColors, NY_TZ
from bastion.core.constants import GUILD_ONLY_REPLY
from bastion.core.logger import logger
from bastion.utils.duration import format_uptime, format_window

if TYPE_CHECKING:
    from bastion.bot import BastionBot


# =============================================================================
# Embed Builders
# =============================================================================

def latency_ms(bot: commands.Bot) -> int:
    return round(bot.latency * 1000)


def memory_usage_mb() -> int:
    """Resident memory of this process in MB."""
    return round(psutil.Process().memory_info().rss / 1024 / 1024)


def build_stats_embed(bot: "BastionBot", requester: Union[discord.User, discord.Member]) -> discord.Embed:
    embed = discord.Embed(
        title="📊 Bot Statistics",
        color=EmbedColors.INFO,
        timestamp=datetime.now(NY_TZ),
    )
    embed.add_field(name="🏠 Servers", value=str(len(bot.guilds)), inline=True)
    embed.add_field(
        name="👥 Users",
        value=str(sum(guild.member_count or 0 for guild in bot.guilds)),
        inline=True,
    )
    embed.add_field(name="📡 Ping", value=f"{latency_ms(bot)}ms", inline=True)
    embed.add_field(
        name="⏱️ Uptime",
        value=format_uptime(datetime.now(NY_TZ) - bot.start_time),
        inline=True,
    )
    embed.add_field(name="💾 Memory", value=f"{memory_usage_mb()}MB", inline=True)
    embed.add_field(name="🐍 Python", value=platform.python_version(), inline=True)
    embed.set_footer(text=f"Requested by {requester}", icon_url=requester.display_avatar.url)
    return embed


def build_help_embed(config: Config, prefix: Optional[str] = None) -> discord.Embed:
    """
    Command overview plus the live detection thresholds.

    Args:
        config: Thresholds shown in the Auto Protection field.
        prefix: When given, list the legacy prefix commands instead of slash.
    """
    embed = discord.Embed(
        title="🛡️ Protection Bot Commands",
        color=EmbedColors.INFO,
        timestamp=datetime.now(NY_TZ),
    )

    if prefix is None:
        embed.description = "Use **slash commands** for better experience!"
        embed.add_field(
            name="📋 General Commands",
            value=(
                "`/ping` - Check bot latency\n"
                "`/help` - Show this help\n"
                "`/stats` - Bot statistics\n"
                "`/serverinfo` - Server information"
            ),
            inline=False,
        )
        embed.add_field(
            name="🔨 Moderation Commands",
            value=(
                "`/kick @user [reason]` - Kick a user\n"
                "`/ban @user [reason]` - Ban a user\n"
                "`/timeout @user <minutes> [reason]` - Timeout a user\n"
                "`/warn @user <reason>` - Warn a user\n"
                "`/clear <amount>` - Delete messages"
            ),
            inline=False,
        )
        embed.add_field(
            name="🖱️ Context Menu Commands",
            value=(
                "**Right-click on user:**\n• Quick Timeout\n• User Info\n\n"
                "**Right-click on message:**\n• Delete & Warn User"
            ),
            inline=False,
        )
        embed.set_footer(text="Use / to see all available commands!")
    else:
        embed.description = f"Prefix: `{prefix}` | Use slash commands (`/`) for better experience!"
        embed.add_field(
            name="📋 General Commands",
            value=(
                f"`{prefix}ping` - Check bot latency\n"
                f"`{prefix}help` - Show this help message\n"
                f"`{prefix}stats` - Show bot statistics"
            ),
            inline=False,
        )
        embed.add_field(
            name="🔨 Moderation Commands (Requires Moderate Members permission)",
            value=(
                f"`{prefix}kick @user [reason]` - Kick a user\n"
                f"`{prefix}ban @user [reason]` - Ban a user\n"
                f"`{prefix}timeout @user [minutes] [reason]` - Timeout a user\n"
                f"`{prefix}clear [amount]` - Delete messages (1-100)"
            ),
            inline=False,
        )
        embed.set_footer(text="Try /help for slash commands!")

    embed.add_field(
        name="🛡️ Auto Protection",
        value=(
            f"• **Anti-spam**: {config.message_flood_threshold} messages in "
            f"{format_window(config.message_flood_timeframe_ms)}\n"
            f"• **Mention spam**: Max {config.mention_flood_max} mentions per message\n"
            f"• **Raid protection**: Kicks {config.join_flood_threshold} users joining in "
            f"{format_window(config.join_flood_timeframe_ms)}\n"
            f"• **Auto-logging**: All events logged to #{config.log_channel_name}\n"
            "• **Welcome messages**: Greets new members"
        ),
        inline=False,
    )
    return embed


def build_server_info_embed(guild: discord.Guild) -> discord.Embed:
    embed = discord.Embed(
        title=f"📊 {guild.name} Server Info",
        color=EmbedColors.SUCCESS,
        timestamp=datetime.now(NY_TZ),
    )
    if guild.icon:
        embed.set_thumbnail(url=guild.icon.url)
    embed.add_field(name="👤 Owner", value=f"<@{guild.owner_id}>", inline=True)
    embed.add_field(name="👥 Members", value=str(guild.member_count or 0), inline=True)
    embed.add_field(name="📅 Created", value=discord.utils.format_dt(guild.created_at, "F"), inline=True)
    embed.add_field(name="🔧 Channels", value=str(len(guild.channels)), inline=True)
    embed.add_field(name="🎭 Roles", value=str(len(guild.roles)), inline=True)
    embed.add_field(name="😀 Emojis", value=str(len(guild.emojis)), inline=True)
    return embed


def build_user_info_embed(user: Union[discord.User, discord.Member], member: Optional[discord.Member]) -> discord.Embed:
    embed = discord.Embed(title=f"👤 {user}", color=EmbedColors.INFO)
    embed.set_thumbnail(url=user.display_avatar.url)
    embed.add_field(name="🆔 User ID", value=str(user.id), inline=True)
    embed.add_field(
        name="📅 Account Created",
        value=discord.utils.format_dt(user.created_at, "F"),
        inline=False,
    )

    if member is not None:
        if member.joined_at:
            embed.add_field(
                name="📅 Joined Server",
                value=discord.utils.format_dt(member.joined_at, "F"),
                inline=False,
            )
        # Skip @everyone
        roles = [role.mention for role in member.roles if role.id != member.guild.id]
        embed.add_field(name="🎭 Roles", value=", ".join(roles) or "None", inline=False)

    return embed


# =============================================================================
# Cog
# =============================================================================

class GeneralCog(commands.Cog):
    """Ping, stats, help, server info and the User Info context menu."""

    def __init__(self, bot: "BastionBot") -> None:
        self.bot = bot

        self.user_info_ctx = app_commands.ContextMenu(
            name="User Info",
            callback=self._user_info,
        )
        self.bot.tree.add_command(self.user_info_ctx)

    async def cog_unload(self) -> None:
        """Remove context menus when cog unloads."""
        self.bot.tree.remove_command(self.user_info_ctx.name, type=self.user_info_ctx.type)

    @app_commands.command(name="ping", description="Check bot latency")
    async def ping(self, interaction: discord.Interaction) -> None:
        await interaction.response.send_message(f"Pong! 🏓 Latency: {latency_ms(self.bot)}ms")

    @app_commands.command(name="stats", description="Show bot statistics")
    async def stats(self, interaction: discord.Interaction) -> None:
        await interaction.response.send_message(embed=build_stats_embed(self.bot, interaction.user))

    @app_commands.command(name="help", description="Show bot commands and features")
    async def help(self, interaction: discord.Interaction) -> None:
        await interaction.response.send_message(embed=build_help_embed(self.bot.config))

    @app_commands.command(name="serverinfo", description="Show server information")
    @app_commands.guild_only()
    async def serverinfo(self, interaction: discord.Interaction) -> None:
        await interaction.response.send_message(embed=build_server_info_embed(interaction.guild))

    async def _user_info(self, interaction: discord.Interaction, user: discord.User) -> None:
        """Right-click user -> Apps -> User Info."""
        if interaction.guild is None:
            await interaction.response.send_message(GUILD_ONLY_REPLY, ephemeral=True)
            return

        member = user if isinstance(user, discord.Member) else interaction.guild.get_member(user.id)
        await interaction.response.send_message(
            embed=build_user_info_embed(user, member),
            ephemeral=True,
        )


async def setup(bot: "BastionBot") -> None:
    """Load the GeneralCog."""
    await bot.add_cog(GeneralCog(bot))
    logger.tree("General Cog Loaded", [
        ("Commands", "/ping, /stats, /help, /serverinfo"),
        ("Context Menus", "User Info"),
    ], emoji="📋")


__all__ = [
    "GeneralCog",
    "build_help_embed",
    "build_server_info_embed",
    "build_stats_embed",
    "build_user_info_embed",
]
