"""
Bastion - Member Events
=======================

Handles member join and leave: audit entries, raid protection, welcome.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

import discord
from discord.ext import commands

from bastion.core.config import EmbedColors, NY_TZ
from bastion.core.constants import WELCOME_CHANNEL_NAMES
from bastion.core.logger import logger
from bastion.services.antispam import Severity, now_ms
from bastion.utils.discord_rate_limit import log_http_error

if TYPE_CHECKING:
    from bastion.bot import BastionBot


def find_welcome_channel(guild: discord.Guild) -> Optional[discord.TextChannel]:
    """First text channel named like a welcome channel, in guild order."""
    for channel in guild.text_channels:
        if channel.name in WELCOME_CHANNEL_NAMES:
            return channel
    return None


def build_welcome_embed(member: discord.Member) -> discord.Embed:
    embed = discord.Embed(
        title="Welcome!",
        description=f"Welcome to the server, {member.mention}! Please read the rules and enjoy your stay.",
        color=EmbedColors.SUCCESS,
        timestamp=datetime.now(NY_TZ),
    )
    embed.set_thumbnail(url=member.display_avatar.url)
    return embed


class MemberEvents(commands.Cog):
    """Member event handlers."""

    def __init__(self, bot: "BastionBot") -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_member_join(self, member: discord.Member) -> None:
        """
        Audit the join, run raid protection, then greet.

        DESIGN: Joins are tracked per guild, so a raid on one server never
        kicks members of another.
        """
        guild = member.guild

        await self.bot.audit_log.log_event(
            guild,
            "Member Joined",
            f"{member} ({member.id}) joined the server",
            Severity.SUCCESS,
        )

        directive = self.bot.evaluator.on_member_join(member.id, now_ms(), guild=guild.id)
        if directive is not None:
            await self.bot.executor.apply_join_directive(directive, guild)

        await self._send_welcome(member)

    @commands.Cog.listener()
    async def on_member_remove(self, member: discord.Member) -> None:
        await self.bot.audit_log.log_event(
            member.guild,
            "Member Left",
            f"{member} ({member.id}) left the server",
            Severity.ERROR,
        )

    async def _send_welcome(self, member: discord.Member) -> None:
        channel = find_welcome_channel(member.guild)
        if channel is None:
            return

        try:
            await channel.send(embed=build_welcome_embed(member))
        except discord.HTTPException as e:
            log_http_error(e, "Welcome Message", [
                ("User", f"{member} ({member.id})"),
                ("Channel", f"#{channel.name}"),
            ])


async def setup(bot: "BastionBot") -> None:
    """Load the MemberEvents cog."""
    await bot.add_cog(MemberEvents(bot))
    logger.tree("Member Events Loaded", [
        ("Policies", "join-flood"),
        ("Welcome Channels", ", ".join(WELCOME_CHANNEL_NAMES)),
    ], emoji="👥")


__all__ = ["MemberEvents", "build_welcome_embed", "find_welcome_channel"]
