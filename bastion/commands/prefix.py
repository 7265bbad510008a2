"""
Bastion - Prefix Commands Cog
=============================

Legacy text commands kept for servers used to `!kick @user`.

Commands:
    ping, help, stats               (everyone)
    kick, ban, timeout, clear       (Moderate Members)

DESIGN:
    Arguments are read as plain strings and parsed here, not by
    discord.ext converters, so a bad argument produces the usual reply
    instead of a converter error. Unknown commands never reach this cog;
    the bot ignores CommandNotFound.
"""

from typing import TYPE_CHECKING, Optional

import discord
from discord.ext import commands

from bastion.core.config import has_mod_permission
from bastion.core.constants import (
    CLEAR_CONFIRMATION_TTL,
    DEFAULT_REASON,
    DEFAULT_TIMEOUT_MINUTES,
    MAX_CLEAR_AMOUNT,
    MAX_TIMEOUT_MINUTES,
    MIN_CLEAR_AMOUNT,
    MIN_TIMEOUT_MINUTES,
)
from bastion.core.logger import logger
from bastion.core.moderation_validation import can_bot_act_on
from bastion.utils.discord_rate_limit import log_http_error
from bastion.utils.error_handler import ErrorHandler
from bastion.utils.members import resolve_member

from .general import build_help_embed, build_stats_embed, latency_ms
from .moderation_helpers import (
    ban_user,
    clear_messages,
    kick_member,
    log_ban,
    log_kick,
    log_timeout,
    timeout_member,
)

if TYPE_CHECKING:
    from bastion.bot import BastionBot


MISSING_PERMISSION = "❌ You need Moderate Members permission!"
MISSING_TARGET = "❌ Please mention a user or provide a valid user ID."


def parse_int(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def join_reason(*parts: Optional[str]) -> str:
    reason = " ".join(part for part in parts if part)
    return reason or DEFAULT_REASON


class PrefixCommandsCog(commands.Cog):
    """Legacy prefix commands."""

    def __init__(self, bot: "BastionBot") -> None:
        self.bot = bot
        self.audit_log = bot.audit_log

    async def cog_check(self, ctx: commands.Context) -> bool:
        """Guild messages only."""
        return ctx.guild is not None

    async def cog_command_error(self, ctx: commands.Context, error: commands.CommandError) -> None:
        if isinstance(error, commands.CheckFailure):
            return
        original = getattr(error, "original", error)
        ErrorHandler.handle(original, f"Prefix Command: {ctx.command}", message=ctx.message)

    # =========================================================================
    # Shared Checks
    # =========================================================================

    async def _moderation_target(
        self,
        ctx: commands.Context,
        target: Optional[str],
        action: str,
    ) -> Optional[discord.Member]:
        """Run the permission, target, hierarchy and self checks; reply and return None on failure."""
        if not has_mod_permission(ctx.author):
            await ctx.reply(MISSING_PERMISSION)
            return None

        member = await resolve_member(ctx.message, target)
        if member is None:
            await ctx.reply(MISSING_TARGET)
            return None

        if not can_bot_act_on(member, action):
            await ctx.reply(f"❌ I cannot {action} this user.")
            return None

        if member.id == ctx.author.id:
            await ctx.reply(f"❌ You cannot {action} yourself!")
            return None

        return member

    # =========================================================================
    # General
    # =========================================================================

    @commands.command(name="ping")
    async def ping(self, ctx: commands.Context) -> None:
        await ctx.reply(f"Pong! 🏓 Latency: {latency_ms(self.bot)}ms")

    @commands.command(name="help")
    async def help(self, ctx: commands.Context) -> None:
        await ctx.reply(embed=build_help_embed(self.bot.config, prefix=ctx.clean_prefix))

    @commands.command(name="stats")
    async def stats(self, ctx: commands.Context) -> None:
        await ctx.reply(embed=build_stats_embed(self.bot, ctx.author))

    # =========================================================================
    # Moderation
    # =========================================================================

    @commands.command(name="kick")
    async def kick(self, ctx: commands.Context, target: Optional[str] = None, *, reason: Optional[str] = None) -> None:
        member = await self._moderation_target(ctx, target, "kick")
        if member is None:
            return

        reason = join_reason(reason)
        try:
            await kick_member(ctx.author, member, reason)
        except discord.HTTPException as e:
            log_http_error(e, "Prefix Kick", [("User", f"{member} ({member.id})")])
            await ctx.reply("❌ Failed to kick user.")
            return

        await ctx.reply(f"✅ Kicked {member} for: {reason}")
        await log_kick(self.audit_log, ctx.author, member, reason)

    @commands.command(name="ban")
    async def ban(self, ctx: commands.Context, target: Optional[str] = None, *, reason: Optional[str] = None) -> None:
        member = await self._moderation_target(ctx, target, "ban")
        if member is None:
            return

        reason = join_reason(reason)
        try:
            await ban_user(ctx.guild, ctx.author, member, reason)
        except discord.HTTPException as e:
            log_http_error(e, "Prefix Ban", [("User", f"{member} ({member.id})")])
            await ctx.reply("❌ Failed to ban user.")
            return

        await ctx.reply(f"✅ Banned {member} for: {reason}")
        await log_ban(self.audit_log, ctx.guild, ctx.author, member, reason)

    @commands.command(name="timeout")
    async def timeout(
        self,
        ctx: commands.Context,
        target: Optional[str] = None,
        minutes: Optional[str] = None,
        *,
        reason: Optional[str] = None,
    ) -> None:
        member = await self._moderation_target(ctx, target, "timeout")
        if member is None:
            return

        duration = parse_int(minutes)
        if duration is None:
            # Not a number: it is the first word of the reason
            duration = DEFAULT_TIMEOUT_MINUTES
            reason = join_reason(minutes, reason)
        else:
            reason = join_reason(reason)

        if duration < MIN_TIMEOUT_MINUTES:
            await ctx.reply(f"❌ Timeout duration must be at least {MIN_TIMEOUT_MINUTES} minute.")
            return
        if duration > MAX_TIMEOUT_MINUTES:
            await ctx.reply(f"❌ Maximum timeout duration is {MAX_TIMEOUT_MINUTES} minutes (24 hours).")
            return

        try:
            await timeout_member(ctx.author, member, duration, reason)
        except discord.HTTPException as e:
            log_http_error(e, "Prefix Timeout", [("User", f"{member} ({member.id})")])
            await ctx.reply("❌ Failed to timeout user.")
            return

        await ctx.reply(f"✅ Timed out {member} for {duration} minutes. Reason: {reason}")
        await log_timeout(self.audit_log, ctx.author, member, duration, reason)

    @commands.command(name="clear")
    async def clear(self, ctx: commands.Context, amount: Optional[str] = None) -> None:
        if not has_mod_permission(ctx.author):
            await ctx.reply(MISSING_PERMISSION)
            return

        count = parse_int(amount)
        if count is None or not MIN_CLEAR_AMOUNT <= count <= MAX_CLEAR_AMOUNT:
            await ctx.reply(f"❌ Please provide a number between {MIN_CLEAR_AMOUNT} and {MAX_CLEAR_AMOUNT}.")
            return

        try:
            # +1 for the command message itself
            deleted = await clear_messages(
                self.audit_log, ctx.author, ctx.channel, count + 1, reported_offset=1
            )
        except discord.HTTPException as e:
            log_http_error(e, "Prefix Clear", [("Channel", str(ctx.channel))])
            await ctx.reply("❌ Failed to delete messages. Messages might be older than 14 days.")
            return

        await ctx.send(f"✅ Deleted {deleted} messages.", delete_after=CLEAR_CONFIRMATION_TTL)


async def setup(bot: "BastionBot") -> None:
    """Load the PrefixCommandsCog."""
    await bot.add_cog(PrefixCommandsCog(bot))
    logger.tree("Prefix Commands Cog Loaded", [
        ("Prefix", bot.config.command_prefix),
        ("Commands", "ping, help, stats, kick, ban, timeout, clear"),
    ], emoji="⌨️")


__all__ = ["PrefixCommandsCog", "parse_int", "join_reason"]
