"""
Bastion - Shared Moderation Helpers
===================================

The actual kick / ban / timeout / clear operations, shared by the slash
commands, the context menus and the legacy prefix commands.

DESIGN:
    The action helpers perform the Discord call and the tree log and let
    discord.HTTPException propagate. The caller owns the user-facing reply,
    because slash and prefix commands word their failures differently, and
    writes the audit entry with the log_* helpers only after replying, so
    a slow log channel never holds up the interaction response.

    clear_messages() audits itself; its callers defer or reply afterwards.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional, Union

import discord

from bastion.core.constants import BULK_DELETE_MAX_AGE, SECONDS_PER_DAY
from bastion.core.logger import logger
from bastion.services.antispam import Severity
from bastion.services.audit_log import AuditLogService
from bastion.utils.discord_rate_limit import log_http_error

Moderator = Union[discord.User, discord.Member]


# =============================================================================
# Member Lookup
# =============================================================================

async def fetch_guild_member(guild: discord.Guild, user_id: int) -> Optional[discord.Member]:
    """Cached member, else fetched member, else None."""
    member = guild.get_member(user_id)
    if member is not None:
        return member
    try:
        return await guild.fetch_member(user_id)
    except discord.NotFound:
        return None
    except discord.HTTPException as e:
        log_http_error(e, "Member Fetch", [("User ID", str(user_id))])
        return None


# =============================================================================
# Actions
# =============================================================================

async def kick_member(moderator: Moderator, member: discord.Member, reason: str) -> None:
    await member.kick(reason=reason)
    logger.tree("USER KICKED", [
        ("User", f"{member} ({member.id})"),
        ("Moderator", f"{moderator} ({moderator.id})"),
        ("Reason", reason),
    ], emoji="👢")


async def ban_user(
    guild: discord.Guild,
    moderator: Moderator,
    user: Union[discord.User, discord.Member],
    reason: str,
    delete_days: int = 0,
) -> None:
    """Ban a user, member or not, removing `delete_days` of their messages."""
    await guild.ban(user, reason=reason, delete_message_seconds=delete_days * SECONDS_PER_DAY)
    logger.tree("USER BANNED", [
        ("User", f"{user} ({user.id})"),
        ("Moderator", f"{moderator} ({moderator.id})"),
        ("Reason", reason),
        ("Delete Days", str(delete_days)),
    ], emoji="🔨")


async def timeout_member(
    moderator: Moderator,
    member: discord.Member,
    minutes: int,
    reason: str,
    title: str = "User Timed Out",
) -> None:
    await member.timeout(timedelta(minutes=minutes), reason=reason)
    logger.tree(title.upper(), [
        ("User", f"{member} ({member.id})"),
        ("Moderator", f"{moderator} ({moderator.id})"),
        ("Duration", f"{minutes}m"),
        ("Reason", reason),
    ], emoji="⏰")


# =============================================================================
# Audit Entries
# =============================================================================

async def log_kick(
    audit_log: AuditLogService,
    moderator: Moderator,
    member: discord.Member,
    reason: str,
) -> None:
    await audit_log.log_event(
        member.guild,
        "User Kicked",
        f"{member} was kicked by {moderator}. Reason: {reason}",
        Severity.MODERATE,
    )


async def log_ban(
    audit_log: AuditLogService,
    guild: discord.Guild,
    moderator: Moderator,
    user: Union[discord.User, discord.Member],
    reason: str,
) -> None:
    await audit_log.log_event(
        guild,
        "User Banned",
        f"{user} was banned by {moderator}. Reason: {reason}",
        Severity.ERROR,
    )


async def log_timeout(
    audit_log: AuditLogService,
    moderator: Moderator,
    member: discord.Member,
    minutes: int,
    reason: str,
    title: str = "User Timed Out",
    description: Optional[str] = None,
) -> None:
    """`title` / `description` override the entry (used by Quick Timeout)."""
    await audit_log.log_event(
        member.guild,
        title,
        description or f"{member} was timed out by {moderator} for {minutes} minutes. Reason: {reason}",
        Severity.WARNING,
    )


# =============================================================================
# Purge
# =============================================================================

async def clear_messages(
    audit_log: AuditLogService,
    moderator: Moderator,
    channel: discord.TextChannel,
    limit: int,
    reported_offset: int = 0,
) -> int:
    """
    Bulk delete among the last `limit` messages, skipping ones too old to bulk delete.

    Args:
        reported_offset: Deleted messages not to count, e.g. the prefix
            command's own message.

    Returns:
        Number of messages reported as deleted.
    """
    cutoff = datetime.now(timezone.utc) - BULK_DELETE_MAX_AGE
    deleted: List[discord.Message] = await channel.purge(
        limit=limit,
        check=lambda m: m.created_at > cutoff,
        bulk=True,
    )
    count = max(len(deleted) - reported_offset, 0)

    await audit_log.log_event(
        channel.guild,
        "Messages Cleared",
        f"{moderator} cleared {count} messages in {channel.name}",
        Severity.INFO,
    )
    logger.tree("MESSAGES CLEARED", [
        ("Channel", f"#{channel.name}"),
        ("Moderator", f"{moderator} ({moderator.id})"),
        ("Deleted", str(count)),
    ], emoji="🗑️")
    return count


__all__ = [
    "fetch_guild_member",
    "kick_member",
    "ban_user",
    "timeout_member",
    "log_kick",
    "log_ban",
    "log_timeout",
    "clear_messages",
]
