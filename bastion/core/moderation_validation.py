"""
Bastion - Moderation Validation
===============================

Shared target checks for kick, ban and timeout, used by both the slash
and the prefix commands so the two surfaces refuse the same things with
the same wording.

Usage:
    from bastion.core.moderation_validation import validate_moderation_target

    result = validate_moderation_target(moderator, member, "kick")
    if not result.is_valid:
        await interaction.response.send_message(result.error_message, ephemeral=True)
        return
"""

from dataclasses import dataclass
from typing import Optional, Union

import discord

from bastion.core.logger import logger


# =============================================================================
# Result Types
# =============================================================================

@dataclass
class ValidationResult:
    """Result of a validation check."""
    is_valid: bool
    error_message: Optional[str] = None


_REQUIRED_PERMISSION = {
    "kick": "kick_members",
    "ban": "ban_members",
    "timeout": "moderate_members",
}


# =============================================================================
# Hierarchy Checks
# =============================================================================

def _bot_outranks(member: discord.Member) -> bool:
    """True if the bot's top role sits above the member's and the member is not the owner."""
    guild = member.guild
    me = guild.me
    if me is None or member.id == guild.owner_id or member.id == me.id:
        return False
    return me.top_role.position > member.top_role.position


def can_bot_act_on(member: discord.Member, action: str) -> bool:
    """
    Check whether the bot itself is able to kick / ban / timeout a member.

    Mirrors Discord's own rules: the bot needs the matching permission and a
    higher top role, nobody can act on the owner, and administrators cannot
    be timed out.
    """
    me = member.guild.me
    if me is None:
        return False

    permission = _REQUIRED_PERMISSION[action]
    if not getattr(me.guild_permissions, permission, False):
        return False

    if action == "timeout" and member.guild_permissions.administrator:
        return False

    return _bot_outranks(member)


def bot_can_timeout(guild: discord.Guild) -> bool:
    """True if the bot holds Moderate Members in this guild."""
    me = guild.me
    return bool(me and me.guild_permissions.moderate_members)


# =============================================================================
# Combined Validation
# =============================================================================

def validate_moderation_target(
    moderator: Union[discord.User, discord.Member],
    member: Optional[discord.Member],
    action: str,
    require_member: bool = True,
) -> ValidationResult:
    """
    Run every check a moderation command needs before touching Discord.

    Args:
        moderator: Who issued the command.
        member: Resolved guild member, or None when the user is not in the guild.
        action: "kick", "ban" or "timeout".
        require_member: Refuse when the user is not a member (ban allows it).

    Returns:
        ValidationResult with the user-facing error when invalid.
    """
    if member is None:
        if require_member:
            return ValidationResult(False, "❌ User not found in this server!")
        return ValidationResult(True)

    if member.id == moderator.id:
        logger.tree(f"{action.upper()} BLOCKED", [
            ("Reason", "Self-action attempt"),
            ("Moderator", f"{moderator} ({moderator.id})"),
        ], emoji="🚫")
        return ValidationResult(False, f"❌ You cannot {action} yourself!")

    if not can_bot_act_on(member, action):
        logger.tree(f"{action.upper()} BLOCKED", [
            ("Reason", "Missing permission or role hierarchy"),
            ("Moderator", f"{moderator} ({moderator.id})"),
            ("Target", f"{member} ({member.id})"),
        ], emoji="🚫")
        return ValidationResult(False, f"❌ I cannot {action} this user!")

    return ValidationResult(True)


__all__ = [
    "ValidationResult",
    "can_bot_act_on",
    "bot_can_timeout",
    "validate_moderation_target",
]
