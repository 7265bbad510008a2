"""
Bastion - DM Helper Utilities
=============================

Warning DMs sent by /warn and "Delete & Warn User".

Usage:
    from bastion.utils.dm_helpers import safe_send_dm, build_warning_dm

    embed = build_warning_dm(
        description=f"You have been warned in {guild.name}",
        reason=reason,
        moderator=interaction.user,
    )
    delivered = await safe_send_dm(user, embed=embed, context="Warn DM")
"""

from datetime import datetime
from typing import Optional, Union

import discord

from bastion.core.config import EmbedColors, NY_TZ
from bastion.core.constants import DEFAULT_REASON
from bastion.core.logger import logger
from bastion.utils.discord_rate_limit import log_http_error


async def safe_send_dm(
    user: Union[discord.User, discord.Member],
    embed: Optional[discord.Embed] = None,
    content: Optional[str] = None,
    context: Optional[str] = None,
) -> bool:
    """
    Send a DM, returning whether it was delivered.

    Users with closed DMs are expected, so Forbidden is only a debug line.
    """
    try:
        await user.send(content=content, embed=embed)
        return True
    except discord.Forbidden:
        logger.debug("DM Blocked", [("Context", context or "N/A"), ("User", str(user))])
        return False
    except discord.HTTPException as e:
        log_http_error(e, "DM Send", [("User", str(user)), ("Context", context or "N/A")])
        return False


def build_warning_dm(
    description: str,
    reason: Optional[str],
    moderator: Union[discord.User, discord.Member],
) -> discord.Embed:
    """Build the yellow "⚠️ Warning" embed sent to a warned user."""
    embed = discord.Embed(
        title="⚠️ Warning",
        description=description,
        color=EmbedColors.WARNING,
        timestamp=datetime.now(NY_TZ),
    )
    embed.add_field(name="Reason", value=reason or DEFAULT_REASON, inline=False)
    embed.set_footer(text=f"Warned by {moderator}")
    return embed


__all__ = ["safe_send_dm", "build_warning_dm"]
