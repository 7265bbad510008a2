"""
Member Resolution
=================

Resolve the target of a legacy prefix command from a mention or a raw ID.
"""

import re
from typing import Optional

import discord

from bastion.utils.discord_rate_limit import log_http_error


USER_REFERENCE = re.compile(r"^<@!?(\d{15,21})>$|^(\d{15,21})$")
"""A user mention (<@123>, <@!123>) or a bare snowflake."""


def parse_user_id(raw: Optional[str]) -> Optional[int]:
    """Extract a user ID from a mention or a bare ID, or None."""
    if not raw:
        return None
    match = USER_REFERENCE.match(raw.strip())
    if not match:
        return None
    return int(match.group(1) or match.group(2))


async def resolve_member(message: discord.Message, raw: Optional[str]) -> Optional[discord.Member]:
    """
    Find the member a prefix command targets.

    The first mentioned member wins; otherwise `raw` is read as an ID and
    looked up in the cache, then fetched.

    Returns:
        The member, or None when nobody matches.
    """
    guild = message.guild
    if guild is None:
        return None

    for mentioned in message.mentions:
        if isinstance(mentioned, discord.Member):
            return mentioned

    user_id = parse_user_id(raw)
    if user_id is None:
        return None

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


__all__ = ["parse_user_id", "resolve_member"]
