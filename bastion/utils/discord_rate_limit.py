"""
Discord HTTP Error Logging
==========================

One place that turns a discord.HTTPException into a readable tree log.
Every best-effort platform call in the bot (deletes, timeouts, kicks,
DMs, audit embeds) reports its failures through log_http_error().

Usage:
    from bastion.utils.discord_rate_limit import log_http_error

    try:
        await member.kick(reason=reason)
    except discord.HTTPException as e:
        log_http_error(e, "Raid Kick", [("User", str(member))])
"""

from typing import List, Optional, Tuple

import discord

from bastion.core.logger import logger


HTTP_STATUS_DESCRIPTIONS = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    429: "Rate Limited",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
}


def log_http_error(
    e: discord.HTTPException,
    operation: str,
    context: Optional[List[Tuple[str, str]]] = None,
) -> None:
    """
    Log a Discord HTTPException with status, text and caller context.

    Args:
        e: The HTTPException that occurred.
        operation: What was being attempted (e.g. "Anti-Spam Delete").
        context: Additional (key, value) pairs.
    """
    status = getattr(e, "status", None)
    status_desc = HTTP_STATUS_DESCRIPTIONS.get(status, "Unknown")

    log_items = [
        ("Status", f"{status} ({status_desc})"),
        ("Error", str(e.text) if getattr(e, "text", None) else str(e)),
    ]
    if context:
        log_items.extend(context)

    # Forbidden / NotFound / rate limits are expected in moderation work
    if status == 429:
        logger.warning(f"🚦 {operation} Rate Limited", log_items)
    elif status == 403:
        logger.warning(f"🚫 {operation} Forbidden", log_items)
    elif status == 404:
        logger.warning(f"❓ {operation} Not Found", log_items)
    else:
        logger.error(f"{operation} Failed", log_items)


__all__ = ["HTTP_STATUS_DESCRIPTIONS", "log_http_error"]
