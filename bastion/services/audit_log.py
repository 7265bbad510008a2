"""
Bastion - Audit Log Service
===========================

Posts "📋 {title}" embeds to the guild's moderation log channel.

DESIGN:
    The log channel is looked up by name on every call, so renaming or
    recreating the channel needs no restart. A guild without the channel
    simply gets no audit trail. Send failures are logged and swallowed:
    the audit trail must never break the moderation action it records.
"""

from datetime import datetime
from typing import Optional

import discord

from bastion.core.config import Config, EmbedColors, NY_TZ
from bastion.core.logger import logger
from bastion.services.antispam import Severity
from bastion.utils.discord_rate_limit import log_http_error


SEVERITY_COLORS = {
    Severity.SUCCESS: EmbedColors.SUCCESS,
    Severity.INFO: EmbedColors.INFO,
    Severity.WARNING: EmbedColors.WARNING,
    Severity.ERROR: EmbedColors.ERROR,
    Severity.MODERATE: EmbedColors.MODERATE,
}


class AuditLogService:
    """Writes moderation events to the configured log channel."""

    def __init__(self, config: Config) -> None:
        self.config = config

    def find_log_channel(self, guild: discord.Guild) -> Optional[discord.TextChannel]:
        return discord.utils.get(guild.text_channels, name=self.config.log_channel_name)

    @staticmethod
    def build_embed(title: str, description: str, severity: Severity) -> discord.Embed:
        return discord.Embed(
            title=f"📋 {title}",
            description=description,
            color=SEVERITY_COLORS.get(severity, EmbedColors.INFO),
            timestamp=datetime.now(NY_TZ),
        )

    async def log_event(
        self,
        guild: discord.Guild,
        title: str,
        description: str,
        severity: Severity = Severity.INFO,
    ) -> bool:
        """
        Send one audit embed.

        Returns:
            True if the embed was posted, False when the channel is missing
            or the send failed.
        """
        channel = self.find_log_channel(guild)
        if channel is None:
            logger.debug(f"No #{self.config.log_channel_name} in {guild.name}, audit skipped: {title}")
            return False

        try:
            await channel.send(embed=self.build_embed(title, description, severity))
            return True
        except discord.HTTPException as e:
            log_http_error(e, "Audit Log Send", [
                ("Guild", f"{guild.name} ({guild.id})"),
                ("Title", title),
            ])
            return False


__all__ = ["AuditLogService", "SEVERITY_COLORS"]
