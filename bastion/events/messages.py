"""
Bastion - Message Events
========================

Feeds every guild message from a human author to the abuse evaluator.
"""

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from bastion.core.logger import logger
from bastion.services.antispam import now_ms

if TYPE_CHECKING:
    from bastion.bot import BastionBot


class MessageEvents(commands.Cog):
    """Message event handlers."""

    def __init__(self, bot: "BastionBot") -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        """
        Run message-flood and mention-flood detection.

        DESIGN: InvalidInputError from the tracker is not caught here; it
        reaches BastionBot.on_error like any other listener failure.
        Prefix commands are dispatched separately by commands.Bot.
        """
        if message.author.bot or message.guild is None:
            return

        directive = self.bot.evaluator.on_message(
            author=message.author.id,
            is_automated=message.author.bot,
            mentioned=[user.id for user in message.mentions],
            now=now_ms(),
        )
        if directive is None:
            return

        logger.tree("ABUSE DETECTED", [
            ("Policy", directive.policy.value),
            ("User", f"{message.author} ({message.author.id})"),
            ("Channel", f"#{getattr(message.channel, 'name', message.channel.id)}"),
            ("Observed", str(directive.observed)),
        ], emoji="🚨")

        await self.bot.executor.apply_message_directive(directive, message)


async def setup(bot: "BastionBot") -> None:
    """Load the MessageEvents cog."""
    await bot.add_cog(MessageEvents(bot))
    logger.tree("Message Events Loaded", [
        ("Policies", "message-flood, mention-flood"),
    ], emoji="💬")


__all__ = ["MessageEvents"]
