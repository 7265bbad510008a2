"""
Bastion - Main Bot Class
========================

Discord client wiring the abuse detector, the moderation executor and
the command cogs together.

Features:
- Message-flood, mention-flood and join-flood detection
- Slash, context menu and legacy prefix moderation commands
- Audit embeds in the configured log channel
- Health check HTTP endpoint
"""

import sys
from datetime import datetime
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from bastion.core.config import NY_TZ, get_config
from bastion.core.constants import PRESENCE_TEXT
from bastion.core.health import HealthCheckServer
from bastion.core.logger import logger
from bastion.services.antispam import AbusePolicyEvaluator, DetectionSettings, RateWindowTracker
from bastion.services.audit_log import AuditLogService
from bastion.services.moderation import ModerationExecutor
from bastion.utils.error_handler import ErrorHandler


COMMAND_ERROR_REPLY = "❌ There was an error executing this command!"
MISSING_PERMISSIONS_REPLY = "❌ You don't have permission to use this command."


# =============================================================================
# BastionBot Class
# =============================================================================

class BastionBot(commands.Bot):
    """
    Main Discord bot class.

    DESIGN: Central orchestrator that:
    - Owns the single RateWindowTracker and the evaluator reading it
    - Holds the audit log and executor shared by events and commands
    - Manages bot lifecycle (startup, shutdown)

    SERVICE INITIALIZATION ORDER:
    1. __init__: tracker, evaluator, audit log, executor
    2. setup_hook: command cogs, event cogs, tree error handler, sync
    3. on_ready: presence, error webhook, health check server
    """

    # =========================================================================
    # Initialization
    # =========================================================================

    def __init__(self) -> None:
        self.config = get_config()

        intents = discord.Intents.default()
        intents.message_content = True
        intents.members = True
        intents.moderation = True

        super().__init__(
            command_prefix=self.config.command_prefix,
            application_id=self.config.client_id,
            intents=intents,
            help_command=None,
        )

        self.start_time: datetime = datetime.now(NY_TZ)

        self.tracker = RateWindowTracker()
        self.evaluator = AbusePolicyEvaluator(self.tracker, DetectionSettings.from_config(self.config))
        self.audit_log = AuditLogService(self.config)
        self.executor = ModerationExecutor(self.audit_log)
        self.health_server: Optional[HealthCheckServer] = None

        self._ready_initialized: bool = False

        logger.info("Bot Instance Created")

    # =========================================================================
    # Setup Hook
    # =========================================================================

    async def setup_hook(self) -> None:
        """Load cogs and sync commands before on_ready."""
        from bastion.commands import COMMAND_COGS
        for cog in COMMAND_COGS:
            try:
                await self.load_extension(cog)
                logger.info(f"Cog Loaded: {cog.split('.')[-1]}")
            except commands.ExtensionError as e:
                logger.error("Failed to Load Cog", [("Cog", cog), ("Error", str(e))])

        from bastion.events import EVENT_COGS
        for cog in EVENT_COGS:
            try:
                await self.load_extension(cog)
                logger.debug(f"Event Cog Loaded: {cog.split('.')[-1]}")
            except commands.ExtensionError as e:
                logger.error("Failed to Load Event Cog", [("Cog", cog), ("Error", str(e))])

        self.tree.on_error = self.on_app_command_error

        try:
            synced = await self.tree.sync()
            logger.tree("Commands Synced", [("Count", str(len(synced)))], emoji="✅")
        except discord.HTTPException as e:
            logger.error("Command Sync Failed", [("Error", str(e))])

    # =========================================================================
    # On Ready
    # =========================================================================

    async def on_ready(self) -> None:
        """Set presence and start monitoring once connected."""
        if self._ready_initialized:
            logger.info("Bot Reconnected (skipping re-initialization)")
            return

        self._ready_initialized = True

        if not self.user:
            return

        logger.tree("BOT ONLINE", [
            ("Name", self.user.name),
            ("ID", str(self.user.id)),
            ("Guilds", str(len(self.guilds))),
        ], emoji="🚀")

        await self.change_presence(
            activity=discord.Activity(type=discord.ActivityType.watching, name=PRESENCE_TEXT)
        )

        if self.config.error_webhook_url:
            logger.set_webhook(self.config.error_webhook_url)

        if self.config.health_check_port:
            self.health_server = HealthCheckServer(self, self.config.health_check_port)
            await self.health_server.start()

        logger.tree("BASTION READY", [
            ("Anti-Spam", f"{self.config.message_flood_threshold} msgs / {self.config.message_flood_timeframe_ms}ms"),
            ("Mention Limit", str(self.config.mention_flood_max)),
            ("Raid", f"{self.config.join_flood_threshold} joins / {self.config.join_flood_timeframe_ms}ms"),
            ("Log Channel", f"#{self.config.log_channel_name}"),
            ("Health Server", "Running" if self.health_server else "Disabled"),
        ], emoji="🛡️")

    # =========================================================================
    # Error Handling
    # =========================================================================

    async def on_error(self, event_method: str, *args, **kwargs) -> None:
        """Report exceptions escaping event listeners, detector errors included."""
        error = sys.exc_info()[1]
        if error is None:
            return

        context = {}
        if args and isinstance(args[0], discord.Message):
            context["message"] = args[0]
        elif args and isinstance(args[0], discord.Member):
            context["member"] = args[0]

        ErrorHandler.handle(error, f"Event: {event_method}", **context)

    async def on_command_error(self, ctx: commands.Context, error: commands.CommandError) -> None:
        """Unknown prefix commands are ignored; everything else is logged."""
        if isinstance(error, (commands.CommandNotFound, commands.CheckFailure)):
            return
        if ctx.cog is not None and ctx.cog.has_error_handler():
            return
        original = getattr(error, "original", error)
        ErrorHandler.handle(original, f"Prefix Command: {ctx.command}", message=ctx.message)

    async def on_app_command_error(
        self,
        interaction: discord.Interaction,
        error: app_commands.AppCommandError,
    ) -> None:
        """Reply to a failed slash / context menu command without leaking details."""
        if isinstance(error, app_commands.MissingPermissions):
            reply = MISSING_PERMISSIONS_REPLY
        else:
            original = getattr(error, "original", error)
            command = interaction.command.name if interaction.command else "unknown"
            ErrorHandler.handle(original, f"App Command: {command}")
            reply = COMMAND_ERROR_REPLY

        try:
            if interaction.response.is_done():
                await interaction.followup.send(reply, ephemeral=True)
            else:
                await interaction.response.send_message(reply, ephemeral=True)
        except discord.HTTPException as e:
            logger.warning("Failed to send error reply", [("Error", str(e)[:100])])

    # =========================================================================
    # Shutdown
    # =========================================================================

    async def close(self) -> None:
        """Graceful shutdown with proper cleanup."""
        logger.info("Initiating Graceful Shutdown")

        if self.health_server:
            await self.health_server.stop()

        await super().close()

        logger.tree("SHUTDOWN COMPLETE", [
            ("Uptime", str(datetime.now(NY_TZ) - self.start_time)),
        ], emoji="🛑")


__all__ = ["BastionBot"]
