#!/usr/bin/env python3
"""
Bastion - Discord Moderation Bot Entry Point
============================================

Loads .env, validates configuration and runs the bot until interrupted.

Features:
- Fail-fast configuration validation (exit code 1)
- Graceful shutdown on Ctrl+C and SIGTERM
- Critical errors saved through ErrorHandler
"""

import asyncio
import signal
import sys

import discord
from dotenv import load_dotenv

from bastion.bot import BastionBot
from bastion.core.config import ConfigValidationError, validate_and_log_config
from bastion.core.logger import logger
from bastion.utils.error_handler import ErrorHandler


async def main() -> None:
    """
    Main entry point for Bastion.

    Handles the complete bot lifecycle:
    1. Loads environment configuration
    2. Validates it (missing DISCORD_TOKEN aborts startup)
    3. Connects to Discord
    4. Closes cleanly on SIGTERM
    """
    load_dotenv()

    logger.tree("BASTION STARTING", [
        ("Commands", "Slash, context menu, prefix"),
        ("Protection", "Anti-spam, mention spam, raid"),
    ], "🚀")

    try:
        config = validate_and_log_config()
    except ConfigValidationError as e:
        logger.error(f"❌ {e}")
        logger.error("   Please add the missing values to the .env file")
        sys.exit(1)

    bot = BastionBot()

    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGTERM, lambda: asyncio.ensure_future(bot.close()))
    except NotImplementedError:
        pass  # Windows event loops have no signal handlers

    try:
        async with bot:
            await bot.start(config.discord_token)
    except (discord.LoginFailure, discord.PrivilegedIntentsRequired) as e:
        ErrorHandler.handle(e, location="main.main", critical=True)
        sys.exit(1)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("🛑 Bot stopped by user (Ctrl+C)")
    except Exception as e:
        ErrorHandler.handle(
            e,
            location="main.__main__",
            critical=True,
        )
        sys.exit(1)
