"""
Bastion - Source Package
========================

Discord moderation bot: sliding-window spam, mention and raid detection
plus slash, context menu and prefix moderation commands.

Package Structure:
- bot.py: BastionBot and its lifecycle
- commands/: Slash, context menu and prefix command cogs
- core/: Configuration, logging, constants, health server
- events/: Message and member listeners
- services/: Abuse detection, moderation executor, audit log
- utils/: Formatting, DM and error helpers
"""

__version__ = "1.0.0"
