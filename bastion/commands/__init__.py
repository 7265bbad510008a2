"""
Bastion - Commands Package
==========================

Command cogs, loaded by the bot with load_extension().

DESIGN:
    Each module holds one Cog and an async setup(bot) entry point.
    Add new command cogs to COMMAND_COGS to have them loaded on startup.

Available Commands:
    moderation.py: /kick, /ban, /timeout, /clear, /warn, Quick Timeout, Delete & Warn User
    general.py: /ping, /stats, /help, /serverinfo, User Info
    prefix.py: !ping, !help, !stats, !kick, !ban, !timeout, !clear
"""

# =============================================================================
# Command Cog Registry
# =============================================================================

COMMAND_COGS = [
    "bastion.commands.moderation",
    "bastion.commands.general",
    "bastion.commands.prefix",
]


__all__ = [
    "COMMAND_COGS",
]
