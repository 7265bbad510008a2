"""
Bastion - Services Package
==========================

DESIGN:
    antispam/: pure detection (tracker + policies), no Discord calls.
    moderation/: carries out ActionDirectives against Discord.
    audit_log.py: posts moderation embeds to the log channel.

    The bot builds one of each in __init__ and hands them to the cogs.
"""
