"""
Bastion - Events Package
========================

Event listener Cogs, loaded by the bot with load_extension().

DESIGN:
    Each event file contains a Cog class with @commands.Cog.listener decorators.

    Event routing:
    - messages.py: Message create -> message-flood / mention-flood
    - members.py: Member join / leave -> join-flood, welcome, audit
"""

# =============================================================================
# Event Cog Registry
# =============================================================================

EVENT_COGS = [
    "bastion.events.messages",
    "bastion.events.members",
]


__all__ = [
    "EVENT_COGS",
]
