"""
Bastion - Centralized Constants
===============================

Fixed values shared by the detector, the executor and the commands.
Thresholds an operator may tune live in config.py instead.
"""

from datetime import timedelta


# =============================================================================
# Time Constants
# =============================================================================

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400
MS_PER_SECOND = 1000

# =============================================================================
# Anti-Spam Actions
# =============================================================================

FLOOD_TIMEOUT = timedelta(minutes=10)      # Message-flood timeout
MENTION_TIMEOUT = timedelta(minutes=5)     # Mention-flood timeout
FLOOD_PURGE_LOOKBACK = 10                  # Recent channel messages scanned on a flood

# =============================================================================
# Moderation Command Limits
# =============================================================================

MIN_TIMEOUT_MINUTES = 1
MAX_TIMEOUT_MINUTES = 1440                 # 24 hours
DEFAULT_TIMEOUT_MINUTES = 10               # Prefix !timeout without minutes
QUICK_TIMEOUT_MINUTES = 10                 # "Quick Timeout" context menu

MIN_CLEAR_AMOUNT = 1
MAX_CLEAR_AMOUNT = 100
BULK_DELETE_MAX_AGE = timedelta(days=14)   # Older messages cannot be bulk deleted

MAX_BAN_DELETE_DAYS = 7
CLEAR_CONFIRMATION_TTL = 3                 # Seconds before the !clear confirmation disappears

DEFAULT_REASON = "No reason provided"
GUILD_ONLY_REPLY = "❌ This command can only be used in a server."

# =============================================================================
# Channels
# =============================================================================

WELCOME_CHANNEL_NAMES = ("welcome", "general")

# =============================================================================
# Presence
# =============================================================================

PRESENCE_TEXT = "/help | Protecting servers!"


__all__ = [
    "SECONDS_PER_MINUTE",
    "SECONDS_PER_HOUR",
    "SECONDS_PER_DAY",
    "MS_PER_SECOND",
    "FLOOD_TIMEOUT",
    "MENTION_TIMEOUT",
    "FLOOD_PURGE_LOOKBACK",
    "MIN_TIMEOUT_MINUTES",
    "MAX_TIMEOUT_MINUTES",
    "DEFAULT_TIMEOUT_MINUTES",
    "QUICK_TIMEOUT_MINUTES",
    "MIN_CLEAR_AMOUNT",
    "MAX_CLEAR_AMOUNT",
    "BULK_DELETE_MAX_AGE",
    "MAX_BAN_DELETE_DAYS",
    "CLEAR_CONFIRMATION_TTL",
    "DEFAULT_REASON",
    "GUILD_ONLY_REPLY",
    "WELCOME_CHANNEL_NAMES",
    "PRESENCE_TEXT",
]
