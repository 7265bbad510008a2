"""
Bastion - Configuration Module
==============================

Centralized configuration loaded from environment variables.

DESIGN:
    One Config dataclass is built at startup and shared through get_config().
    Required values fail fast with ConfigValidationError; optional numeric
    values fall back to their defaults and are clamped to a sane range with
    a logged warning, so a typo in .env never takes the bot down.

    Environment variable names match the ones existing deployments already
    use (SPAM_THRESHOLD, RAID_TIMEFRAME, LOG_CHANNEL, ...).
"""

import os
from dataclasses import dataclass
from typing import Optional

from zoneinfo import ZoneInfo


# =============================================================================
# Timezone Configuration
# =============================================================================

NY_TZ = ZoneInfo("America/New_York")
"""Eastern timezone used for embed timestamps and logs."""


# =============================================================================
# Configuration Dataclass
# =============================================================================

@dataclass
class Config:
    """
    Bot configuration loaded from environment variables.

    Attributes:
        discord_token: Discord bot authentication token.
        client_id: Application ID, handed to the client so the command tree knows it before login.
        command_prefix: Prefix for legacy text commands.
        message_flood_threshold: Messages inside the window that trigger anti-spam.
        message_flood_timeframe_ms: Anti-spam window length in milliseconds.
        mention_flood_max: Maximum distinct user mentions allowed per message.
        join_flood_threshold: Joins inside the window that trigger raid protection.
        join_flood_timeframe_ms: Raid window length in milliseconds.
        log_channel_name: Name of the text channel receiving audit embeds.
    """

    # -------------------------------------------------------------------------
    # Required: Discord
    # -------------------------------------------------------------------------

    discord_token: str

    # -------------------------------------------------------------------------
    # Optional: Discord
    # -------------------------------------------------------------------------

    client_id: Optional[int] = None
    command_prefix: str = "!"

    # -------------------------------------------------------------------------
    # Optional: Detection Thresholds
    # -------------------------------------------------------------------------

    message_flood_threshold: int = 5
    message_flood_timeframe_ms: int = 5000
    mention_flood_max: int = 5
    join_flood_threshold: int = 5
    join_flood_timeframe_ms: int = 30000
    tracker_sweep_interval: int = 500       # Evaluated events between tracker sweeps

    # -------------------------------------------------------------------------
    # Optional: Audit Log
    # -------------------------------------------------------------------------

    log_channel_name: str = "mod-logs"

    # -------------------------------------------------------------------------
    # Optional: Monitoring
    # -------------------------------------------------------------------------

    health_check_port: Optional[int] = None
    error_webhook_url: Optional[str] = None


# =============================================================================
# Embed Colors
# =============================================================================

class EmbedColors:
    """Color palette for every embed the bot sends."""

    SUCCESS = 0x00FF00    # Joins, confirmations
    INFO = 0x0099FF       # Help, stats, purges
    WARNING = 0xFFFF00    # Warnings, timeouts
    ERROR = 0xFF0000      # Bans, raids, leaves
    MODERATE = 0xFF6600   # Kicks, anti-spam actions


# =============================================================================
# Validation
# =============================================================================

class ConfigValidationError(Exception):
    """Raised when required configuration is missing or invalid."""

    pass


def _parse_int_optional(value: Optional[str]) -> Optional[int]:
    """Parse an optional integer, returning None when absent or malformed."""
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _parse_int_with_default(
    value: Optional[str],
    default: int,
    name: str,
    min_val: Optional[int] = None,
    max_val: Optional[int] = None,
) -> int:
    """
    Parse optional integer with default and range validation.

    Args:
        value: String value from environment variable.
        default: Default value if not set or invalid.
        name: Variable name for warning messages.
        min_val: Minimum allowed value (inclusive).
        max_val: Maximum allowed value (inclusive).

    Returns:
        Parsed integer clamped into range, or the default.
    """
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        from bastion.core.logger import logger
        logger.warning(f"Config {name}='{value}' invalid, using default {default}")
        return default

    if min_val is not None and parsed < min_val:
        from bastion.core.logger import logger
        logger.warning(f"Config {name}={parsed} below min {min_val}, using {min_val}")
        return min_val
    if max_val is not None and parsed > max_val:
        from bastion.core.logger import logger
        logger.warning(f"Config {name}={parsed} above max {max_val}, using {max_val}")
        return max_val
    return parsed


def _validate_url(value: Optional[str], name: str) -> Optional[str]:
    """Return the URL when it looks like http(s), otherwise None."""
    if not value:
        return None
    if not value.startswith(("https://", "http://")):
        from bastion.core.logger import logger
        logger.warning(f"Config {name} invalid URL format, ignoring")
        return None
    return value


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config() -> Config:
    """
    Load and validate configuration from environment variables.

    Returns:
        Validated Config object.

    Raises:
        ConfigValidationError: If DISCORD_TOKEN is missing.
    """
    discord_token = os.getenv("DISCORD_TOKEN")
    if not discord_token:
        raise ConfigValidationError("Missing required environment variables: DISCORD_TOKEN")

    prefix = os.getenv("PREFIX", "").strip() or "!"

    return Config(
        discord_token=discord_token,
        client_id=_parse_int_optional(os.getenv("CLIENT_ID")),
        command_prefix=prefix,
        message_flood_threshold=_parse_int_with_default(
            os.getenv("SPAM_THRESHOLD"), 5, "SPAM_THRESHOLD", min_val=1, max_val=100
        ),
        message_flood_timeframe_ms=_parse_int_with_default(
            os.getenv("SPAM_TIMEFRAME"), 5000, "SPAM_TIMEFRAME", min_val=1000, max_val=600000
        ),
        mention_flood_max=_parse_int_with_default(
            os.getenv("MAX_MENTIONS"), 5, "MAX_MENTIONS", min_val=1, max_val=100
        ),
        join_flood_threshold=_parse_int_with_default(
            os.getenv("RAID_THRESHOLD"), 5, "RAID_THRESHOLD", min_val=1, max_val=500
        ),
        join_flood_timeframe_ms=_parse_int_with_default(
            os.getenv("RAID_TIMEFRAME"), 30000, "RAID_TIMEFRAME", min_val=1000, max_val=3600000
        ),
        tracker_sweep_interval=_parse_int_with_default(
            os.getenv("TRACKER_SWEEP_INTERVAL"), 500, "TRACKER_SWEEP_INTERVAL", min_val=1, max_val=100000
        ),
        log_channel_name=os.getenv("LOG_CHANNEL", "").strip() or "mod-logs",
        health_check_port=_parse_int_optional(os.getenv("HEALTH_CHECK_PORT")),
        error_webhook_url=_validate_url(os.getenv("ERROR_WEBHOOK_URL"), "ERROR_WEBHOOK_URL"),
    )


# =============================================================================
# Global Config Instance
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance, loading it on first use.

    Raises:
        ConfigValidationError: On first call if config is invalid.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def validate_and_log_config() -> Config:
    """Load the config (raising on invalid input) and log a summary."""
    from bastion.core.logger import logger

    config = get_config()

    logger.tree("Configuration Validated", [
        ("Prefix", config.command_prefix),
        ("Anti-Spam", f"{config.message_flood_threshold} msgs / {config.message_flood_timeframe_ms}ms"),
        ("Mentions", f"max {config.mention_flood_max} per message"),
        ("Raid", f"{config.join_flood_threshold} joins / {config.join_flood_timeframe_ms}ms"),
        ("Log Channel", f"#{config.log_channel_name}"),
        ("Health Check", str(config.health_check_port) if config.health_check_port else "Disabled"),
    ], emoji="⚙️")

    return config


# =============================================================================
# Permission Helpers
# =============================================================================

def has_mod_permission(member) -> bool:
    """
    Check if a member may use moderation prefix commands.

    Args:
        member: Discord member (anything else, e.g. a DM user, is refused).

    Returns:
        True if the member holds Moderate Members.
    """
    permissions = getattr(member, "guild_permissions", None)
    if permissions is None:
        return False
    return bool(permissions.moderate_members)


__all__ = [
    "Config",
    "ConfigValidationError",
    "EmbedColors",
    "NY_TZ",
    "get_config",
    "load_config",
    "validate_and_log_config",
    "has_mod_permission",
]
