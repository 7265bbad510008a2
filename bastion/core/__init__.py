"""
Bastion - Core Package
======================

Configuration, logging and shared constants.

DESIGN:
    Core modules are global instances so every cog sees the same state:
    - get_config() returns the same Config instance
    - logger is a global TreeLogger instance

    The health server lives in core/health.py and is imported directly
    by the bot, since it depends on the detection services.
"""

# =============================================================================
# Core Imports
# =============================================================================

from .config import (
    Config,
    ConfigValidationError,
    EmbedColors,
    NY_TZ,
    get_config,
    has_mod_permission,
)

from .logger import logger, TreeLogger


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    # Config
    "Config",
    "ConfigValidationError",
    "EmbedColors",
    "NY_TZ",
    "get_config",
    "has_mod_permission",
    # Logger
    "logger",
    "TreeLogger",
]
