"""
Bastion - Error Handler
=======================

Categorised error reporting with recovery hints.

Features:
- Error categories (discord, detection, network, general)
- Recovery suggestion per category
- Discord message / member context capture
- Critical errors saved to logs/errors/*.json
"""

import json
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

import discord

from bastion.core.logger import LOGS_DIR, logger
from bastion.services.antispam.tracker import InvalidInputError


class ErrorContext:
    """Captures and formats detailed error context."""

    @staticmethod
    def get_full_context(e: BaseException, location: str, **kwargs) -> Dict[str, Any]:
        context = {
            "timestamp": datetime.now().isoformat(),
            "location": location,
            "error_type": type(e).__name__,
            "error_message": str(e),
            "traceback": "".join(traceback.format_exception(type(e), e, e.__traceback__)),
            "python_version": sys.version,
            "additional_context": kwargs,
        }

        message = kwargs.get("message")
        if isinstance(message, discord.Message):
            context["discord_context"] = {
                "guild": message.guild.name if message.guild else "DM",
                "channel": getattr(message.channel, "name", str(message.channel)),
                "author": str(message.author),
                "author_id": message.author.id,
                "content": message.content[:100] if message.content else None,
            }

        member = kwargs.get("member")
        if isinstance(member, discord.Member):
            context["member_context"] = {
                "name": str(member),
                "id": member.id,
                "guild": member.guild.name,
                "joined_at": member.joined_at.isoformat() if member.joined_at else None,
            }

        return context


class ErrorHandler:
    """Error handling with context and recovery hints."""

    ERROR_CATEGORIES = (
        ("detection", (InvalidInputError,)),
        ("discord", (discord.Forbidden, discord.NotFound, discord.HTTPException)),
        ("network", (ConnectionError, TimeoutError, OSError)),
    )

    SUGGESTIONS = {
        discord.Forbidden: "Check bot permissions and role position in server settings",
        discord.NotFound: "Resource not found - it was probably deleted already",
        discord.HTTPException: "Discord API issue - the next event will retry",
        InvalidInputError: "Detector received an invalid timestamp - check the clock source",
        ConnectionError: "Network connection issue - check internet connection",
        TimeoutError: "Request timed out - the next event will retry",
        OSError: "System resource issue - check disk space and permissions",
    }

    @classmethod
    def categorize_error(cls, e: BaseException) -> str:
        for category, error_types in cls.ERROR_CATEGORIES:
            if isinstance(e, error_types):
                return category
        return "general"

    @classmethod
    def get_recovery_suggestion(cls, e: BaseException) -> str:
        # Most specific class first, so Forbidden beats HTTPException
        for klass in type(e).__mro__:
            if klass in cls.SUGGESTIONS:
                return cls.SUGGESTIONS[klass]
        return "Unexpected error - check logs for details"

    @classmethod
    def handle(cls, e: BaseException, location: str, critical: bool = False, **context) -> str:
        """
        Log an error with full context.

        Args:
            e: The exception.
            location: Where the error occurred.
            critical: Log as critical and persist the context to disk.
            **context: Additional context (message=, member=, ...).

        Returns:
            The error category.
        """
        category = cls.categorize_error(e)
        suggestion = cls.get_recovery_suggestion(e)
        full_context = ErrorContext.get_full_context(e, location, **context)

        details = [
            ("Location", location),
            ("Category", category.upper()),
            ("Type", full_context["error_type"]),
            ("Error", str(e)[:200]),
            ("Recovery", suggestion),
        ]
        if "discord_context" in full_context:
            dc = full_context["discord_context"]
            details.append(("Discord", f"Guild={dc['guild']}, Channel={dc['channel']}, User={dc['author']}"))

        if critical:
            logger.critical("CRITICAL ERROR", details)
            logger.info(f"Traceback:\n{full_context['traceback']}")
            cls._store_critical_error(full_context)
        else:
            logger.error("Unhandled Error", details)

        return category

    @staticmethod
    def _store_critical_error(context: Dict[str, Any]) -> None:
        """Persist the full context of a critical error as JSON."""
        try:
            error_dir = Path(LOGS_DIR) / "errors"
            error_dir.mkdir(exist_ok=True, parents=True)

            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            error_file = error_dir / f"error_{timestamp}.json"

            with open(error_file, "w", encoding="utf-8") as f:
                json.dump(context, f, indent=2, default=str)

            logger.info(f"Critical error saved to {error_file}")
        except OSError as save_error:
            logger.warning(f"Failed to save error details: {save_error}")


__all__ = ["ErrorContext", "ErrorHandler"]
