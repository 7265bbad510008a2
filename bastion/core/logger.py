"""
Bastion - Logger Module
=======================

Tree-style logging with Eastern timestamps and daily rotation.

DESIGN:
    Moderation events are easiest to audit when every related value sits
    under one heading, so most call sites log through tree() with a list
    of (key, value) pairs instead of a single formatted line.

    Key features:
    - Tree-style formatting (├─ └─) for structured details
    - Eastern timezone timestamps (auto EST/EDT handling)
    - Daily log folders with 7-day retention
    - Run ID per session for correlating restarts
    - Optional Discord webhook for error details
"""

import os
import uuid
import asyncio
from datetime import datetime
from pathlib import Path
from typing import List, Tuple, Optional

import aiohttp
from zoneinfo import ZoneInfo


# =============================================================================
# Constants
# =============================================================================

LOGS_DIR = Path(os.getenv("BASTION_LOGS_DIR", "logs"))
"""Directory for all log files, organized by date."""

LOG_RETENTION_DAYS = 7
"""Number of days to retain log directories before cleanup."""

NY_TZ = ZoneInfo("America/New_York")
"""Eastern timezone for consistent timestamps."""

Details = List[Tuple[str, str]]


# =============================================================================
# Tree Logger Class
# =============================================================================

class TreeLogger:
    """
    Logger with tree-style details and Eastern timestamps.

    Attributes:
        run_id: Unique identifier for this bot session.
        log_file: Path to the main log file.
        error_file: Path to the error-only log file.
    """

    def __init__(self, name: str = "Bastion") -> None:
        self.run_id: str = str(uuid.uuid4())[:8]
        self.name = name
        self._webhook_url: Optional[str] = None

        today = datetime.now(NY_TZ).strftime("%Y-%m-%d")
        self.log_dir = LOGS_DIR / today
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.log_file = self.log_dir / f"{name}-{today}.log"
        self.error_file = self.log_dir / f"{name}-Errors-{today}.log"

        self._cleanup_old_logs()
        self._write_session_header()

    def set_webhook(self, url: Optional[str]) -> None:
        """Route error details to a Discord webhook (None disables)."""
        self._webhook_url = url

    # =========================================================================
    # Housekeeping
    # =========================================================================

    def _cleanup_old_logs(self) -> None:
        """
        Remove dated log directories older than the retention period.

        Only directories named YYYY-MM-DD are considered; anything else
        (errors/, editor files) is left alone.
        """
        if not LOGS_DIR.exists():
            return

        now = datetime.now()
        removed = 0

        for item in LOGS_DIR.iterdir():
            if not item.is_dir():
                continue
            try:
                dir_date = datetime.strptime(item.name, "%Y-%m-%d")
            except ValueError:
                continue
            if (now - dir_date).days <= LOG_RETENTION_DAYS:
                continue
            for f in item.iterdir():
                f.unlink()
            item.rmdir()
            removed += 1

        if removed:
            print(f"[LOG CLEANUP] Removed {removed} old log directories")

    def _write_session_header(self) -> None:
        header = (
            "\n"
            "============================================================\n"
            f"NEW SESSION - {self.name.upper()} - RUN ID: {self.run_id}\n"
            f"[{datetime.now(NY_TZ).strftime('%I:%M:%S %p %Z')}]\n"
            "============================================================\n"
        )
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(header)

    # =========================================================================
    # Core Writing
    # =========================================================================

    def _get_timestamp(self) -> str:
        """Current Eastern time, e.g. "[02:30:45 PM EST]"."""
        return datetime.now(NY_TZ).strftime("[%I:%M:%S %p %Z]")

    def _write(
        self,
        message: str,
        emoji: str = "",
        include_timestamp: bool = True,
        is_error: bool = False,
    ) -> None:
        """
        Write one line to the console and the log file.

        Args:
            message: Line content.
            emoji: Optional emoji prefix.
            include_timestamp: Whether to prepend the timestamp.
            is_error: Also append the line to the error log.
        """
        line = f"{emoji} {message}" if emoji else message
        if include_timestamp:
            line = f"{self._get_timestamp()} {line}"

        print(line)

        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(f"{line}\n")

        if is_error:
            with open(self.error_file, "a", encoding="utf-8") as f:
                f.write(f"{line}\n")

    def _write_details(self, details: Details, is_error: bool = False) -> None:
        for i, (key, value) in enumerate(details):
            prefix = "└─" if i == len(details) - 1 else "├─"
            self._write(f"  {prefix} {key}: {value}", include_timestamp=False, is_error=is_error)

    def _log(
        self,
        msg: str,
        emoji: str,
        details: Optional[Details] = None,
        is_error: bool = False,
    ) -> None:
        self._write(msg, emoji, is_error=is_error)
        if details:
            self._write_details(details, is_error=is_error)

    # =========================================================================
    # Tree Formatting
    # =========================================================================

    def tree(self, title: str, items: Details, emoji: str = "📦") -> None:
        """
        Log structured data in tree format.

        Example output:
            [02:30:45 PM EST] 🛡️ ANTI-SPAM TRIGGERED
              ├─ User: spammer#0001
              ├─ Messages: 5
              └─ Window: 5s
        """
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write("\n")

        self._write(title, emoji=emoji)
        self._write_details(items)

        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write("\n")

    # =========================================================================
    # Log Levels
    # =========================================================================

    def debug(self, msg: str, details: Optional[Details] = None) -> None:
        """Log a debug message (only when the DEBUG env var is set)."""
        if os.getenv("DEBUG"):
            self._log(msg, "🔍", details)

    def info(self, msg: str, details: Optional[Details] = None) -> None:
        self._log(msg, "ℹ️", details)

    def success(self, msg: str, details: Optional[Details] = None) -> None:
        self._log(msg, "✅", details)

    def warning(self, msg: str, details: Optional[Details] = None) -> None:
        self._log(msg, "⚠️", details)

    def error(self, msg: str, details: Optional[Details] = None) -> None:
        """
        Log an error, with optional structured details.

        Errors always land in both the main and the error log. When details
        are given and a webhook is configured they are also posted there.
        """
        self._log(msg, "❌", details, is_error=True)

        if details and self._webhook_url:
            try:
                asyncio.get_running_loop().create_task(self._send_webhook_error(msg, details))
            except RuntimeError:
                pass  # No running loop (startup / shutdown)

    def critical(self, msg: str, details: Optional[Details] = None) -> None:
        self._log(msg, "🚨", details, is_error=True)

    # =========================================================================
    # Webhook Integration
    # =========================================================================

    async def _send_webhook_error(self, title: str, details: Details) -> None:
        """Post an error embed to the configured webhook."""
        if not self._webhook_url:
            return

        payload = {
            "embeds": [{
                "title": f"❌ {title}",
                "description": "\n".join(f"**{k}:** {v}" for k, v in details),
                "color": 0xFF0000,
                "timestamp": datetime.now(NY_TZ).isoformat(),
                "footer": {"text": f"{self.name} • Run ID: {self.run_id}"},
            }]
        }

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self._webhook_url,
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=10),
                ) as resp:
                    if resp.status != 204:
                        print(f"Webhook error: {resp.status}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            print(f"Failed to send webhook: {e}")


# =============================================================================
# Global Instance
# =============================================================================

logger = TreeLogger()
"""Global logger instance shared by every module."""


__all__ = [
    "logger",
    "TreeLogger",
    "NY_TZ",
]
