"""
Moderation Executor Package
===========================

Turns detector output into Discord calls.
"""

from .executor import ExecutionReport, ModerationExecutor

__all__ = ["ExecutionReport", "ModerationExecutor"]
