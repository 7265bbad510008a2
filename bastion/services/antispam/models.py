"""
Anti-Spam Data Models
=====================

Value objects shared by the tracker, the policies and the executor.
"""

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Hashable, NamedTuple, Optional, Tuple


class TrackingDomain(Enum):
    """Independent families of event logs kept by the tracker."""
    MESSAGE_ACTIVITY = "message_activity"
    JOIN_ACTIVITY = "join_activity"


class PolicyKind(Enum):
    """Which abuse policy produced a directive."""
    MESSAGE_FLOOD = "message-flood"
    MENTION_FLOOD = "mention-flood"
    JOIN_FLOOD = "join-flood"


class RecommendedAction(Enum):
    """Punitive step the executor should carry out."""
    DELETE_MESSAGES = "delete-messages"   # Recent author messages in the channel
    DELETE_MESSAGE = "delete-message"     # Only the triggering message
    TIMEOUT = "timeout"
    KICK = "kick"


class Severity(Enum):
    """Audit severity, mapped to an embed color by the audit log."""
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    MODERATE = "moderate"


class TrackedEvent(NamedTuple):
    """One entry of an event log."""
    timestamp: int
    subject: Hashable


@dataclass(frozen=True)
class WindowConfig:
    """Threshold and sliding window length (milliseconds) for a windowed policy."""
    threshold: int
    timeframe_ms: int

    def __post_init__(self) -> None:
        if self.threshold < 1:
            raise ValueError(f"threshold must be >= 1, got {self.threshold}")
        if self.timeframe_ms <= 0:
            raise ValueError(f"timeframe_ms must be > 0, got {self.timeframe_ms}")


@dataclass(frozen=True)
class ActionDirective:
    """
    What to do about a detected abuse, and why.

    Created by the evaluator, consumed once by the caller, never stored.
    """
    policy: PolicyKind
    targets: Tuple[Hashable, ...]
    actions: Tuple[RecommendedAction, ...]
    reason: str
    severity: Severity
    observed: int
    window_ms: Optional[int] = None
    timeout: Optional[timedelta] = None
    purge_lookback: Optional[int] = None

    @property
    def target(self) -> Hashable:
        """First (for message policies, the only) target."""
        return self.targets[0]

    def recommends(self, action: RecommendedAction) -> bool:
        return action in self.actions


__all__ = [
    "TrackingDomain",
    "PolicyKind",
    "RecommendedAction",
    "Severity",
    "TrackedEvent",
    "WindowConfig",
    "ActionDirective",
]
