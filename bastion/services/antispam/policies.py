"""
Anti-Spam Abuse Policies
========================

Message-flood, mention-flood and join-flood detection.

DESIGN:
    Each policy turns "current event + tracker state" into an optional
    ActionDirective. Policies never touch Discord and never check
    permissions; the executor decides what is actually possible.

    Windowed policies reset the offending log when they fire, which makes
    crossing edge-triggered: one directive per burst, not one per message
    above the threshold.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Hashable, Iterable, Optional, TYPE_CHECKING

from bastion.core.constants import FLOOD_PURGE_LOOKBACK, FLOOD_TIMEOUT, MENTION_TIMEOUT

from .models import (
    ActionDirective,
    PolicyKind,
    RecommendedAction,
    Severity,
    TrackingDomain,
    WindowConfig,
)
from .tracker import RateWindowTracker

if TYPE_CHECKING:
    from bastion.core.config import Config


GUILD_IDENTITY = "guild"
"""Shared join-log identity when the caller does not split joins per guild."""


# =============================================================================
# Settings
# =============================================================================

@dataclass(frozen=True)
class DetectionSettings:
    """Thresholds, windows and fixed punishments for all three policies."""
    message_flood: WindowConfig = field(default_factory=lambda: WindowConfig(5, 5000))
    mention_flood_max: int = 5
    join_flood: WindowConfig = field(default_factory=lambda: WindowConfig(5, 30000))
    flood_lookback: int = FLOOD_PURGE_LOOKBACK
    flood_timeout: timedelta = FLOOD_TIMEOUT
    mention_timeout: timedelta = MENTION_TIMEOUT
    sweep_interval: int = 500

    @classmethod
    def from_config(cls, config: "Config") -> "DetectionSettings":
        return cls(
            message_flood=WindowConfig(
                config.message_flood_threshold,
                config.message_flood_timeframe_ms,
            ),
            mention_flood_max=config.mention_flood_max,
            join_flood=WindowConfig(
                config.join_flood_threshold,
                config.join_flood_timeframe_ms,
            ),
            sweep_interval=config.tracker_sweep_interval,
        )


# =============================================================================
# Evaluator
# =============================================================================

class AbusePolicyEvaluator:
    """
    Runs the abuse policies against a shared RateWindowTracker.

    Entry points for the event layer are on_message() and on_member_join();
    the individual check_* methods are public for the help embed and tests.
    """

    def __init__(self, tracker: RateWindowTracker, settings: Optional[DetectionSettings] = None) -> None:
        self.tracker = tracker
        self.settings = settings or DetectionSettings()
        self._events_since_sweep = 0

    # =========================================================================
    # Message Flood
    # =========================================================================

    def check_message_flood(self, author: Hashable, now: int) -> Optional[ActionDirective]:
        """Record one message by `author` and fire when the window reaches the threshold."""
        window = self.settings.message_flood
        domain = TrackingDomain.MESSAGE_ACTIVITY

        self.tracker.record(domain, author, now)
        count = self.tracker.count_within(domain, author, now, window.timeframe_ms)
        if count < window.threshold:
            return None

        self.tracker.reset(domain, author)
        return ActionDirective(
            policy=PolicyKind.MESSAGE_FLOOD,
            targets=(author,),
            actions=(RecommendedAction.DELETE_MESSAGES, RecommendedAction.TIMEOUT),
            reason="Anti-spam: Excessive messaging",
            severity=Severity.MODERATE,
            observed=count,
            window_ms=window.timeframe_ms,
            timeout=self.settings.flood_timeout,
            purge_lookback=self.settings.flood_lookback,
        )

    # =========================================================================
    # Mention Flood
    # =========================================================================

    def check_mention_flood(self, author: Hashable, mentioned: Iterable[Hashable]) -> Optional[ActionDirective]:
        """Fire when a single message mentions more distinct users than allowed."""
        count = len(set(mentioned))
        if count <= self.settings.mention_flood_max:
            return None

        return ActionDirective(
            policy=PolicyKind.MENTION_FLOOD,
            targets=(author,),
            actions=(RecommendedAction.DELETE_MESSAGE, RecommendedAction.TIMEOUT),
            reason="Excessive mentions",
            severity=Severity.MODERATE,
            observed=count,
            timeout=self.settings.mention_timeout,
        )

    # =========================================================================
    # Join Flood
    # =========================================================================

    def check_join_flood(
        self,
        member: Hashable,
        now: int,
        guild: Hashable = GUILD_IDENTITY,
    ) -> Optional[ActionDirective]:
        """Record a join under the guild and fire with every joiner in the window."""
        window = self.settings.join_flood
        domain = TrackingDomain.JOIN_ACTIVITY

        self.tracker.record(domain, guild, now, subject=member)
        joined = self.tracker.subjects_within(domain, guild, now, window.timeframe_ms)
        if len(joined) < window.threshold:
            return None

        self.tracker.reset(domain, guild)
        return ActionDirective(
            policy=PolicyKind.JOIN_FLOOD,
            targets=tuple(dict.fromkeys(joined)),
            actions=(RecommendedAction.KICK,),
            reason="Raid protection triggered",
            severity=Severity.ERROR,
            observed=len(joined),
            window_ms=window.timeframe_ms,
        )

    # =========================================================================
    # Event Entry Points
    # =========================================================================

    def on_message(
        self,
        author: Hashable,
        is_automated: bool,
        mentioned: Iterable[Hashable],
        now: int,
    ) -> Optional[ActionDirective]:
        """
        Evaluate one authored message.

        Automated accounts are ignored entirely. Message-flood runs first;
        mention-flood only runs when it did not fire, so at most one
        directive comes back per message.
        """
        if is_automated:
            return None

        directive = self.check_message_flood(author, now)
        if directive is None:
            directive = self.check_mention_flood(author, mentioned)

        self._tick(now)
        return directive

    def on_member_join(
        self,
        member: Hashable,
        now: int,
        guild: Optional[Hashable] = None,
    ) -> Optional[ActionDirective]:
        """Evaluate one membership join."""
        directive = self.check_join_flood(member, now, GUILD_IDENTITY if guild is None else guild)
        self._tick(now)
        return directive

    # =========================================================================
    # Housekeeping
    # =========================================================================

    def _tick(self, now: int) -> None:
        """Sweep empty identities out of the tracker every `sweep_interval` events."""
        self._events_since_sweep += 1
        if self._events_since_sweep < self.settings.sweep_interval:
            return

        self._events_since_sweep = 0
        self.tracker.sweep(
            TrackingDomain.MESSAGE_ACTIVITY, now, self.settings.message_flood.timeframe_ms
        )
        self.tracker.sweep(
            TrackingDomain.JOIN_ACTIVITY, now, self.settings.join_flood.timeframe_ms
        )


__all__ = [
    "GUILD_IDENTITY",
    "DetectionSettings",
    "AbusePolicyEvaluator",
]
