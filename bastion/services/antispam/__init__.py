"""
Bastion - Anti-Spam Package
===========================

Rate-based abuse detection: a sliding-window tracker and the policies
that read it. Nothing in this package talks to Discord.

Structure:
    - models.py: Directive, window and enum value objects
    - tracker.py: RateWindowTracker and the monotonic clock
    - policies.py: AbusePolicyEvaluator (message, mention and join floods)
"""

from .models import (
    ActionDirective,
    PolicyKind,
    RecommendedAction,
    Severity,
    TrackedEvent,
    TrackingDomain,
    WindowConfig,
)
from .policies import GUILD_IDENTITY, AbusePolicyEvaluator, DetectionSettings
from .tracker import InvalidInputError, RateWindowTracker, now_ms

__all__ = [
    "ActionDirective",
    "PolicyKind",
    "RecommendedAction",
    "Severity",
    "TrackedEvent",
    "TrackingDomain",
    "WindowConfig",
    "GUILD_IDENTITY",
    "AbusePolicyEvaluator",
    "DetectionSettings",
    "InvalidInputError",
    "RateWindowTracker",
    "now_ms",
]
