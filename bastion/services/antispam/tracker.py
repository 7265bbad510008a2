"""
Anti-Spam Rate Window Tracker
=============================

Sliding time-window event counters keyed by (domain, identity).

DESIGN:
    Each (domain, identity) pair owns an append-only log of timestamps in
    chronological order. Eviction is lazy: a log is pruned only when it is
    queried, so recording is O(1) and counting is amortised O(1).

    The window is half-open, (now - timeframe, now]. An entry exactly
    `timeframe` old has expired. Identical timestamps are all kept.

    Every call validates its time arguments before touching any state.
    A non-finite time (NaN, infinity), a negative time, a negative
    timeframe or a `now` older than the last `now` seen by the same log
    raises InvalidInputError and leaves the log exactly as it was.

    The tracker never awaits, so one event is recorded and counted without
    any other event interleaving on the bot's event loop.
"""

import math
import time
from collections import deque
from typing import Deque, Dict, Hashable, Optional, Tuple

from .models import TrackedEvent, TrackingDomain


# =============================================================================
# Errors
# =============================================================================

class InvalidInputError(ValueError):
    """Raised for non-finite, negative or non-monotonic time values."""

    pass


# =============================================================================
# Clock
# =============================================================================

def now_ms() -> int:
    """Monotonic clock in milliseconds (never goes backwards)."""
    return time.monotonic_ns() // 1_000_000


# =============================================================================
# Event Log
# =============================================================================

class _EventLog:
    """Timestamps for one identity, plus the last `now` it was touched with."""

    __slots__ = ("entries", "last_now")

    def __init__(self) -> None:
        self.entries: Deque[TrackedEvent] = deque()
        self.last_now: Optional[int] = None

    def prune(self, cutoff: int) -> None:
        """Drop every entry at or before `cutoff`."""
        entries = self.entries
        while entries and entries[0].timestamp <= cutoff:
            entries.popleft()


# =============================================================================
# Rate Window Tracker
# =============================================================================

class RateWindowTracker:
    """
    Owner of every event log used by the abuse policies.

    One instance is created by the bot and handed to the evaluator; tests
    build a fresh one per case.
    """

    def __init__(self) -> None:
        self._logs: Dict[TrackingDomain, Dict[Hashable, _EventLog]] = {
            domain: {} for domain in TrackingDomain
        }

    # =========================================================================
    # Validation
    # =========================================================================

    @staticmethod
    def _check_time(value, name: str) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidInputError(f"{name} must be a number of milliseconds, got {value!r}")
        if not math.isfinite(value):
            raise InvalidInputError(f"{name} must be finite, got {value}")
        if value < 0:
            raise InvalidInputError(f"{name} must not be negative, got {value}")

    @staticmethod
    def _check_monotonic(log: Optional[_EventLog], now: int) -> None:
        if log is not None and log.last_now is not None and now < log.last_now:
            raise InvalidInputError(
                f"now={now} is older than the last recorded time {log.last_now}"
            )

    # =========================================================================
    # Public API
    # =========================================================================

    def record(
        self,
        domain: TrackingDomain,
        identity: Hashable,
        now: int,
        subject: Optional[Hashable] = None,
    ) -> None:
        """
        Append an event at `now` to the identity's log.

        Args:
            domain: Tracking domain of the log.
            identity: Key of the log inside the domain.
            now: Event time in milliseconds.
            subject: Who caused the event (defaults to the identity).
        """
        self._check_time(now, "now")
        logs = self._logs[domain]
        log = logs.get(identity)
        self._check_monotonic(log, now)

        if log is None:
            log = logs[identity] = _EventLog()
        log.entries.append(TrackedEvent(now, identity if subject is None else subject))
        log.last_now = now

    def count_within(
        self,
        domain: TrackingDomain,
        identity: Hashable,
        now: int,
        timeframe: int,
    ) -> int:
        """Prune expired entries and return how many remain in (now - timeframe, now]."""
        log = self._prune(domain, identity, now, timeframe)
        return len(log.entries) if log else 0

    def subjects_within(
        self,
        domain: TrackingDomain,
        identity: Hashable,
        now: int,
        timeframe: int,
    ) -> Tuple[Hashable, ...]:
        """Prune like count_within and return the subjects of the surviving entries."""
        log = self._prune(domain, identity, now, timeframe)
        if not log:
            return ()
        return tuple(event.subject for event in log.entries)

    def reset(self, domain: TrackingDomain, identity: Hashable) -> None:
        """Clear one identity's log (left as an empty placeholder until swept)."""
        log = self._logs[domain].get(identity)
        if log is not None:
            log.entries.clear()

    def sweep(self, domain: TrackingDomain, now: int, max_age: int) -> int:
        """
        Prune every log of a domain and drop the identities left empty.

        Logs last touched after `now` are skipped rather than rejected, since
        the sweep is housekeeping and not tied to any single identity.

        Returns:
            Number of identities dropped.
        """
        self._check_time(now, "now")
        self._check_time(max_age, "max_age")

        logs = self._logs[domain]
        cutoff = now - max_age
        dropped = 0

        for identity in list(logs):
            log = logs[identity]
            if log.last_now is not None and now < log.last_now:
                continue
            log.prune(cutoff)
            if not log.entries:
                del logs[identity]
                dropped += 1

        return dropped

    def tracked_identities(self, domain: TrackingDomain) -> int:
        """Number of identities currently holding a log in `domain`."""
        return len(self._logs[domain])

    # =========================================================================
    # Internals
    # =========================================================================

    def _prune(
        self,
        domain: TrackingDomain,
        identity: Hashable,
        now: int,
        timeframe: int,
    ) -> Optional[_EventLog]:
        self._check_time(now, "now")
        self._check_time(timeframe, "timeframe")
        log = self._logs[domain].get(identity)
        self._check_monotonic(log, now)

        if log is None:
            return None
        log.prune(now - timeframe)
        log.last_now = now
        return log


__all__ = [
    "InvalidInputError",
    "RateWindowTracker",
    "now_ms",
]
