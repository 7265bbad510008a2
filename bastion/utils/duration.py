"""
Duration Formatting
===================

Human-readable durations for embeds and audit descriptions.

Usage:
    from bastion.utils.duration import format_uptime, format_window

    format_uptime(timedelta(hours=5, minutes=3))  # "5h 3m"
    format_window(5000)                           # "5s"
"""

from datetime import timedelta

from bastion.core.constants import MS_PER_SECOND, SECONDS_PER_DAY, SECONDS_PER_HOUR, SECONDS_PER_MINUTE


def format_uptime(uptime: timedelta) -> str:
    """
    Format an uptime as "Xd Yh Zm", dropping leading zero units.

    Examples:
        >>> format_uptime(timedelta(days=2, hours=1, minutes=5))
        '2d 1h 5m'
        >>> format_uptime(timedelta(minutes=42))
        '42m'
    """
    total = max(int(uptime.total_seconds()), 0)
    days, rest = divmod(total, SECONDS_PER_DAY)
    hours, rest = divmod(rest, SECONDS_PER_HOUR)
    minutes = rest // SECONDS_PER_MINUTE

    if days > 0:
        return f"{days}d {hours}h {minutes}m"
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_window(milliseconds: int) -> str:
    """Format a detection window in seconds, e.g. 5000 -> "5s", 2500 -> "2.5s"."""
    seconds = milliseconds / MS_PER_SECOND
    return f"{seconds:g}s"


__all__ = ["format_uptime", "format_window"]
