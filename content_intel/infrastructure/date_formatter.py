"""
Date formatting for intel payloads: ISO 8601, medium dates and human
readable intervals.
"""

from datetime import datetime, timezone, tzinfo
from typing import Any, Dict, Optional

MEDIUM_FORMAT = "%a, %m/%d/%Y - %H:%M"

# (seconds, singular, plural)
INTERVAL_UNITS = (
    (31536000, "1 year", "{count} years"),
    (2592000, "1 month", "{count} months"),
    (604800, "1 week", "{count} weeks"),
    (86400, "1 day", "{count} days"),
    (3600, "1 hour", "{count} hours"),
    (60, "1 min", "{count} min"),
    (1, "1 sec", "{count} sec"),
)


class DateFormatter:
    """Formats Unix timestamps and durations."""

    def __init__(self, tz: Optional[tzinfo] = None):
        self.tz = tz or timezone.utc

    def to_datetime(self, timestamp: int) -> datetime:
        return datetime.fromtimestamp(int(timestamp), tz=self.tz)

    def iso8601(self, timestamp: int) -> str:
        return self.to_datetime(timestamp).isoformat()

    def format(self, timestamp: int, fmt: str = "medium") -> str:
        """Format a timestamp; 'medium' is the site default, anything else is a strftime pattern."""
        pattern = MEDIUM_FORMAT if fmt == "medium" else fmt
        return self.to_datetime(timestamp).strftime(pattern)

    def format_interval(self, seconds: int, granularity: int = 2) -> str:
        """
        Human readable duration such as "3 weeks 2 days".

        `granularity` is the number of units shown; once a unit has been
        emitted, skipped smaller units also count against it.
        """
        interval = abs(int(seconds))
        parts = []

        for unit_seconds, singular, plural in INTERVAL_UNITS:
            if interval >= unit_seconds:
                count = interval // unit_seconds
                parts.append(singular if count == 1 else plural.format(count=count))
                interval %= unit_seconds
                granularity -= 1
            elif parts:
                granularity -= 1

            if granularity <= 0:
                break

        return " ".join(parts) if parts else "0 sec"

    def describe(self, timestamp: int) -> Dict[str, Any]:
        """The {timestamp, iso8601, human} block used in intel payloads."""
        return {
            "timestamp": int(timestamp),
            "iso8601": self.iso8601(timestamp),
            "human": self.format(timestamp, "medium"),
        }
