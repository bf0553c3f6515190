# composition_service/shared/utils/datetime_utils.py

"""
Utilities for datetime operations.

Timestamps are stored as naive UTC in the database and rendered as
"YYYY-MM-DD HH:MM:SS" in API responses.
"""

from datetime import datetime, timezone
from typing import Optional

DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S"


class DateTimeUtil:
    """
    Utility class for datetime operations.
    """

    @staticmethod
    def utcnow() -> datetime:
        """
        Get current UTC time (timezone-aware).
        """
        return datetime.now(timezone.utc)

    @staticmethod
    def utcnow_naive() -> datetime:
        """
        Get current UTC time as naive datetime (without timezone).

        Database columns are naive UTC.
        """
        return datetime.now(timezone.utc).replace(tzinfo=None)

    @staticmethod
    def to_naive_utc(dt: Optional[datetime]) -> Optional[datetime]:
        """Convert an aware datetime to naive UTC; naive values are assumed UTC already."""
        if dt is None:
            return None
        if dt.tzinfo is not None:
            return dt.astimezone(timezone.utc).replace(tzinfo=None)
        return dt

    @staticmethod
    def format(dt: Optional[datetime]) -> Optional[str]:
        """Render `dt` as "YYYY-MM-DD HH:MM:SS"; None stays None."""
        if dt is None:
            return None
        return dt.strftime(DISPLAY_FORMAT)

    @staticmethod
    def to_rfc3339(dt: datetime) -> str:
        """RFC 3339 timestamp in UTC, e.g. 2024-05-01T12:00:00Z."""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
