"""
Time-related utilities for the application.

Catalog timestamps are generated in UTC and serialized using ISO-8601 with
timezone information so that the `created_at` range key of the user index
sorts lexicographically in creation order.
"""

from datetime import datetime, timezone


def utc_now_iso() -> str:
    """Return current UTC time in ISO-8601 format.

    Example:
        2024-01-15T10:42:31.123456+00:00
    """
    return datetime.now(timezone.utc).isoformat()
