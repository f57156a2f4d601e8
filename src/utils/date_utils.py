"""
Date utility functions.
"""

from datetime import datetime, timezone


def get_current_timestamp() -> str:
    """
    Get current timestamp in ISO format with UTC timezone.

    Example:
        >>> ts = get_current_timestamp()
        >>> '+' in ts
        True
    """
    return datetime.now(timezone.utc).isoformat()


def file_timestamp() -> str:
    """Timestamp safe for use in file names, e.g. 2026-10-19T08-15-02-123456."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%f")
