"""
Shared utility functions.

- URL resolution, vehicle ids and safe names
- Timestamps
- Bounded async retry
"""

from src.utils.url_utils import (
    absolute_url,
    strip_query,
    is_navigable,
    vehicle_id_from_url,
    safe_model_name,
    content_hash,
)
from src.utils.date_utils import get_current_timestamp, file_timestamp
from src.utils.retry import retry_async, RetryConfig

__all__ = [
    "absolute_url",
    "strip_query",
    "is_navigable",
    "vehicle_id_from_url",
    "safe_model_name",
    "content_hash",
    "get_current_timestamp",
    "file_timestamp",
    "retry_async",
    "RetryConfig",
]
