"""
carejourney/utils/time_utils.py

Purpose: Time helpers

- UTC timestamps for documents
- Millisecond epoch values for object keys
- Token expiry checks
"""

import time
from datetime import datetime, timedelta
from typing import Optional


def utcnow() -> datetime:
    """
    Naive UTC timestamp, the form MongoDB round-trips.
    """
    return datetime.utcnow()


def epoch_millis() -> int:
    """
    Current time in milliseconds since the epoch.
    """
    return int(time.time() * 1000)


def is_token_expired(created_at: Optional[datetime], ttl_seconds: int = 3600) -> bool:
    """
    Checks whether a one-time token is older than its TTL.

    MongoDB's TTL monitor only runs once a minute, so reads double check.
    """
    if not created_at:
        return True
    return datetime.utcnow() > created_at + timedelta(seconds=ttl_seconds)
