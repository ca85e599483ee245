"""Cache validity policy.

A cached feed stays valid for a fixed number of calendar days after it was
saved. The cutoff is computed by adding days to the stored datetime, so it
keeps the stored wall-clock time rather than counting elapsed seconds.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

MAX_CACHE_AGE_DAYS = 7


def _align(timestamp: datetime, date: datetime):
    """Make a naive/aware pair comparable by treating the naive one as UTC."""
    if (timestamp.tzinfo is None) == (date.tzinfo is None):
        return timestamp, date
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc), date
    return timestamp, date.replace(tzinfo=timezone.utc)


def expiration_date(timestamp: datetime) -> Optional[datetime]:
    """Get the instant at which a feed saved at ``timestamp`` expires.

    Args:
        timestamp: When the feed was saved

    Returns:
        The cutoff datetime, or None if it falls beyond ``datetime.max``
    """
    try:
        return timestamp + timedelta(days=MAX_CACHE_AGE_DAYS)
    except OverflowError:
        return None


def validate(timestamp: datetime, against: datetime) -> bool:
    """Check if a feed saved at ``timestamp`` is still usable at ``against``.

    Args:
        timestamp: When the feed was saved
        against: Current date

    Returns:
        True if ``against`` is strictly before the cutoff. The cutoff itself
        counts as expired, and an uncomputable cutoff is never valid.
    """
    max_cache_age = expiration_date(timestamp)
    if max_cache_age is None:
        return False

    max_cache_age, against = _align(max_cache_age, against)
    return against < max_cache_age


def cache_age_remaining(timestamp: datetime, now: datetime) -> Optional[timedelta]:
    """Get time remaining until a feed saved at ``timestamp`` expires.

    Args:
        timestamp: When the feed was saved
        now: Current date

    Returns:
        Time remaining (zero when expired), or None if the cutoff overflows
    """
    max_cache_age = expiration_date(timestamp)
    if max_cache_age is None:
        return None

    max_cache_age, now = _align(max_cache_age, now)
    return max(timedelta(0), max_cache_age - now)
