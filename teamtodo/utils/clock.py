"""Time source.

All persisted timestamps are naive UTC. Components take a ``clock`` callable
so tests can pin "now".
"""

from collections.abc import Callable
from datetime import datetime, timezone

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Current time as naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_aware_utc(value: datetime) -> datetime:
    """Attach UTC tzinfo to a naive UTC timestamp (for cookie headers)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_naive_utc(value: datetime) -> datetime:
    """Convert an offset-aware timestamp to naive UTC; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
