"""UTC datetime utilities."""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

# Wall-clock source consumed by the services; tests inject a fixed one.
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


class FrozenClock:
    """Manually advanced clock for deterministic time-dependent code."""

    def __init__(self, start: datetime) -> None:
        if start.tzinfo is None:
            raise ValueError("FrozenClock requires a timezone-aware datetime")
        self._now = start

    def __call__(self) -> datetime:
        return self._now

    def advance(self, **kwargs: float) -> datetime:
        self._now = self._now + timedelta(**kwargs)
        return self._now

    def set(self, now: datetime) -> None:
        self._now = now
