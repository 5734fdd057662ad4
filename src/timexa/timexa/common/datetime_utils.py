from __future__ import annotations

from datetime import datetime, timedelta

_ONE_MINUTE = timedelta(minutes=1)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def whole_minutes_between(start: datetime, end: datetime) -> int:
    """floor((end - start) / 1 minute)."""
    return (end - start) // _ONE_MINUTE
