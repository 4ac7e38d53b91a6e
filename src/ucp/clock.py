"""Wall-clock abstraction so token windows and ban expiries can be tested."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> int:
        """Current time in unix seconds."""
        ...


class SystemClock:
    """Clock backed by the system time."""

    def now(self) -> int:
        return int(time.time())


class FrozenClock:
    """Clock pinned to a given instant. Used by tests and scripts."""

    def __init__(self, now: int) -> None:
        self.current = now

    def now(self) -> int:
        return self.current

    def advance(self, seconds: int) -> None:
        self.current += seconds


def to_db_datetime(unix_seconds: int) -> datetime:
    """Convert unix seconds to the naive UTC datetime the game tables store."""
    return datetime.fromtimestamp(unix_seconds, tz=timezone.utc).replace(tzinfo=None)
