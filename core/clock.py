"""Clock abstraction.

Two readings with separate roles:
- monotonic(): float seconds from an arbitrary origin. Used only for ages,
  cooldowns and candle periods inside one process. Never persisted.
- now(): timezone-aware UTC datetime. Used only for externally visible
  timestamps (snapshots, events, token creation times).

Never derive one from the other across a restart.
"""

import time
from datetime import datetime, timedelta, timezone
from typing import Optional


class Clock:
    """Base clock interface."""

    def monotonic(self) -> float:
        raise NotImplementedError

    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock(Clock):
    """Real process clock."""

    def monotonic(self) -> float:
        return time.monotonic()

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class ManualClock(Clock):
    """Caller-driven clock for tests and offline replay.

    Both readings move together on advance(); set_now() only moves the wall
    reading, which lets tests model wall-clock jumps.
    """

    def __init__(self, start: Optional[datetime] = None, mono_start: float = 0.0):
        self._mono = float(mono_start)
        self._wall = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        if self._wall.tzinfo is None:
            self._wall = self._wall.replace(tzinfo=timezone.utc)

    def monotonic(self) -> float:
        return self._mono

    def now(self) -> datetime:
        return self._wall

    def advance(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError("ManualClock cannot move backwards")
        self._mono += seconds
        self._wall = self._wall + timedelta(seconds=seconds)

    def set_now(self, wall: datetime) -> None:
        if wall.tzinfo is None:
            wall = wall.replace(tzinfo=timezone.utc)
        self._wall = wall


system_clock = SystemClock()
