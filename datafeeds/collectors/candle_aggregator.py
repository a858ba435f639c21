"""Tick-to-candle aggregation.

Builds fixed-duration OHLC bars from a pushed price stream. Volume is the
tick count. A period of 0 closes a bar on every tick after the first; that is
the caller's choice and is not special-cased.
"""

from typing import Optional

from core.clock import Clock, system_clock
from core.logging_utils import get_logger
from core.models import Candle

logger = get_logger(__name__)


class CandleAggregator:
    """Builds OHLC candles from streaming price ticks."""

    def __init__(self, period_seconds: float, clock: Optional[Clock] = None):
        self.period_seconds = float(period_seconds)
        self.clock = clock or system_clock
        self._start_mono: Optional[float] = None
        self._start_wall = None
        self._open = 0.0
        self._high = 0.0
        self._low = 0.0
        self._close = 0.0
        self._ticks = 0

    @classmethod
    def one_minute(cls, clock: Optional[Clock] = None) -> "CandleAggregator":
        return cls(60, clock)

    @classmethod
    def five_minute(cls, clock: Optional[Clock] = None) -> "CandleAggregator":
        """Recommended bar size for the trend indicator."""
        return cls(300, clock)

    @property
    def period(self) -> float:
        return self.period_seconds

    @property
    def is_building(self) -> bool:
        return self._start_mono is not None

    def current_duration(self) -> Optional[float]:
        """Seconds since the in-progress candle opened, or None."""
        if self._start_mono is None:
            return None
        return self.clock.monotonic() - self._start_mono

    def update(self, price: float) -> Optional[Candle]:
        """Feed one tick. Returns the completed candle when a period rolls over."""
        now = self.clock.monotonic()

        if self._start_mono is None:
            self._start(price, now)
            return None

        if now - self._start_mono >= self.period_seconds:
            completed = self._build()
            self._start(price, now)
            logger.debug(
                "[CANDLE] Closed bar o=%.6g h=%.6g l=%.6g c=%.6g ticks=%d",
                completed.open, completed.high, completed.low, completed.close, int(completed.volume),
            )
            return completed

        self._high = max(self._high, price)
        self._low = min(self._low, price)
        self._close = price
        self._ticks += 1
        return None

    def force_close(self) -> Optional[Candle]:
        """Emit the in-progress candle without waiting (orderly shutdown)."""
        if self._start_mono is None or self._ticks == 0:
            return None
        candle = self._build()
        self.reset()
        return candle

    def reset(self) -> None:
        self._start_mono = None
        self._start_wall = None
        self._open = 0.0
        self._high = 0.0
        self._low = 0.0
        self._close = 0.0
        self._ticks = 0

    def _start(self, price: float, now: float) -> None:
        self._start_mono = now
        self._start_wall = self.clock.now()
        self._open = price
        self._high = price
        self._low = price
        self._close = price
        self._ticks = 1

    def _build(self) -> Candle:
        return Candle(
            open=self._open,
            high=self._high,
            low=self._low,
            close=self._close,
            volume=float(self._ticks),
            timestamp=self._start_wall,
        )
