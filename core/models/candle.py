"""Candle primitive."""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Candle:
    """OHLC bar. Volume is the tick count when built from a price stream."""
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0
    timestamp: Optional[datetime] = None  # Wall time the bar opened (reporting only)

    @property
    def range(self) -> float:
        return self.high - self.low

    @property
    def body(self) -> float:
        return abs(self.close - self.open)

    @property
    def is_green(self) -> bool:
        return self.close >= self.open

    def is_valid(self) -> bool:
        """OHLC integrity: finite values and open/close inside [low, high]."""
        values = (self.open, self.high, self.low, self.close)
        if not all(math.isfinite(v) for v in values):
            return False
        return (
            self.high >= self.low
            and self.low <= self.open <= self.high
            and self.low <= self.close <= self.high
        )
