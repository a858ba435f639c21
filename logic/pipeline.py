"""Per-series tick -> candle -> momentum chain.

One pipeline per tracked series. Not thread-safe: the caller owns each
instance exclusively.
"""

from typing import Optional

from core.clock import Clock
from core.events import CandleEvent, DecisionBus
from core.models import Candle, MomentumSignal
from datafeeds.collectors import CandleAggregator
from logic.momentum import MomentumConfig, MomentumFilter


class SeriesPipeline:
    """Feeds raw prices through the aggregator and the momentum filter."""

    def __init__(
        self,
        series: str,
        period_seconds: float = 300,
        momentum_config: Optional[MomentumConfig] = None,
        clock: Optional[Clock] = None,
        bus: Optional[DecisionBus] = None,
    ):
        self.series = series
        self.aggregator = CandleAggregator(period_seconds, clock)
        self.momentum = MomentumFilter(momentum_config)
        self.bus = bus
        self.last_signal: MomentumSignal = MomentumSignal.none()
        self.last_candle: Optional[Candle] = None

    def on_tick(self, price: float) -> Optional[MomentumSignal]:
        """Returns a momentum signal when a bar closes, else None."""
        candle = self.aggregator.update(price)
        if candle is None:
            return None
        return self._on_candle(candle)

    def flush(self) -> Optional[MomentumSignal]:
        """Close the in-progress bar (shutdown) and process it."""
        candle = self.aggregator.force_close()
        if candle is None:
            return None
        return self._on_candle(candle)

    def reset(self) -> None:
        self.aggregator.reset()
        self.momentum.reset()
        self.last_signal = MomentumSignal.none()
        self.last_candle = None

    def _on_candle(self, candle: Candle) -> MomentumSignal:
        self.last_candle = candle
        if self.bus is not None:
            self.bus.emit_candle(CandleEvent(series=self.series, candle=candle))
        self.last_signal = self.momentum.update(candle)
        return self.last_signal
