"""Momentum filter on top of the trend-strength indicator.

Inverts the mean-reversion reading: high ADX is good for momentum, sizing
grows with ADX, and direction must be confirmed by +DI/-DI over consecutive bars.

- ADX >= entry threshold: trend confirmed
- between exit and entry: transition, wait
- ADX < exit threshold: trend dying
"""

from dataclasses import dataclass
from typing import Optional

from core.errors import ConfigError
from core.logging_utils import get_logger
from core.models import Candle, MomentumKind, MomentumSignal
from logic.regime import AdxConfig, TrendDirection, TrendStrengthIndicator

logger = get_logger(__name__)

# Hysteresis buffer above the entry threshold for the wrapped indicator's gate
GATE_BUFFER = 3.0


@dataclass
class MomentumConfig:
    period: int = 14
    entry_threshold: float = 25.0
    exit_threshold: float = 20.0
    min_confirmation_bars: int = 2

    @classmethod
    def meme_optimized(cls) -> "MomentumConfig":
        """Faster response for young tokens."""
        return cls(period=10)

    @property
    def warmup_periods(self) -> int:
        return 2 * self.period - 1

    def validate(self) -> None:
        if self.period < 1:
            raise ConfigError(f"momentum period must be >= 1, got {self.period}")
        if self.exit_threshold > self.entry_threshold:
            raise ConfigError("exit_threshold must be <= entry_threshold")
        if self.min_confirmation_bars < 1:
            raise ConfigError("min_confirmation_bars must be >= 1")

    def adx_config(self) -> AdxConfig:
        return AdxConfig(
            period=self.period,
            ranging_threshold=self.exit_threshold,
            trending_threshold=self.entry_threshold,
            entry_threshold=self.exit_threshold,
            exit_threshold=self.entry_threshold + GATE_BUFFER,
        )


class MomentumFilter:
    """Directional momentum signals with confirmation bars and trend-expiry detection."""

    def __init__(self, config: Optional[MomentumConfig] = None):
        self.config = config or MomentumConfig()
        self.config.validate()
        self.indicator = TrendStrengthIndicator(self.config.adx_config())
        self.bullish_bars = 0
        self.bearish_bars = 0
        self.prev_trend: Optional[float] = None  # ADX at the valid bar before the latest
        self.last_trend: Optional[float] = None
        self.was_trending = False

    @classmethod
    def meme_optimized(cls) -> "MomentumFilter":
        return cls(MomentumConfig.meme_optimized())

    def update(self, candle: Candle) -> MomentumSignal:
        result = self.indicator.update_candle(candle)
        if not result.is_valid:
            return MomentumSignal.none()

        adx = result.adx
        direction = self.indicator.direction()

        if adx >= self.config.entry_threshold:
            if direction == TrendDirection.BULLISH:
                self.bullish_bars += 1
                self.bearish_bars = 0
            elif direction == TrendDirection.BEARISH:
                self.bearish_bars += 1
                self.bullish_bars = 0
            else:
                self.bullish_bars = 0
                self.bearish_bars = 0
        else:
            self.bullish_bars = 0
            self.bearish_bars = 0

        trend_expiring = self.was_trending and adx < self.config.exit_threshold
        self.was_trending = adx >= self.config.entry_threshold
        self.prev_trend = self.last_trend
        self.last_trend = adx

        if trend_expiring:
            logger.debug("[MOMENTUM] Trend expiring at adx=%.2f", adx)
            return MomentumSignal(MomentumKind.TREND_EXPIRING, adx=adx)

        if self.bullish_bars >= self.config.min_confirmation_bars:
            return MomentumSignal(
                MomentumKind.BULLISH, adx=adx, plus_di=result.plus_di, minus_di=result.minus_di
            )
        if self.bearish_bars >= self.config.min_confirmation_bars:
            return MomentumSignal(
                MomentumKind.BEARISH, adx=adx, plus_di=result.plus_di, minus_di=result.minus_di
            )
        return MomentumSignal.none()

    def check_entry_signal(self) -> Optional[MomentumSignal]:
        """Long-only entry check against the current state."""
        if not self.indicator.is_valid():
            return None
        adx = self.indicator.adx
        if (
            adx >= self.config.entry_threshold
            and self.indicator.direction() == TrendDirection.BULLISH
            and self.bullish_bars >= self.config.min_confirmation_bars
        ):
            return MomentumSignal(
                MomentumKind.BULLISH,
                adx=adx,
                plus_di=self.indicator.plus_di,
                minus_di=self.indicator.minus_di,
            )
        return None

    def check_exit_signal(self) -> Optional[MomentumSignal]:
        if not self.indicator.is_valid():
            return None
        adx = self.indicator.adx
        if adx < self.config.exit_threshold:
            return MomentumSignal(MomentumKind.TREND_EXPIRING, adx=adx)
        return None

    def is_decaying(self) -> bool:
        """ADX fell since the last bar but is still above the exit threshold."""
        if self.prev_trend is None or self.last_trend is None:
            return False
        return self.prev_trend > self.last_trend > self.config.exit_threshold

    def position_multiplier(self) -> float:
        """Momentum sizing: grows with ADX, trimmed at extremes for exhaustion."""
        adx = self.indicator.adx
        if adx < self.config.exit_threshold:
            return 0.0
        elif adx < self.config.entry_threshold:
            return 0.3
        elif adx < 35.0:
            return 0.7
        elif adx < 45.0:
            return 1.0
        return 0.8

    @property
    def adx(self) -> float:
        return self.indicator.adx

    @property
    def plus_di(self) -> float:
        return self.indicator.plus_di

    @property
    def minus_di(self) -> float:
        return self.indicator.minus_di

    def direction(self) -> TrendDirection:
        return self.indicator.direction()

    def is_valid(self) -> bool:
        return self.indicator.is_valid()

    def reset(self) -> None:
        self.indicator.reset()
        self.bullish_bars = 0
        self.bearish_bars = 0
        self.prev_trend = None
        self.last_trend = None
        self.was_trending = False
