"""Trend-strength regime detection (Wilder ADX).

ADX measures trend strength on a 0-100 scale without direction; +DI/-DI carry
the direction. Every update is O(1): smoothed sums are carried forward and
history is never recomputed.

Warm-up runs through three phases keyed by bars processed ``n`` and period ``P``:
- WARMING (1..P): sum raw TR/+DM/-DM. Bar P seeds the smoothed sums and the
  first DX.
- SEEDING_INDEX (P+1..2P-1): Wilder-smooth TR/DM and buffer DX. Bar 2P-1
  seeds ADX as the mean of the buffered DX values (first valid output).
- SMOOTHING (2P..): ADX = (ADX * (P-1) + DX) / P.

For mean reversion:
- ADX < 20: ranging (favorable)
- ADX 20-25: transition
- ADX > 25: trending (unfavorable)
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

import numpy as np

from core.errors import ConfigError
from core.logging_utils import get_logger
from core.models import Candle

logger = get_logger(__name__)


@dataclass
class AdxConfig:
    """ADX calculation and hysteresis thresholds."""
    period: int = 14
    ranging_threshold: float = 20.0
    trending_threshold: float = 25.0
    entry_threshold: float = 20.0   # Must drop below this to re-enable trading
    exit_threshold: float = 28.0    # Rising above this disables trading

    @classmethod
    def crypto_optimized(cls) -> "AdxConfig":
        """Shorter period and wider bands for crypto."""
        return cls(
            period=10,
            ranging_threshold=20.0,
            trending_threshold=30.0,
            entry_threshold=20.0,
            exit_threshold=30.0,
        )

    @property
    def warmup_periods(self) -> int:
        """Bars needed before ADX is valid."""
        return 2 * self.period - 1

    def validate(self) -> None:
        if self.period < 1:
            raise ConfigError(f"ADX period must be >= 1, got {self.period}")
        if self.entry_threshold > self.exit_threshold:
            raise ConfigError(
                f"entry_threshold ({self.entry_threshold}) must be <= exit_threshold ({self.exit_threshold})"
            )


class WilderPhase(Enum):
    WARMING = "warming"
    SEEDING_INDEX = "seeding_index"
    SMOOTHING = "smoothing"

    @staticmethod
    def for_bar(bars_processed: int, period: int) -> "WilderPhase":
        """Phase a bar belongs to (1-based bar number)."""
        if bars_processed <= period:
            return WilderPhase.WARMING
        if bars_processed <= 2 * period - 1:
            return WilderPhase.SEEDING_INDEX
        return WilderPhase.SMOOTHING


class TrendRegime(Enum):
    UNKNOWN = "unknown"
    RANGING = "ranging"              # < 20
    TRANSITIONING = "transitioning"  # 20-25
    TRENDING = "trending"            # 25-40
    STRONG_TREND = "strong_trend"    # 40-50
    EXTREME_TREND = "extreme_trend"  # >= 50, potential exhaustion

    @classmethod
    def from_adx(cls, adx: float) -> "TrendRegime":
        if adx < 20.0:
            return cls.RANGING
        elif adx < 25.0:
            return cls.TRANSITIONING
        elif adx < 40.0:
            return cls.TRENDING
        elif adx < 50.0:
            return cls.STRONG_TREND
        return cls.EXTREME_TREND

    def is_favorable_for_mean_reversion(self) -> bool:
        return self in (TrendRegime.RANGING, TrendRegime.TRANSITIONING)


class TrendDirection(Enum):
    BULLISH = "bullish"   # +DI > -DI
    BEARISH = "bearish"   # -DI > +DI
    NEUTRAL = "neutral"


class RegimeKind(Enum):
    FAVORABLE = "favorable"      # confidence >= 0.7
    NEUTRAL = "neutral"          # 0.4-0.7
    UNFAVORABLE = "unfavorable"  # < 0.4


@dataclass(frozen=True)
class RegimeSignal:
    """Mean-reversion regime verdict with a clamped confidence."""
    kind: RegimeKind
    confidence: float

    @classmethod
    def from_confidence(cls, confidence: float) -> "RegimeSignal":
        c = min(1.0, max(0.0, confidence))
        if c >= 0.7:
            return cls(RegimeKind.FAVORABLE, c)
        elif c >= 0.4:
            return cls(RegimeKind.NEUTRAL, c)
        return cls(RegimeKind.UNFAVORABLE, c)

    @property
    def allows_trading(self) -> bool:
        return self.kind != RegimeKind.UNFAVORABLE

    @property
    def position_multiplier(self) -> float:
        if self.kind == RegimeKind.FAVORABLE:
            return self.confidence
        if self.kind == RegimeKind.NEUTRAL:
            return 0.5 * self.confidence
        return 0.0


@dataclass(frozen=True)
class AdxResult:
    plus_di: float
    minus_di: float
    adx: float
    dx: float
    is_valid: bool


class HysteresisGate:
    """Two-threshold trading switch.

    Starts enabled. Disables once the value rises strictly above ``exit_threshold``
    and re-enables only after it falls strictly below the lower ``entry_threshold``.
    """

    def __init__(self, entry_threshold: float, exit_threshold: float):
        self.entry_threshold = entry_threshold
        self.exit_threshold = exit_threshold
        self.enabled = True

    def update(self, value: float) -> bool:
        if self.enabled:
            if value > self.exit_threshold:
                self.enabled = False
        elif value < self.entry_threshold:
            self.enabled = True
        return self.enabled

    def reset(self) -> None:
        self.enabled = True


def true_range(candle: Candle, prev_close: Optional[float]) -> float:
    """Max of high-low and the gaps to the previous close."""
    hl = candle.high - candle.low
    if prev_close is None:
        return hl
    return max(hl, abs(candle.high - prev_close), abs(candle.low - prev_close))


def directional_movement(
    candle: Candle, prev_high: Optional[float], prev_low: Optional[float]
) -> tuple[float, float]:
    """(+DM, -DM); both zero on inside bars and on the first bar."""
    if prev_high is None or prev_low is None:
        return 0.0, 0.0
    up_move = candle.high - prev_high
    down_move = prev_low - candle.low
    if up_move > down_move and up_move > 0:
        return up_move, 0.0
    if down_move > up_move and down_move > 0:
        return 0.0, down_move
    return 0.0, 0.0


class TrendStrengthIndicator:
    """Incremental ADX with +DI/-DI and a hysteresis trading gate."""

    name = "ADX"

    def __init__(self, config: Optional[AdxConfig] = None):
        self.config = config or AdxConfig()
        self.config.validate()
        self.gate = HysteresisGate(self.config.entry_threshold, self.config.exit_threshold)
        self._dx_buffer: List[float] = []
        self.reset()

    @classmethod
    def crypto_optimized(cls) -> "TrendStrengthIndicator":
        return cls(AdxConfig.crypto_optimized())

    def reset(self) -> None:
        self._prev_high: Optional[float] = None
        self._prev_low: Optional[float] = None
        self._prev_close: Optional[float] = None
        self._tr_sum = 0.0
        self._plus_dm_sum = 0.0
        self._minus_dm_sum = 0.0
        self._smoothed_tr = 0.0
        self._smoothed_plus_dm = 0.0
        self._smoothed_minus_dm = 0.0
        self._dx_buffer.clear()
        self._plus_di = 0.0
        self._minus_di = 0.0
        self._adx = 0.0
        self._bars = 0
        self._phase = WilderPhase.WARMING
        self.gate.reset()

    # Accessors

    @property
    def bars_processed(self) -> int:
        return self._bars

    @property
    def phase(self) -> WilderPhase:
        """Phase the next bar will be processed in."""
        return self._phase

    @property
    def adx(self) -> float:
        return self._adx

    @property
    def plus_di(self) -> float:
        return self._plus_di

    @property
    def minus_di(self) -> float:
        return self._minus_di

    @property
    def is_trading_enabled(self) -> bool:
        return self.gate.enabled

    def is_valid(self) -> bool:
        return self._bars >= self.config.warmup_periods

    is_ready = is_valid

    # Update

    def update_candle(self, candle: Candle) -> AdxResult:
        """Process one bar and return the current ADX state."""
        if not candle.is_valid():
            logger.warning("[ADX] Ignoring malformed candle %s", candle)
            return self._result(0.0)

        tr = true_range(candle, self._prev_close)
        plus_dm, minus_dm = directional_movement(candle, self._prev_high, self._prev_low)
        self._prev_high = candle.high
        self._prev_low = candle.low
        self._prev_close = candle.close
        self._bars += 1

        if self._phase == WilderPhase.WARMING:
            self._tr_sum += tr
            self._plus_dm_sum += plus_dm
            self._minus_dm_sum += minus_dm
            if self._bars < self.config.period:
                return self._result(0.0)
            # Bar P: seed smoothed sums and the first DX
            self._smoothed_tr = self._tr_sum
            self._smoothed_plus_dm = self._plus_dm_sum
            self._smoothed_minus_dm = self._minus_dm_sum
            self._update_di()
            dx = self._dx()
            self._dx_buffer.append(dx)
            self._phase = WilderPhase.SEEDING_INDEX
            self._maybe_seed_adx()
            return self._result(dx)

        self._smooth(tr, plus_dm, minus_dm)
        self._update_di()
        dx = self._dx()

        if self._phase == WilderPhase.SEEDING_INDEX:
            self._dx_buffer.append(dx)
            self._maybe_seed_adx()
            return self._result(dx)

        n = self.config.period
        self._adx = (self._adx * (n - 1) + dx) / n
        self.gate.update(self._adx)
        return self._result(dx)

    def update(self, candle: Candle) -> Optional[RegimeSignal]:
        """Process one bar; returns a regime verdict once valid, else None."""
        result = self.update_candle(candle)
        if not result.is_valid:
            return None
        return RegimeSignal.from_confidence(self.confidence())

    def _smooth(self, tr: float, plus_dm: float, minus_dm: float) -> None:
        # Wilder: smoothed = smoothed - smoothed / P + current
        n = self.config.period
        self._smoothed_tr = self._smoothed_tr - self._smoothed_tr / n + tr
        self._smoothed_plus_dm = self._smoothed_plus_dm - self._smoothed_plus_dm / n + plus_dm
        self._smoothed_minus_dm = self._smoothed_minus_dm - self._smoothed_minus_dm / n + minus_dm

    def _maybe_seed_adx(self) -> None:
        if self._bars != self.config.warmup_periods:
            return
        self._adx = float(np.mean(self._dx_buffer))
        self._dx_buffer.clear()
        self._phase = WilderPhase.SMOOTHING
        self.gate.update(self._adx)
        logger.debug("[ADX] Warm-up complete after %d bars, adx=%.2f", self._bars, self._adx)

    def _update_di(self) -> None:
        if self._smoothed_tr > 0:
            self._plus_di = min(100.0, 100.0 * self._smoothed_plus_dm / self._smoothed_tr)
            self._minus_di = min(100.0, 100.0 * self._smoothed_minus_dm / self._smoothed_tr)
        else:
            self._plus_di = 0.0
            self._minus_di = 0.0

    def _dx(self) -> float:
        di_sum = self._plus_di + self._minus_di
        if di_sum <= 0:
            return 0.0
        return 100.0 * abs(self._plus_di - self._minus_di) / di_sum

    def _result(self, dx: float) -> AdxResult:
        valid = self.is_valid()
        return AdxResult(
            plus_di=self._plus_di,
            minus_di=self._minus_di,
            adx=self._adx if valid else 0.0,
            dx=dx,
            is_valid=valid,
        )

    # Classification

    def regime(self) -> TrendRegime:
        if not self.is_valid():
            return TrendRegime.UNKNOWN
        return TrendRegime.from_adx(self._adx)

    def direction(self) -> TrendDirection:
        if self._plus_di > self._minus_di:
            return TrendDirection.BULLISH
        if self._minus_di > self._plus_di:
            return TrendDirection.BEARISH
        return TrendDirection.NEUTRAL

    def confidence(self) -> float:
        """Mean-reversion confidence; falls as trend strength rises."""
        adx = self._adx
        if adx < 15.0:
            return 0.95
        elif adx < 20.0:
            return 0.80
        elif adx < 25.0:
            return 0.50
        elif adx < 30.0:
            return 0.25
        return 0.10

    def position_multiplier(self) -> float:
        """Mean-reversion sizing: weak trend -> full size, strong trend -> flat."""
        adx = self._adx
        if adx < 15.0:
            return 1.0
        elif adx < 20.0:
            return 0.8
        elif adx < 25.0:
            return 0.5
        elif adx < 30.0:
            return 0.2
        return 0.0
