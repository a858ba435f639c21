"""Momentum filter tests: confirmation bars, trend expiry, sizing."""

import pytest

from conftest import falling_candles, flat_candles, make_candle, rising_candles
from core.errors import ConfigError
from core.models import MomentumKind
from logic.momentum import GATE_BUFFER, MomentumConfig, MomentumFilter
from logic.regime import AdxResult, TrendDirection


class ScriptedIndicator:
    """Stands in for the trend indicator with pre-baked (adx, +DI, -DI) readings."""

    def __init__(self, readings):
        self.readings = list(readings)
        self.adx = 0.0
        self.plus_di = 0.0
        self.minus_di = 0.0
        self._valid = False

    def update_candle(self, candle):
        self.adx, self.plus_di, self.minus_di = self.readings.pop(0)
        self._valid = True
        return AdxResult(
            plus_di=self.plus_di, minus_di=self.minus_di, adx=self.adx, dx=self.adx, is_valid=True
        )

    def is_valid(self):
        return self._valid

    def direction(self):
        if self.plus_di > self.minus_di:
            return TrendDirection.BULLISH
        if self.minus_di > self.plus_di:
            return TrendDirection.BEARISH
        return TrendDirection.NEUTRAL

    def reset(self):
        self._valid = False


def scripted_filter(readings, **config):
    filt = MomentumFilter(MomentumConfig(period=3, **config))
    filt.indicator = ScriptedIndicator(readings)
    return filt


def feed(filt, count):
    candle = make_candle(1, 2, 0.5, 1.5)
    return [filt.update(candle) for _ in range(count)]


class TestMomentumConfig:

    def test_defaults(self):
        config = MomentumConfig()
        assert config.period == 14
        assert config.entry_threshold == 25.0
        assert config.exit_threshold == 20.0
        assert config.min_confirmation_bars == 2

    def test_meme_optimized(self):
        assert MomentumConfig.meme_optimized().period == 10

    def test_wrapped_indicator_thresholds(self):
        adx_config = MomentumConfig().adx_config()
        assert adx_config.ranging_threshold == 20.0
        assert adx_config.trending_threshold == 25.0
        assert adx_config.entry_threshold == 20.0
        assert adx_config.exit_threshold == 25.0 + GATE_BUFFER

    def test_validate(self):
        with pytest.raises(ConfigError):
            MomentumConfig(entry_threshold=15.0, exit_threshold=20.0).validate()
        with pytest.raises(ConfigError):
            MomentumConfig(min_confirmation_bars=0).validate()


class TestMomentumFilter:

    def test_no_signal_during_warmup(self):
        filt = MomentumFilter(MomentumConfig(period=3))
        for candle in rising_candles(4):
            assert filt.update(candle).is_none
        assert not filt.is_valid()

    def test_bullish_after_confirmation_bars(self):
        filt = MomentumFilter(MomentumConfig(period=3))
        signals = [filt.update(c) for c in rising_candles(6)]
        # Bar 5 is the first valid bar and only counts one confirmation
        assert signals[4].is_none
        assert signals[5].kind == MomentumKind.BULLISH
        assert signals[5].is_bullish_entry
        assert signals[5].plus_di > signals[5].minus_di
        entry = filt.check_entry_signal()
        assert entry is not None and entry.is_bullish_entry

    def test_bearish_after_confirmation_bars(self):
        filt = MomentumFilter(MomentumConfig(period=3))
        signals = [filt.update(c) for c in falling_candles(6)]
        assert signals[5].kind == MomentumKind.BEARISH
        assert filt.direction() == TrendDirection.BEARISH
        # Long-only entry check ignores bearish momentum
        assert filt.check_entry_signal() is None

    def test_flat_market_gives_no_signal(self):
        filt = MomentumFilter(MomentumConfig(period=3))
        signals = [filt.update(c) for c in flat_candles(10)]
        assert all(s.is_none for s in signals)

    def test_trend_expiring_after_confirmed_trend(self):
        filt = scripted_filter([(30, 40, 10), (30, 40, 10), (15, 20, 18), (15, 20, 18)])
        signals = feed(filt, 4)
        assert signals[1].kind == MomentumKind.BULLISH
        assert signals[2].kind == MomentumKind.TREND_EXPIRING
        assert signals[2].is_trend_dying
        assert signals[2].adx == 15
        # Fires once; the filter is no longer trending
        assert signals[3].is_none

    def test_trend_expiring_outranks_direction(self):
        filt = scripted_filter([(30, 10, 40), (30, 10, 40), (10, 5, 40)])
        signals = feed(filt, 3)
        assert signals[1].kind == MomentumKind.BEARISH
        assert signals[2].kind == MomentumKind.TREND_EXPIRING

    def test_no_expiry_without_prior_trend_state(self):
        # Transition band first, so the drop below exit is not an expiry
        filt = scripted_filter([(30, 40, 10), (22, 40, 10), (15, 40, 10)])
        signals = feed(filt, 3)
        assert signals[1].is_none
        assert signals[2].is_none

    def test_counters_reset_below_entry_threshold(self):
        filt = scripted_filter([(30, 40, 10), (22, 40, 10), (30, 40, 10), (30, 40, 10)])
        signals = feed(filt, 4)
        assert filt.bullish_bars == 2
        assert signals[2].is_none
        assert signals[3].kind == MomentumKind.BULLISH

    def test_direction_flip_resets_opposite_counter(self):
        filt = scripted_filter([(30, 40, 10), (30, 10, 40), (30, 40, 10)])
        feed(filt, 3)
        assert filt.bullish_bars == 1
        assert filt.bearish_bars == 0

    def test_neutral_direction_resets_both(self):
        filt = scripted_filter([(30, 40, 10), (30, 25, 25)])
        feed(filt, 2)
        assert filt.bullish_bars == 0
        assert filt.bearish_bars == 0

    def test_is_decaying(self):
        filt = scripted_filter([(40, 40, 10), (35, 40, 10), (45, 40, 10)])
        feed(filt, 1)
        assert not filt.is_decaying()
        feed(filt, 1)
        assert filt.is_decaying()
        feed(filt, 1)
        assert not filt.is_decaying()

    def test_not_decaying_below_exit(self):
        filt = scripted_filter([(25, 40, 10), (18, 40, 10)])
        feed(filt, 2)
        assert not filt.is_decaying()

    def test_check_exit_signal(self):
        filt = scripted_filter([(30, 40, 10), (12, 40, 10)])
        feed(filt, 1)
        assert filt.check_exit_signal() is None
        feed(filt, 1)
        assert filt.check_exit_signal().is_trend_dying

    @pytest.mark.parametrize(
        "adx, expected",
        [(15, 0.0), (22, 0.3), (30, 0.7), (40, 1.0), (50, 0.8)],
    )
    def test_position_multiplier(self, adx, expected):
        filt = scripted_filter([(adx, 40, 10)])
        feed(filt, 1)
        assert filt.position_multiplier() == expected

    def test_reset(self):
        filt = MomentumFilter(MomentumConfig(period=3))
        for candle in rising_candles(8):
            filt.update(candle)
        filt.reset()
        assert not filt.is_valid()
        assert filt.bullish_bars == 0
        assert filt.prev_trend is None
        assert filt.last_trend is None
        assert not filt.was_trending
