"""Tick-to-candle aggregation tests."""

from datetime import datetime, timezone

import pytest

from core.clock import ManualClock
from datafeeds.collectors import CandleAggregator


class TestCandleAggregator:

    def test_first_tick_never_returns_candle(self, clock):
        agg = CandleAggregator(60, clock)
        assert agg.update(100.0) is None
        assert agg.is_building

    def test_accumulates_within_period(self, clock):
        agg = CandleAggregator(60, clock)
        agg.update(100.0)
        clock.advance(10)
        assert agg.update(105.0) is None
        clock.advance(10)
        assert agg.update(95.0) is None
        clock.advance(10)
        assert agg.update(101.0) is None
        assert agg.current_duration() == pytest.approx(30.0)

    def test_rollover_returns_completed_candle(self, clock):
        agg = CandleAggregator(60, clock)
        agg.update(100.0)
        clock.advance(20)
        agg.update(110.0)
        clock.advance(20)
        agg.update(90.0)
        clock.advance(19)
        assert agg.update(102.0) is None
        clock.advance(1)

        candle = agg.update(103.0)
        assert candle is not None
        assert candle.open == 100.0
        assert candle.high == 110.0
        assert candle.low == 90.0
        assert candle.close == 102.0
        assert candle.volume == 4.0

        # New bar is seeded with the rollover tick
        clock.advance(60)
        next_candle = agg.update(104.0)
        assert next_candle.open == 103.0
        assert next_candle.volume == 1.0

    def test_tick_at_exact_period_closes_bar(self, clock):
        agg = CandleAggregator(60, clock)
        agg.update(100.0)
        clock.advance(59)
        assert agg.update(101.0) is None
        clock.advance(1)
        candle = agg.update(102.0)
        assert candle is not None
        assert candle.close == 101.0
        assert candle.volume == 2.0
        assert agg.current_duration() == 0.0

    def test_candle_timestamp_is_bar_open_wall_time(self):
        start = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        clock = ManualClock(start=start)
        agg = CandleAggregator(60, clock)
        agg.update(1.0)
        clock.advance(61)
        candle = agg.update(2.0)
        assert candle.timestamp == start

    def test_high_low_bound_open_close(self, clock):
        agg = CandleAggregator(5, clock)
        prices = [10.0, 12.5, 9.0, 11.0, 8.5, 13.0, 10.2, 10.1, 14.0, 7.0, 9.9]
        candles = []
        for price in prices:
            candle = agg.update(price)
            if candle is not None:
                candles.append(candle)
            clock.advance(2)
        assert candles
        for candle in candles:
            assert candle.high >= max(candle.open, candle.close)
            assert candle.low <= min(candle.open, candle.close)

    def test_force_close_returns_in_progress(self, clock):
        agg = CandleAggregator(300, clock)
        assert agg.force_close() is None
        agg.update(50.0)
        agg.update(55.0)
        candle = agg.force_close()
        assert candle is not None
        assert candle.open == 50.0
        assert candle.close == 55.0
        assert candle.volume == 2.0
        assert not agg.is_building
        assert agg.force_close() is None

    def test_reset_discards_state(self, clock):
        agg = CandleAggregator(60, clock)
        agg.update(100.0)
        agg.reset()
        assert not agg.is_building
        assert agg.current_duration() is None
        assert agg.update(200.0) is None

    def test_zero_period_closes_every_tick(self, clock):
        agg = CandleAggregator(0, clock)
        assert agg.update(1.0) is None
        assert agg.update(2.0).close == 1.0
        assert agg.update(3.0).close == 2.0

    def test_presets(self, clock):
        assert CandleAggregator.one_minute(clock).period == 60
        assert CandleAggregator.five_minute(clock).period == 300
