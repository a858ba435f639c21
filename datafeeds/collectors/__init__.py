"""Collectors for streaming market data."""

from datafeeds.collectors.candle_aggregator import CandleAggregator

__all__ = [
    "CandleAggregator",
]
