import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from core.clock import ManualClock  # noqa: E402
from core.config import SniperConfig  # noqa: E402
from core.models import Candle  # noqa: E402


@pytest.fixture
def clock():
    """Manual clock starting at 2024-01-01 UTC, monotonic 0."""
    return ManualClock()


@pytest.fixture
def sniper_config():
    """Loose safety gates and no velocity or cooldown requirements."""
    return SniperConfig(
        min_unique_holders=50,
        max_creator_holding_pct=0.05,
        min_liquidity=10.0,
        min_fill_rate_per_minute=None,
        min_holder_growth_rate=None,
        cooldown_seconds=0,
    )


def make_candle(open_: float, high: float, low: float, close: float) -> Candle:
    return Candle(open=open_, high=high, low=low, close=close, volume=1.0)


def rising_candles(count: int, start: float = 100.0, step: float = 1.0):
    """Steady uptrend: every bar makes a higher high and higher low."""
    candles = []
    price = start
    for _ in range(count):
        candles.append(make_candle(price, price + step * 1.5, price - step * 0.2, price + step))
        price += step
    return candles


def falling_candles(count: int, start: float = 200.0, step: float = 1.0):
    candles = []
    price = start
    for _ in range(count):
        candles.append(make_candle(price, price + step * 0.2, price - step * 1.5, price - step))
        price -= step
    return candles


def flat_candles(count: int, price: float = 100.0, width: float = 1.0):
    """Identical bars: no directional movement after the first."""
    return [make_candle(price, price + width, price - width, price) for _ in range(count)]
