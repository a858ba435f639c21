"""Open launch-snipe position."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.helpers.validation import EPSILON, safe_divide


@dataclass
class SniperPosition:
    """Position opened after a confirmed entry.

    ``entry_mono`` times the hold; ``entry_time`` is the wall timestamp for
    reporting. Long-only.
    """
    identifier: str
    symbol: str
    entry_price: float
    size: float              # Base units received
    entry_value: float       # Quote value spent
    entry_mono: float
    entry_time: datetime
    entry_bonding_pct: float = 0.0
    highest_price: float = 0.0
    current_price: float = 0.0

    def __post_init__(self):
        if self.highest_price <= 0:
            self.highest_price = self.entry_price
        if self.current_price <= 0:
            self.current_price = self.entry_price

    def update_price(self, price: float) -> None:
        self.current_price = price
        if price > self.highest_price:
            self.highest_price = price

    @property
    def pnl_fraction(self) -> float:
        """Unrealized P&L as a fraction of entry; 0.0 on a degenerate entry price."""
        value = safe_divide(self.current_price - self.entry_price, self.entry_price)
        return value if value is not None else 0.0

    @property
    def drawdown_fraction(self) -> float:
        """Drop from the running peak as a fraction of the peak."""
        value = safe_divide(self.highest_price - self.current_price, self.highest_price)
        return value if value is not None else 0.0

    @property
    def peak_gain_fraction(self) -> float:
        value = safe_divide(self.highest_price - self.entry_price, self.entry_price)
        return value if value is not None else 0.0

    @property
    def giveback_fraction(self) -> Optional[float]:
        """Share of the peak-to-entry gain given back since the peak."""
        gain = self.highest_price - self.entry_price
        if gain <= 0:
            return None
        return safe_divide(self.highest_price - self.current_price, gain)

    def has_valid_prices(self) -> bool:
        return (
            self.entry_price > EPSILON
            and self.current_price >= 0.0
            and self.highest_price >= self.entry_price
        )

    def age_minutes(self, now_mono: float) -> float:
        return max(0.0, now_mono - self.entry_mono) / 60.0

    def to_dict(self) -> dict:
        return {
            "identifier": self.identifier,
            "symbol": self.symbol,
            "entry_price": self.entry_price,
            "size": self.size,
            "entry_value": self.entry_value,
            "entry_time": self.entry_time.isoformat(),
            "entry_bonding_pct": self.entry_bonding_pct,
            "highest_price": self.highest_price,
            "current_price": self.current_price,
        }
