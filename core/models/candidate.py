"""Graduation candidates tracked ahead of a bonding-curve graduation."""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Deque, Optional

from core.helpers.validation import safe_divide

MAX_HISTORY_POINTS = 100


@dataclass(frozen=True)
class BondingCurvePoint:
    """One observation of a candidate's bonding curve."""
    mono: float            # Monotonic seconds, for rate calculations
    observed_at: datetime  # Wall time, for snapshots
    percent_filled: float  # 0.0-1.0
    price: float
    holder_count: int

    def to_dict(self) -> dict:
        return {
            "observed_at": self.observed_at.isoformat(),
            "percent_filled": self.percent_filled,
            "price": self.price,
            "holder_count": self.holder_count,
        }


@dataclass
class GraduationCandidate:
    """A token under evaluation.

    Monotonic fields (``*_mono``) drive ages and rates; wall fields (``*_at``)
    are only for reporting and persistence.
    """
    identifier: str
    symbol: str
    first_seen_mono: float
    first_seen_at: datetime
    last_updated_mono: float = 0.0
    token_created_at: Optional[datetime] = None
    holder_count: int = 0
    creator_holding_pct: float = 1.0  # Worst case until told otherwise
    liquidity: float = 0.0
    passed_safety: bool = False
    safety_failure_reason: Optional[str] = None
    history: Deque[BondingCurvePoint] = field(
        default_factory=lambda: deque(maxlen=MAX_HISTORY_POINTS)
    )

    def __post_init__(self):
        if not self.last_updated_mono:
            self.last_updated_mono = self.first_seen_mono

    def record_point(self, point: BondingCurvePoint) -> None:
        # deque(maxlen) evicts the oldest point once the cap is hit
        self.history.append(point)
        self.holder_count = point.holder_count
        self.last_updated_mono = point.mono

    @property
    def safety_evaluated(self) -> bool:
        return self.passed_safety or self.safety_failure_reason is not None

    @property
    def current_bonding_pct(self) -> Optional[float]:
        return self.history[-1].percent_filled if self.history else None

    @property
    def current_price(self) -> Optional[float]:
        return self.history[-1].price if self.history else None

    def _rate(self, attr: str, min_window_minutes: float) -> Optional[float]:
        if len(self.history) < 2:
            return None
        first = self.history[0]
        last = self.history[-1]
        elapsed_minutes = (last.mono - first.mono) / 60.0
        if elapsed_minutes < min_window_minutes:
            return None
        change = float(getattr(last, attr)) - float(getattr(first, attr))
        return safe_divide(change, elapsed_minutes)

    def fill_rate_per_minute(self, min_window_minutes: float) -> Optional[float]:
        """Bonding fill fraction per minute between first and last point."""
        return self._rate("percent_filled", min_window_minutes)

    def holder_growth_rate(self, min_window_minutes: float) -> Optional[float]:
        """Holders gained per minute between first and last point."""
        return self._rate("holder_count", min_window_minutes)

    def age_minutes(self, now_mono: float) -> float:
        """Minutes since we started tracking."""
        return max(0.0, now_mono - self.first_seen_mono) / 60.0

    def to_dict(self) -> dict:
        return {
            "identifier": self.identifier,
            "symbol": self.symbol,
            "first_seen_at": self.first_seen_at.isoformat(),
            "token_created_at": self.token_created_at.isoformat() if self.token_created_at else None,
            "holder_count": self.holder_count,
            "creator_holding_pct": self.creator_holding_pct,
            "liquidity": self.liquidity,
            "safety_evaluated": self.safety_evaluated,
            "passed_safety": self.passed_safety,
            "safety_failure_reason": self.safety_failure_reason,
            "history": [p.to_dict() for p in self.history],
        }
