"""Risk management components - daily counters and entry cooldown."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.config import SniperConfig
from core.logging_utils import get_logger

logger = get_logger(__name__)


@dataclass
class DailyRiskCounters:
    """Per-day entry count and realized P&L. Reset is triggered by the caller."""
    entries: int = 0
    realized_pnl: float = 0.0
    wins: int = 0
    losses: int = 0
    last_reset_at: Optional[datetime] = None  # Wall time, reporting only

    def entry_cap_reached(self, config: SniperConfig) -> bool:
        return self.entries >= config.max_daily_entries

    def loss_cap_reached(self, config: SniperConfig) -> bool:
        return self.realized_pnl <= -config.max_daily_loss

    def can_trade(self, config: SniperConfig) -> bool:
        return not (self.entry_cap_reached(config) or self.loss_cap_reached(config))

    def record_entry(self) -> None:
        self.entries += 1

    def record_exit(self, pnl: float) -> None:
        self.realized_pnl += pnl
        if pnl > 0:
            self.wins += 1
        elif pnl < 0:
            # Breakeven counts toward neither
            self.losses += 1

    def reset(self, now: datetime) -> None:
        logger.info(
            "[RISK] Daily reset (entries=%d, pnl=%.2f)", self.entries, self.realized_pnl
        )
        self.entries = 0
        self.realized_pnl = 0.0
        self.wins = 0
        self.losses = 0
        self.last_reset_at = now

    def to_dict(self) -> dict:
        return {
            "entries": self.entries,
            "realized_pnl": self.realized_pnl,
            "wins": self.wins,
            "losses": self.losses,
            "last_reset_at": self.last_reset_at.isoformat() if self.last_reset_at else None,
        }


class EntryCooldown:
    """Minimum interval between successive entries, on the monotonic clock."""

    def __init__(self, seconds: float):
        self.seconds = seconds
        self.last_entry_mono: Optional[float] = None

    def start(self, now_mono: float) -> None:
        self.last_entry_mono = now_mono

    def remaining(self, now_mono: float) -> float:
        if self.last_entry_mono is None:
            return 0.0
        elapsed = now_mono - self.last_entry_mono
        return max(0.0, self.seconds - elapsed)

    def is_active(self, now_mono: float) -> bool:
        return self.remaining(now_mono) > 0.0
