"""Signal definitions."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class LaunchSignal(Enum):
    """Decisions published by the launch sniper."""
    ENTER = "enter"
    HOLD = "hold"
    TAKE_PROFIT = "take_profit"
    STOP_LOSS = "stop_loss"
    TIME_STOP = "time_stop"
    MOMENTUM_FADE = "momentum_fade"

    @property
    def is_exit(self) -> bool:
        return self in (
            LaunchSignal.TAKE_PROFIT,
            LaunchSignal.STOP_LOSS,
            LaunchSignal.TIME_STOP,
            LaunchSignal.MOMENTUM_FADE,
        )


class MomentumKind(Enum):
    BULLISH = "bullish_momentum"
    BEARISH = "bearish_momentum"  # Long-only strategies ignore this
    TREND_EXPIRING = "trend_expiring"
    NONE = "no_signal"


@dataclass(frozen=True)
class MomentumSignal:
    """Output of the momentum filter for one bar."""
    kind: MomentumKind = MomentumKind.NONE
    adx: Optional[float] = None
    plus_di: Optional[float] = None
    minus_di: Optional[float] = None

    @classmethod
    def none(cls) -> "MomentumSignal":
        return cls()

    @property
    def is_bullish_entry(self) -> bool:
        return self.kind == MomentumKind.BULLISH

    @property
    def is_trend_dying(self) -> bool:
        return self.kind == MomentumKind.TREND_EXPIRING

    @property
    def is_none(self) -> bool:
        return self.kind == MomentumKind.NONE
