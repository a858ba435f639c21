"""Exit evaluation for open snipe positions.

Checks run in priority order: take profit, stop loss, time stop, momentum
fade, then the optional trend-expiry exit.
"""

from dataclasses import dataclass
from typing import Optional

from core.config import SniperConfig
from core.helpers import ExitReason
from core.models import LaunchSignal, MomentumSignal, SniperPosition

# Absorbs float rounding so a move of exactly the threshold triggers it
PNL_TOLERANCE = 1e-9


@dataclass
class ExitDecision:
    """Result of exit check."""
    signal: LaunchSignal
    reason: ExitReason = ExitReason.NONE
    detail: str = ""

    @property
    def should_exit(self) -> bool:
        return self.signal.is_exit


def is_momentum_fade(position: SniperPosition, config: SniperConfig) -> bool:
    """Peak was far enough above entry and too much of that gain is gone."""
    if position.peak_gain_fraction < config.fade_min_gain - PNL_TOLERANCE:
        return False
    giveback = position.giveback_fraction
    return giveback is not None and giveback > config.fade_giveback


def evaluate_exit(
    position: SniperPosition,
    config: SniperConfig,
    now_mono: float,
    momentum: Optional[MomentumSignal] = None,
) -> ExitDecision:
    pnl = position.pnl_fraction

    if pnl >= config.take_profit_pct - PNL_TOLERANCE:
        return ExitDecision(
            LaunchSignal.TAKE_PROFIT, ExitReason.TAKE_PROFIT, f"pnl {pnl:+.1%}"
        )

    if pnl <= -config.stop_loss_pct + PNL_TOLERANCE:
        return ExitDecision(
            LaunchSignal.STOP_LOSS, ExitReason.STOP_LOSS, f"pnl {pnl:+.1%}"
        )

    age = position.age_minutes(now_mono)
    if age >= config.max_hold_minutes:
        return ExitDecision(
            LaunchSignal.TIME_STOP, ExitReason.TIME_STOP, f"held {age:.1f}m"
        )

    if is_momentum_fade(position, config):
        return ExitDecision(
            LaunchSignal.MOMENTUM_FADE,
            ExitReason.MOMENTUM_FADE,
            f"gave back {position.giveback_fraction:.0%} of peak gain",
        )

    # Trend expiry maps onto the fade signal; the reason keeps them apart
    if config.exit_on_trend_expiry and momentum is not None and momentum.is_trend_dying:
        return ExitDecision(
            LaunchSignal.MOMENTUM_FADE, ExitReason.TREND_EXPIRED, f"adx {momentum.adx}"
        )

    return ExitDecision(LaunchSignal.HOLD)
