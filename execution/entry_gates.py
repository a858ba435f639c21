"""Entry gate checks for launch candidates.

Gates run in a fixed order and stop at the first failure so the reported
reason is always the most fundamental one: account-level limits first,
then candidate-level state, then market metrics.
"""

from dataclasses import dataclass
from typing import Mapping, Optional, TYPE_CHECKING

from core.config import SniperConfig
from core.helpers import GateReason
from core.logging_utils import get_logger
from core.models import GraduationCandidate, MomentumSignal, SniperPosition

if TYPE_CHECKING:
    from execution.risk import DailyRiskCounters, EntryCooldown

logger = get_logger(__name__)


@dataclass
class GateResult:
    """Result of gate check."""
    passed: bool
    reason: str = ""
    gate: GateReason = GateReason.OK
    details: dict = None

    def __post_init__(self):
        if self.details is None:
            self.details = {}


class EntryGateChecker:
    """Validates a candidate against every entry gate."""

    def __init__(
        self,
        config: SniperConfig,
        daily: "DailyRiskCounters",
        cooldown: "EntryCooldown",
        positions: Mapping[str, SniperPosition],
    ):
        self.config = config
        self.daily = daily
        self.cooldown = cooldown
        self.positions = positions

    def check_all_gates(
        self,
        candidate: GraduationCandidate,
        now_mono: float,
        momentum: Optional[MomentumSignal] = None,
    ) -> GateResult:
        """
        Run all gate checks on a candidate.

        Returns:
            GateResult with passed=True only when every gate passes.
        """
        for check in (
            lambda: self._check_cooldown(now_mono),
            self._check_daily_entries,
            self._check_daily_loss,
            self._check_position_slots,
            lambda: self._check_existing_position(candidate),
            lambda: self._check_safety(candidate),
            lambda: self._check_bonding(candidate),
            lambda: self._check_velocity(candidate),
            lambda: self._check_momentum(momentum),
        ):
            result = check()
            if result is not None:
                return result
        return GateResult(True, "all gates passed", GateReason.OK)

    # Gate 1: cooldown since the last confirmed entry
    def _check_cooldown(self, now_mono: float) -> Optional[GateResult]:
        if self.cooldown.is_active(now_mono):
            remaining = self.cooldown.remaining(now_mono)
            return GateResult(
                False, f"cooldown {remaining:.0f}s remaining", GateReason.COOLDOWN,
                {"remaining_seconds": remaining},
            )
        return None

    # Gate 2-3: daily limits
    def _check_daily_entries(self) -> Optional[GateResult]:
        if self.daily.entry_cap_reached(self.config):
            return GateResult(
                False,
                f"daily entries {self.daily.entries}/{self.config.max_daily_entries}",
                GateReason.DAILY_ENTRIES,
            )
        return None

    def _check_daily_loss(self) -> Optional[GateResult]:
        if self.daily.loss_cap_reached(self.config):
            return GateResult(
                False,
                f"daily pnl {self.daily.realized_pnl:.2f} <= -{self.config.max_daily_loss:.2f}",
                GateReason.DAILY_LOSS,
            )
        return None

    # Gate 4-5: position slots
    def _check_position_slots(self) -> Optional[GateResult]:
        if len(self.positions) >= self.config.max_concurrent_positions:
            return GateResult(
                False,
                f"max {self.config.max_concurrent_positions} positions open",
                GateReason.MAX_POSITIONS,
            )
        return None

    def _check_existing_position(self, candidate: GraduationCandidate) -> Optional[GateResult]:
        if candidate.identifier in self.positions:
            return GateResult(False, "position already open", GateReason.ALREADY_OPEN)
        return None

    # Gate 6: safety verdict from the last update
    def _check_safety(self, candidate: GraduationCandidate) -> Optional[GateResult]:
        if not candidate.passed_safety:
            reason = candidate.safety_failure_reason or "safety not evaluated"
            return GateResult(False, reason, GateReason.SAFETY)
        return None

    # Gate 7-8: bonding curve window
    def _check_bonding(self, candidate: GraduationCandidate) -> Optional[GateResult]:
        bonding = candidate.current_bonding_pct
        if bonding is None:
            return GateResult(False, "no bonding data", GateReason.NO_DATA)
        if bonding < self.config.min_bonding_pct:
            return GateResult(
                False, f"bonding {bonding:.1%} < {self.config.min_bonding_pct:.1%}",
                GateReason.BONDING_LOW, {"bonding_pct": bonding},
            )
        if bonding > self.config.max_bonding_pct:
            return GateResult(
                False, f"bonding {bonding:.1%} > {self.config.max_bonding_pct:.1%}",
                GateReason.BONDING_HIGH, {"bonding_pct": bonding},
            )
        return None

    # Gate 9-10: velocity. An undefined rate never blocks.
    def _check_velocity(self, candidate: GraduationCandidate) -> Optional[GateResult]:
        window = self.config.min_rate_window_minutes

        min_fill = self.config.min_fill_rate_per_minute
        if min_fill is not None:
            fill_rate = candidate.fill_rate_per_minute(window)
            if fill_rate is not None and fill_rate < min_fill:
                return GateResult(
                    False, f"fill rate {fill_rate:.4f}/min < {min_fill:.4f}",
                    GateReason.FILL_RATE, {"fill_rate": fill_rate},
                )

        min_growth = self.config.min_holder_growth_rate
        if min_growth is not None:
            holder_rate = candidate.holder_growth_rate(window)
            if holder_rate is not None and holder_rate < min_growth:
                return GateResult(
                    False, f"holder growth {holder_rate:.2f}/min < {min_growth:.2f}",
                    GateReason.HOLDER_GROWTH, {"holder_rate": holder_rate},
                )
        return None

    # Gate 11: optional momentum confirmation
    def _check_momentum(self, momentum: Optional[MomentumSignal]) -> Optional[GateResult]:
        if not self.config.require_bullish_momentum:
            return None
        if momentum is None or not momentum.is_bullish_entry:
            kind = momentum.kind.value if momentum is not None else "none"
            return GateResult(False, f"momentum {kind}", GateReason.MOMENTUM)
        return None
