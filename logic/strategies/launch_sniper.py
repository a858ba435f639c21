"""
Launch sniper: graduation candidate and position state machine.

Tracks tokens approaching bonding-curve graduation, gates entries on safety,
bonding window, velocity and daily risk limits, and manages a small number
of open positions through take-profit, stop-loss, time-stop and fade exits.

Lifecycle per identifier:
    tracked -> safety-evaluated -> entry-eligible -> position-open -> closed

Everything is driven by caller updates. There is no timer thread and no
locking: the caller owns an instance exclusively. Decisions are published
on the optional DecisionBus for an external executor, which reports fills
back through confirm_entry / confirm_exit.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from core.clock import Clock, system_clock
from core.config import SniperConfig
from core.errors import CandidateNotFoundError, ClockSkewError, ConfigError, InputValidationError
from core.events import DecisionBus, DecisionEvent
from core.helpers import GateReason, require_count, require_fraction, require_non_negative
from core.helpers.validation import safe_divide
from core.logging_utils import get_logger
from core.models import (
    BondingCurvePoint,
    GraduationCandidate,
    LaunchSignal,
    MomentumSignal,
    SniperPosition,
)
from execution.entry_gates import EntryGateChecker, GateResult
from execution.exit_manager import ExitDecision, evaluate_exit
from execution.risk import DailyRiskCounters, EntryCooldown
from logic.safety import check_safety

logger = get_logger(__name__)

NOT_TRACKED = GateResult(False, "candidate not tracked", GateReason.NOT_TRACKED)


class LaunchSniperStrategy:
    """Candidate tracking, entry gating and position lifecycle for launch snipes."""

    strategy_id = "launch_sniper"

    def __init__(
        self,
        config: Optional[SniperConfig] = None,
        clock: Optional[Clock] = None,
        bus: Optional[DecisionBus] = None,
    ):
        self.config = config or SniperConfig()
        self.config.validate()
        self.clock = clock or system_clock
        self.bus = bus

        self.candidates: Dict[str, GraduationCandidate] = {}
        self.positions: Dict[str, SniperPosition] = {}
        self.daily = DailyRiskCounters(last_reset_at=self.clock.now())
        self.cooldown = EntryCooldown(self.config.cooldown_seconds)
        self.gates = EntryGateChecker(self.config, self.daily, self.cooldown, self.positions)

        self._momentum: Dict[str, MomentumSignal] = {}
        self._last_gate: Dict[str, GateResult] = {}
        self._pending_exit: Dict[str, LaunchSignal] = {}

    # ------------------------------------------------------------------
    # Candidates
    # ------------------------------------------------------------------

    def track_candidate(self, identifier: str, symbol: str) -> bool:
        """Start tracking. Returns False if already tracked (no-op)."""
        if identifier in self.candidates:
            return False
        self.candidates[identifier] = GraduationCandidate(
            identifier=identifier,
            symbol=symbol,
            first_seen_mono=self.clock.monotonic(),
            first_seen_at=self.clock.now(),
        )
        logger.info("[SNIPER] Tracking %s (%s)", symbol, identifier)
        return True

    def untrack_candidate(self, identifier: str) -> bool:
        """Stop tracking. An open position for the same identifier is left alone."""
        candidate = self.candidates.pop(identifier, None)
        self._last_gate.pop(identifier, None)
        if identifier not in self.positions:
            self._momentum.pop(identifier, None)
        if candidate is None:
            return False
        logger.info("[SNIPER] Untracked %s (%s)", candidate.symbol, identifier)
        return True

    def update_candidate(
        self,
        identifier: str,
        percent_filled: float,
        price: float,
        holder_count: int,
        creator_holding_pct: float,
        liquidity: float,
    ) -> None:
        """Record a metric update and re-run safety checks.

        Every input is validated before anything is mutated, so a rejected
        update leaves the candidate exactly as it was.

        Raises:
            CandidateNotFoundError: identifier is not tracked.
            InputValidationError: a value is out of range or not finite.
        """
        candidate = self.candidates.get(identifier)
        if candidate is None:
            raise CandidateNotFoundError(identifier)

        try:
            percent_filled = require_fraction("percent_filled", percent_filled)
            price = require_non_negative("price", price)
            holder_count = require_count("holder_count", holder_count)
            creator_holding_pct = require_fraction("creator_holding_pct", creator_holding_pct)
            liquidity = require_non_negative("liquidity", liquidity)
        except InputValidationError as e:
            logger.warning("[SNIPER] Rejected update for %s: %s", candidate.symbol, e)
            raise

        candidate.record_point(BondingCurvePoint(
            mono=self.clock.monotonic(),
            observed_at=self.clock.now(),
            percent_filled=percent_filled,
            price=price,
            holder_count=holder_count,
        ))
        candidate.creator_holding_pct = creator_holding_pct
        candidate.liquidity = liquidity
        self._run_safety(candidate)

        logger.debug(
            "[SNIPER] %s bonding=%.1f%% price=%.8f holders=%d creator=%.1f%% liq=%.2f",
            candidate.symbol, percent_filled * 100, price, holder_count,
            creator_holding_pct * 100, liquidity,
        )

    def set_token_created_at(self, identifier: str, created_at: datetime) -> None:
        """Attach the token's creation time, used by the max-age safety rule.

        Raises:
            CandidateNotFoundError: identifier is not tracked.
            ClockSkewError: timestamp is further in the future than the allowed skew.
        """
        candidate = self.candidates.get(identifier)
        if candidate is None:
            raise CandidateNotFoundError(identifier)
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)

        ahead = (created_at - self.clock.now()).total_seconds()
        if ahead > self.config.max_clock_skew_seconds:
            raise ClockSkewError(
                "token_created_at",
                f"{ahead:.0f}s in the future (max skew {self.config.max_clock_skew_seconds:.0f}s)",
            )

        candidate.token_created_at = created_at
        if candidate.history:
            self._run_safety(candidate)

    def _run_safety(self, candidate: GraduationCandidate) -> None:
        was_passed = candidate.passed_safety
        passed, reason = check_safety(candidate, self.config, self.clock.now())
        candidate.passed_safety = passed
        candidate.safety_failure_reason = None if passed else reason
        if passed != was_passed:
            logger.debug(
                "[SAFETY] %s %s%s",
                candidate.symbol,
                "passed" if passed else "failed",
                "" if passed else f": {reason}",
            )

    def update_momentum(self, identifier: str, signal: MomentumSignal) -> None:
        """Latest momentum reading for a candidate or open position."""
        if identifier not in self.candidates and identifier not in self.positions:
            raise CandidateNotFoundError(identifier)
        self._momentum[identifier] = signal

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    def evaluate_entry(self, identifier: str) -> LaunchSignal:
        """Enter if every gate passes, else Hold. See last_hold_reason() for why."""
        candidate = self.candidates.get(identifier)
        if candidate is None:
            return LaunchSignal.HOLD

        result = self.gates.check_all_gates(
            candidate, self.clock.monotonic(), self._momentum.get(identifier)
        )
        self._last_gate[identifier] = result

        if not result.passed:
            logger.debug("[SNIPER] %s hold: %s", candidate.symbol, result.reason)
            return LaunchSignal.HOLD

        logger.info(
            "[SNIPER] ENTER %s at bonding %.1f%%",
            candidate.symbol, (candidate.current_bonding_pct or 0.0) * 100,
        )
        self._emit("signal", candidate.identifier, LaunchSignal.ENTER, candidate.symbol,
                   reason=result.reason, price=candidate.current_price or 0.0)
        return LaunchSignal.ENTER

    def last_hold_reason(self, identifier: str) -> Optional[GateReason]:
        """Gate that blocked the last evaluate_entry, None if it passed or never ran."""
        result = self.last_gate_result(identifier)
        if result is None or result.passed:
            return None
        return result.gate

    def last_gate_result(self, identifier: str) -> Optional[GateResult]:
        if identifier not in self.candidates:
            return NOT_TRACKED
        return self._last_gate.get(identifier)

    def confirm_entry(
        self,
        identifier: str,
        entry_price: float,
        size: float,
        entry_value: float,
    ) -> SniperPosition:
        """Open a position from the executor's fill.

        Raises:
            CandidateNotFoundError: identifier is not tracked.
            InputValidationError: a fill value is negative or not finite.
        """
        candidate = self.candidates.get(identifier)
        if candidate is None:
            raise CandidateNotFoundError(identifier)

        entry_price = require_non_negative("entry_price", entry_price)
        size = require_non_negative("size", size)
        entry_value = require_non_negative("entry_value", entry_value)

        if identifier in self.positions:
            logger.warning("[SNIPER] %s already has a position; replacing it", candidate.symbol)

        now_mono = self.clock.monotonic()
        position = SniperPosition(
            identifier=identifier,
            symbol=candidate.symbol,
            entry_price=entry_price,
            size=size,
            entry_value=entry_value,
            entry_mono=now_mono,
            entry_time=self.clock.now(),
            entry_bonding_pct=candidate.current_bonding_pct or 0.0,
        )
        self.positions[identifier] = position
        self.cooldown.start(now_mono)
        self.daily.record_entry()

        logger.info(
            "[SNIPER] Entry confirmed %s price=%.8f size=%.2f value=%.2f (daily %d/%d)",
            candidate.symbol, entry_price, size, entry_value,
            self.daily.entries, self.config.max_daily_entries,
        )
        self._emit("entry_confirmed", identifier, LaunchSignal.ENTER, candidate.symbol,
                   price=entry_price)
        return position

    # ------------------------------------------------------------------
    # Exits
    # ------------------------------------------------------------------

    def exit_decision(self, identifier: str) -> Optional[ExitDecision]:
        position = self.positions.get(identifier)
        if position is None:
            return None
        return evaluate_exit(
            position, self.config, self.clock.monotonic(), self._momentum.get(identifier)
        )

    def evaluate_exit(self, identifier: str) -> Optional[LaunchSignal]:
        """Exit signal for an open position, Hold if none fires, None if no position."""
        decision = self.exit_decision(identifier)
        if decision is None:
            return None
        if decision.should_exit:
            position = self.positions[identifier]
            self._pending_exit[identifier] = decision.signal
            logger.info(
                "[SNIPER] EXIT %s %s (%s)",
                position.symbol, decision.reason.value, decision.detail,
            )
            self._emit("signal", identifier, decision.signal, position.symbol,
                       reason=decision.reason.value, price=position.current_price,
                       pnl_pct=position.pnl_fraction * 100)
        return decision.signal

    def confirm_exit(self, identifier: str, exit_price: float) -> Optional[float]:
        """Close a position from the executor's fill.

        Returns the realized P&L in percent (50.0 for +50%), or None when no
        position exists or the entry price is too small to divide by.
        """
        exit_price = require_non_negative("exit_price", exit_price)
        position = self.positions.pop(identifier, None)
        if position is None:
            return None
        self._momentum.pop(identifier, None)
        exit_signal = self._pending_exit.pop(identifier, LaunchSignal.HOLD)

        pnl_fraction = safe_divide(exit_price - position.entry_price, position.entry_price)
        if pnl_fraction is None:
            logger.warning(
                "[SNIPER] %s closed with degenerate entry price %.10f; no P&L recorded",
                position.symbol, position.entry_price,
            )
            return None

        pnl_value = pnl_fraction * position.entry_value
        self.daily.record_exit(pnl_value)
        pnl_pct = pnl_fraction * 100.0

        logger.info(
            "[SNIPER] Exit confirmed %s price=%.8f pnl=%+.2f%% (%+.2f) daily=%+.2f",
            position.symbol, exit_price, pnl_pct, pnl_value, self.daily.realized_pnl,
        )
        self._emit("exit_confirmed", identifier, exit_signal, position.symbol,
                   price=exit_price, pnl_pct=pnl_pct)
        return pnl_pct

    def update_position_price(self, identifier: str, price: float) -> bool:
        """Mark an open position. Returns False if there is no such position."""
        price = require_non_negative("price", price)
        position = self.positions.get(identifier)
        if position is None:
            return False
        position.update_price(price)
        return True

    # ------------------------------------------------------------------
    # Risk
    # ------------------------------------------------------------------

    def can_trade(self) -> bool:
        return self.daily.can_trade(self.config)

    def reset_daily(self) -> None:
        """Clear daily counters. Open positions and the cooldown are unaffected."""
        self.daily.reset(self.clock.now())

    def is_in_cooldown(self) -> bool:
        return self.cooldown.is_active(self.clock.monotonic())

    def cooldown_remaining(self) -> float:
        """Seconds until the next entry is allowed."""
        return self.cooldown.remaining(self.clock.monotonic())

    def daily_stats(self) -> dict:
        stats = self.daily.to_dict()
        stats["max_entries"] = self.config.max_daily_entries
        stats["max_loss"] = self.config.max_daily_loss
        stats["can_trade"] = self.can_trade()
        return stats

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_candidate(self, identifier: str) -> Optional[GraduationCandidate]:
        return self.candidates.get(identifier)

    def get_candidates(self) -> List[GraduationCandidate]:
        return list(self.candidates.values())

    def get_position(self, identifier: str) -> Optional[SniperPosition]:
        return self.positions.get(identifier)

    def get_positions(self) -> List[SniperPosition]:
        return list(self.positions.values())

    def clear_candidates(self) -> None:
        """Drop every candidate. Open positions stay."""
        self.candidates.clear()
        self._last_gate.clear()
        for identifier in list(self._momentum):
            if identifier not in self.positions:
                del self._momentum[identifier]

    def is_ready(self) -> bool:
        """Config is still valid (it is mutable after construction)."""
        try:
            self.config.validate()
        except ConfigError:
            return False
        return True

    def snapshot(self) -> dict:
        """Plain-dict state for a calling layer to persist. Wall times only."""
        return {
            "strategy": self.strategy_id,
            "taken_at": self.clock.now().isoformat(),
            "config": self.config.to_dict(),
            "candidates": [c.to_dict() for c in self.candidates.values()],
            "positions": [p.to_dict() for p in self.positions.values()],
            "daily": self.daily_stats(),
            "cooldown_remaining": self.cooldown_remaining(),
        }

    def _emit(
        self,
        event_type: str,
        identifier: str,
        signal: LaunchSignal,
        symbol: str,
        reason: str = "",
        price: float = 0.0,
        pnl_pct: Optional[float] = None,
    ) -> None:
        if self.bus is None:
            return
        self.bus.emit_decision(DecisionEvent(
            event_type=event_type,
            identifier=identifier,
            signal=signal,
            symbol=symbol,
            reason=reason,
            price=price,
            pnl_pct=pnl_pct,
            ts=self.clock.now(),
        ))
