"""
Core module tests - verify imports and basic functionality.
"""

import math
import sys
from datetime import datetime, timedelta, timezone

import pytest


class TestImports:
    """Verify all key modules import without error."""

    def test_core_config(self):
        from core.config import settings
        assert settings is not None
        assert hasattr(settings, 'profile')

    def test_core_models(self):
        from core.models import Candle, GraduationCandidate, LaunchSignal, SniperPosition
        assert Candle is not None
        assert GraduationCandidate is not None
        assert LaunchSignal.ENTER is not None
        assert SniperPosition is not None

    def test_logic_strategies(self):
        from logic.strategies import LaunchSniperStrategy
        assert LaunchSniperStrategy().is_ready()

    def test_datafeeds(self):
        from datafeeds.collectors import CandleAggregator
        assert CandleAggregator is not None


class TestClock:

    def test_manual_clock_advances_both_readings(self):
        from core.clock import ManualClock
        clock = ManualClock()
        start = clock.now()
        clock.advance(90)
        assert clock.monotonic() == 90
        assert clock.now() - start == timedelta(seconds=90)

    def test_manual_clock_rejects_going_back(self):
        from core.clock import ManualClock
        with pytest.raises(ValueError):
            ManualClock().advance(-1)

    def test_set_now_only_moves_wall(self):
        from core.clock import ManualClock
        clock = ManualClock()
        clock.set_now(datetime(2030, 1, 1))
        assert clock.monotonic() == 0
        assert clock.now().tzinfo is not None

    def test_system_clock(self):
        from core.clock import system_clock
        a = system_clock.monotonic()
        assert system_clock.monotonic() >= a
        assert system_clock.now().tzinfo == timezone.utc


class TestErrors:

    def test_validation_error_message(self):
        from core.errors import InputValidationError, SniperError, ValidationError
        err = InputValidationError("price", "cannot be negative")
        assert str(err) == "Invalid input: price - cannot be negative"
        assert isinstance(err, SniperError)
        assert ValidationError is InputValidationError

    def test_clock_skew_is_validation_error(self):
        from core.errors import ClockSkewError, InputValidationError
        assert issubclass(ClockSkewError, InputValidationError)

    def test_not_found(self):
        from core.errors import CandidateNotFoundError
        assert "abc" in str(CandidateNotFoundError("abc"))


class TestValidationHelpers:

    def test_require_finite(self):
        from core.errors import InputValidationError
        from core.helpers import require_finite
        assert require_finite("x", "1.5") == 1.5
        for bad in (math.nan, math.inf, -math.inf, "abc", None):
            with pytest.raises(InputValidationError):
                require_finite("x", bad)

    def test_require_fraction(self):
        from core.errors import InputValidationError
        from core.helpers import require_fraction
        assert require_fraction("x", 0.0) == 0.0
        assert require_fraction("x", 1.0) == 1.0
        for bad in (1.5, -0.1, math.nan):
            with pytest.raises(InputValidationError):
                require_fraction("x", bad)

    def test_require_count(self):
        from core.errors import InputValidationError
        from core.helpers import require_count
        assert require_count("n", 5.0) == 5
        assert isinstance(require_count("n", 5.0), int)
        with pytest.raises(InputValidationError):
            require_count("n", 1.5)

    def test_safe_divide(self):
        from core.helpers import safe_divide
        assert safe_divide(1.0, 4.0) == 0.25
        assert safe_divide(1.0, 0.0) is None
        assert safe_divide(1.0, 1e-20) is None
        assert safe_divide(1.0, sys.float_info.epsilon) is None
        assert safe_divide(1.0, -sys.float_info.epsilon) is None
        assert safe_divide(1.0, 2 * sys.float_info.epsilon) is not None


class TestModels:
    """Test core data models."""

    def test_candle_validity(self):
        from core.models import Candle
        assert Candle(1, 2, 0.5, 1.5).is_valid()
        assert not Candle(1, 0.5, 2, 1.5).is_valid()
        assert not Candle(3, 2, 0.5, 1.5).is_valid()
        assert not Candle(1, math.nan, 0.5, 1.5).is_valid()

    def test_candle_helpers(self):
        from core.models import Candle
        candle = Candle(1.0, 3.0, 0.5, 2.0)
        assert candle.range == 2.5
        assert candle.body == 1.0
        assert candle.is_green

    def test_candidate_rates(self):
        from core.models import BondingCurvePoint, GraduationCandidate
        t0 = datetime(2024, 1, 1, tzinfo=timezone.utc)
        candidate = GraduationCandidate("id", "sym", first_seen_mono=0.0, first_seen_at=t0)
        assert candidate.fill_rate_per_minute(0.1) is None
        assert candidate.current_bonding_pct is None

        candidate.record_point(BondingCurvePoint(0.0, t0, 0.50, 1.0, 100))
        candidate.record_point(BondingCurvePoint(120.0, t0, 0.70, 1.0, 160))
        assert candidate.fill_rate_per_minute(0.1) == pytest.approx(0.10)
        assert candidate.holder_growth_rate(0.1) == pytest.approx(30.0)
        assert candidate.holder_count == 160
        assert candidate.age_minutes(300.0) == pytest.approx(5.0)
        # Window longer than the observed span leaves the rate undefined
        assert candidate.fill_rate_per_minute(5.0) is None

    def test_position_metrics(self):
        from core.models import SniperPosition
        t0 = datetime(2024, 1, 1, tzinfo=timezone.utc)
        position = SniperPosition("id", "sym", 2.0, 10.0, 20.0, entry_mono=0.0, entry_time=t0)
        assert position.highest_price == 2.0
        assert position.has_valid_prices()
        position.update_price(3.0)
        position.update_price(2.5)
        assert position.pnl_fraction == pytest.approx(0.25)
        assert position.peak_gain_fraction == pytest.approx(0.5)
        assert position.giveback_fraction == pytest.approx(0.5)
        assert position.age_minutes(600.0) == pytest.approx(10.0)

    def test_degenerate_position(self):
        from core.models import SniperPosition
        t0 = datetime(2024, 1, 1, tzinfo=timezone.utc)
        position = SniperPosition("id", "sym", 0.0, 10.0, 20.0, entry_mono=0.0, entry_time=t0)
        position.update_price(1.0)
        assert position.pnl_fraction == 0.0
        assert not position.has_valid_prices()

    def test_launch_signal_exit_flag(self):
        from core.models import LaunchSignal
        assert LaunchSignal.STOP_LOSS.is_exit
        assert not LaunchSignal.ENTER.is_exit
        assert not LaunchSignal.HOLD.is_exit

    def test_gate_reason_values(self):
        from core.helpers import GateReason
        assert GateReason("cooldown") == GateReason.COOLDOWN
        assert GateReason.ALREADY_OPEN == "already_have_position"


class TestDecisionBus:

    def test_emit_and_remove(self):
        from core.events import DecisionBus, DecisionEvent
        from core.models import LaunchSignal
        bus = DecisionBus()
        seen = []
        bus.on_decision(seen.append)
        event = DecisionEvent("signal", "id", LaunchSignal.ENTER)
        bus.emit_decision(event)
        assert seen == [event]
        assert bus.remove_decision_handler(seen.append) is True
        assert bus.remove_decision_handler(seen.append) is False
        bus.emit_decision(event)
        assert len(seen) == 1

    def test_handler_errors_are_isolated(self):
        from core.events import CandleEvent, DecisionBus
        from core.models import Candle
        bus = DecisionBus()
        seen = []

        def bad(event):
            raise RuntimeError("boom")

        bus.on_candle(bad)
        bus.on_candle(seen.append)
        bus.emit_candle(CandleEvent("s", Candle(1, 1, 1, 1)))
        assert len(seen) == 1


class TestLogging:

    @pytest.fixture(autouse=True)
    def restore_root(self):
        import logging
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_resolve_level(self, monkeypatch):
        import logging
        from core.logging_utils import resolve_level
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert resolve_level() == logging.DEBUG
        assert resolve_level("warning") == logging.WARNING
        assert resolve_level("nonsense") == logging.INFO
        assert resolve_level(logging.ERROR) == logging.ERROR

    def test_single_named_handler(self):
        import logging
        from core.logging_utils import HANDLER_NAME, setup_logging
        setup_logging("INFO")
        setup_logging("DEBUG")
        named = [h for h in logging.getLogger().handlers if h.name == HANDLER_NAME]
        assert len(named) == 1
        assert named[0].level == logging.DEBUG

    def test_switch_to_rich(self):
        import logging
        from rich.logging import RichHandler
        from core.logging_utils import HANDLER_NAME, setup_logging
        setup_logging("INFO")
        setup_logging("INFO", use_rich=True)
        named = [h for h in logging.getLogger().handlers if h.name == HANDLER_NAME]
        assert len(named) == 1
        assert isinstance(named[0], RichHandler)
