"""Lightweight decision events and bus.

The core never executes trades. It publishes decisions here and an external
executor subscribes, acts, then reports back through confirm_entry/confirm_exit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional

from core.models import Candle, LaunchSignal

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class DecisionEvent:
    """Normalized decision published by the strategy."""

    event_type: str  # "signal", "entry_confirmed", "exit_confirmed"
    identifier: str
    signal: LaunchSignal
    symbol: str = ""
    reason: str = ""
    price: float = 0.0
    pnl_pct: Optional[float] = None
    ts: datetime = field(default_factory=_utc_now)


@dataclass
class CandleEvent:
    series: str
    candle: Candle
    ts: datetime = field(default_factory=_utc_now)


class DecisionBus:
    """Minimal sync bus; handlers run inline on the caller's thread."""

    def __init__(self):
        self._decision_handlers: List[Callable[[DecisionEvent], None]] = []
        self._candle_handlers: List[Callable[[CandleEvent], None]] = []

    def on_decision(self, handler: Callable[[DecisionEvent], None]) -> None:
        self._decision_handlers.append(handler)

    def on_candle(self, handler: Callable[[CandleEvent], None]) -> None:
        self._candle_handlers.append(handler)

    def emit_decision(self, event: DecisionEvent) -> None:
        for handler in list(self._decision_handlers):
            try:
                handler(event)
            except Exception as e:
                # Non-fatal; a bad subscriber must not corrupt strategy state
                logger.warning('[EVENT] Decision handler error: %s', e)
                continue

    def emit_candle(self, event: CandleEvent) -> None:
        for handler in list(self._candle_handlers):
            try:
                handler(event)
            except Exception as e:
                logger.debug('[EVENT] Candle handler error: %s', e)
                continue

    def remove_decision_handler(self, handler: Callable[[DecisionEvent], None]) -> bool:
        """Remove a decision handler. Returns True if removed."""
        try:
            self._decision_handlers.remove(handler)
            return True
        except ValueError:
            return False

    def remove_candle_handler(self, handler: Callable[[CandleEvent], None]) -> bool:
        try:
            self._candle_handlers.remove(handler)
            return True
        except ValueError:
            return False
