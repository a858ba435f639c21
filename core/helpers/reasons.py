"""Standardized hold/exit reasons for consistency across logging and events."""

from enum import Enum


class GateReason(str, Enum):
    """Why an entry evaluation returned Hold. Values are stable log keys."""
    NOT_TRACKED = "not_tracked"
    COOLDOWN = "cooldown"
    DAILY_ENTRIES = "daily_entry_cap"
    DAILY_LOSS = "daily_loss_cap"
    MAX_POSITIONS = "max_positions"
    ALREADY_OPEN = "already_have_position"
    SAFETY = "safety"
    NO_DATA = "no_bonding_data"
    BONDING_LOW = "bonding_below_min"
    BONDING_HIGH = "bonding_above_max"
    FILL_RATE = "fill_rate"
    HOLDER_GROWTH = "holder_growth"
    MOMENTUM = "momentum"
    OK = "ok"


class ExitReason(str, Enum):
    TAKE_PROFIT = "take_profit"
    STOP_LOSS = "stop_loss"
    TIME_STOP = "time_stop"
    MOMENTUM_FADE = "momentum_fade"
    TREND_EXPIRED = "trend_expired"
    NONE = "none"
