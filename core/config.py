"""Strategy configuration.

``SniperConfig`` is the plain config object the launch sniper owns.
``Settings`` reads the same knobs from the environment / .env so a calling
layer can build configs without hand-parsing.
"""

import logging
import math
from dataclasses import asdict, dataclass
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.errors import ConfigError

logger = logging.getLogger(__name__)
load_dotenv()

# Minimum span between first and last history point before velocity rates are trusted
DEFAULT_MIN_RATE_WINDOW_MINUTES = 0.1


@dataclass
class SniperConfig:
    """Launch sniper thresholds. Fractions are 0.0-1.0."""

    # Entry timing
    min_bonding_pct: float = 0.85   # About to graduate
    max_bonding_pct: float = 0.99   # Too close = might miss graduation

    # Safety filters
    min_unique_holders: int = 100
    max_creator_holding_pct: float = 0.05
    min_liquidity: float = 50.0
    max_token_age_minutes: float = 60.0

    # Position management
    entry_size: float = 50.0
    take_profit_pct: float = 0.50
    stop_loss_pct: float = 0.20
    max_hold_minutes: float = 30.0
    fade_min_gain: float = 0.10     # Peak must have been this far above entry
    fade_giveback: float = 0.30     # Share of the peak gain given back to trigger a fade

    # Velocity filters (None disables)
    min_fill_rate_per_minute: Optional[float] = 0.01
    min_holder_growth_rate: Optional[float] = 1.0
    min_rate_window_minutes: float = DEFAULT_MIN_RATE_WINDOW_MINUTES

    # Risk limits
    max_concurrent_positions: int = 1
    max_daily_entries: int = 10
    max_daily_loss: float = 100.0
    cooldown_seconds: float = 60.0

    # Input sanity
    max_clock_skew_seconds: float = 300.0

    # Momentum integration
    require_bullish_momentum: bool = False
    exit_on_trend_expiry: bool = False

    def validate(self) -> None:
        for name, value in asdict(self).items():
            if isinstance(value, float) and not math.isfinite(value):
                raise ConfigError(f"{name} must be finite")
        if not 0.0 < self.min_bonding_pct < 1.0:
            raise ConfigError("min_bonding_pct must be between 0 and 1")
        if self.max_bonding_pct <= self.min_bonding_pct:
            raise ConfigError("max_bonding_pct must be > min_bonding_pct")
        if self.max_bonding_pct > 1.0:
            raise ConfigError("max_bonding_pct must be <= 1.0")
        if not 0.0 <= self.max_creator_holding_pct <= 1.0:
            raise ConfigError("max_creator_holding_pct must be between 0 and 1")
        if self.min_unique_holders < 0 or self.min_liquidity < 0:
            raise ConfigError("safety minimums cannot be negative")
        if self.take_profit_pct <= 0.0:
            raise ConfigError("take_profit_pct must be > 0")
        if not 0.0 < self.stop_loss_pct < 1.0:
            raise ConfigError("stop_loss_pct must be between 0 and 1")
        if self.entry_size <= 0.0:
            raise ConfigError("entry_size must be > 0")
        if self.max_hold_minutes <= 0.0 or self.max_token_age_minutes <= 0.0:
            raise ConfigError("max_hold_minutes and max_token_age_minutes must be > 0")
        if self.max_concurrent_positions < 1:
            raise ConfigError("max_concurrent_positions must be >= 1")
        if self.max_daily_entries < 0:
            raise ConfigError("max_daily_entries cannot be negative")
        if self.max_daily_loss < 0.0:
            raise ConfigError("max_daily_loss cannot be negative")
        if self.min_rate_window_minutes < 0 or self.cooldown_seconds < 0 or self.max_clock_skew_seconds < 0:
            raise ConfigError("time windows cannot be negative")
        if self.fade_min_gain < 0.0:
            raise ConfigError("fade_min_gain cannot be negative")
        if not 0.0 < self.fade_giveback <= 1.0:
            raise ConfigError("fade_giveback must be in (0, 1]")

    def to_dict(self) -> dict:
        return asdict(self)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    profile: str = Field(default="default", alias="PROFILE")

    # Candles
    candle_period_seconds: float = Field(default=300.0, alias="CANDLE_PERIOD_SECONDS")

    # Trend indicator
    adx_period: int = Field(default=14, alias="ADX_PERIOD")
    adx_entry_threshold: float = Field(default=20.0, alias="ADX_ENTRY_THRESHOLD")
    adx_exit_threshold: float = Field(default=28.0, alias="ADX_EXIT_THRESHOLD")

    # Momentum
    momentum_period: int = Field(default=14, alias="MOMENTUM_PERIOD")
    momentum_entry_threshold: float = Field(default=25.0, alias="MOMENTUM_ENTRY_THRESHOLD")
    momentum_exit_threshold: float = Field(default=20.0, alias="MOMENTUM_EXIT_THRESHOLD")
    momentum_confirmation_bars: int = Field(default=2, alias="MOMENTUM_CONFIRMATION_BARS")

    # Sniper
    min_bonding_pct: float = Field(default=0.85, alias="SNIPER_MIN_BONDING_PCT")
    max_bonding_pct: float = Field(default=0.99, alias="SNIPER_MAX_BONDING_PCT")
    min_unique_holders: int = Field(default=100, alias="SNIPER_MIN_HOLDERS")
    max_creator_holding_pct: float = Field(default=0.05, alias="SNIPER_MAX_CREATOR_HOLDING_PCT")
    min_liquidity: float = Field(default=50.0, alias="SNIPER_MIN_LIQUIDITY")
    max_token_age_minutes: float = Field(default=60.0, alias="SNIPER_MAX_TOKEN_AGE_MINUTES")
    entry_size: float = Field(default=50.0, alias="SNIPER_ENTRY_SIZE")
    take_profit_pct: float = Field(default=0.50, alias="SNIPER_TAKE_PROFIT_PCT")
    stop_loss_pct: float = Field(default=0.20, alias="SNIPER_STOP_LOSS_PCT")
    max_hold_minutes: float = Field(default=30.0, alias="SNIPER_MAX_HOLD_MINUTES")
    min_fill_rate_per_minute: Optional[float] = Field(default=0.01, alias="SNIPER_MIN_FILL_RATE")
    min_holder_growth_rate: Optional[float] = Field(default=1.0, alias="SNIPER_MIN_HOLDER_GROWTH")
    min_rate_window_minutes: float = Field(
        default=DEFAULT_MIN_RATE_WINDOW_MINUTES, alias="SNIPER_MIN_RATE_WINDOW_MINUTES"
    )
    max_concurrent_positions: int = Field(default=1, alias="SNIPER_MAX_POSITIONS")
    max_daily_entries: int = Field(default=10, alias="SNIPER_MAX_DAILY_ENTRIES")
    max_daily_loss: float = Field(default=100.0, alias="SNIPER_MAX_DAILY_LOSS")
    cooldown_seconds: float = Field(default=60.0, alias="SNIPER_COOLDOWN_SECONDS")
    require_bullish_momentum: bool = Field(default=False, alias="SNIPER_REQUIRE_MOMENTUM")
    exit_on_trend_expiry: bool = Field(default=False, alias="SNIPER_EXIT_ON_TREND_EXPIRY")

    def sniper_config(self) -> SniperConfig:
        config = SniperConfig(
            min_bonding_pct=self.min_bonding_pct,
            max_bonding_pct=self.max_bonding_pct,
            min_unique_holders=self.min_unique_holders,
            max_creator_holding_pct=self.max_creator_holding_pct,
            min_liquidity=self.min_liquidity,
            max_token_age_minutes=self.max_token_age_minutes,
            entry_size=self.entry_size,
            take_profit_pct=self.take_profit_pct,
            stop_loss_pct=self.stop_loss_pct,
            max_hold_minutes=self.max_hold_minutes,
            min_fill_rate_per_minute=self.min_fill_rate_per_minute,
            min_holder_growth_rate=self.min_holder_growth_rate,
            min_rate_window_minutes=self.min_rate_window_minutes,
            max_concurrent_positions=self.max_concurrent_positions,
            max_daily_entries=self.max_daily_entries,
            max_daily_loss=self.max_daily_loss,
            cooldown_seconds=self.cooldown_seconds,
            require_bullish_momentum=self.require_bullish_momentum,
            exit_on_trend_expiry=self.exit_on_trend_expiry,
        )
        config.validate()
        return config

    def adx_config(self):
        from logic.regime import AdxConfig

        config = AdxConfig(
            period=self.adx_period,
            entry_threshold=self.adx_entry_threshold,
            exit_threshold=self.adx_exit_threshold,
        )
        config.validate()
        return config

    def momentum_config(self):
        from logic.momentum import MomentumConfig

        config = MomentumConfig(
            period=self.momentum_period,
            entry_threshold=self.momentum_entry_threshold,
            exit_threshold=self.momentum_exit_threshold,
            min_confirmation_bars=self.momentum_confirmation_bars,
        )
        config.validate()
        return config


settings = Settings()

try:
    from core.profiles import apply_profile
    apply_profile(settings.profile, settings)
except ValueError as e:
    logger.warning("[CONFIG] Profile '%s' not applied: %s", settings.profile, e)
