"""
Profile-based configuration overrides.

PROFILES control entry selectivity and exit geometry. They are applied on
top of the env/.env settings.

Usage:
    PROFILE=conservative python tools/replay.py --ticks ticks.csv
    PROFILE=test python -m pytest  # Loose gates for exercising flows
"""

from typing import Any, Dict

# Only allow overriding these keys to avoid drifting risk limits.
ALLOWED_PROFILE_KEYS = {
    "min_bonding_pct",
    "max_bonding_pct",
    "min_unique_holders",
    "max_creator_holding_pct",
    "min_liquidity",
    "take_profit_pct",
    "stop_loss_pct",
    "max_hold_minutes",
    "min_fill_rate_per_minute",
    "min_holder_growth_rate",
    "cooldown_seconds",
    "momentum_period",
}

PROFILES: Dict[str, Dict[str, Any]] = {
    "default": {},  # No overrides - uses base config defaults

    # Fewer, cleaner setups: more holders, less creator concentration
    "conservative": {
        "min_bonding_pct": 0.90,
        "min_unique_holders": 200,
        "max_creator_holding_pct": 0.03,
        "min_liquidity": 75.0,
        "stop_loss_pct": 0.15,
    },

    # Earlier entries and faster momentum reads
    "aggressive": {
        "min_bonding_pct": 0.80,
        "min_unique_holders": 60,
        "take_profit_pct": 0.80,
        "momentum_period": 10,
    },

    # Loose gates for exercising flows. Velocity filters off.
    "test": {
        "min_unique_holders": 50,
        "min_liquidity": 10.0,
        "min_fill_rate_per_minute": None,
        "min_holder_growth_rate": None,
        "cooldown_seconds": 0,
    },
}

PROFILE_ALIASES = {
    "prod": "default",
    "test-profile": "test",
}


def is_test_profile(profile: str) -> bool:
    return PROFILE_ALIASES.get(profile, profile) == "test"


def apply_profile(profile: str, settings_obj):
    """Apply a named profile to the provided settings instance."""
    profile = PROFILE_ALIASES.get(profile or "default", profile or "default")
    if profile not in PROFILES:
        raise ValueError(f"Unknown profile: {profile}")

    overrides = PROFILES[profile]
    for key, value in overrides.items():
        if key not in ALLOWED_PROFILE_KEYS:
            raise ValueError(f"Profile key not allowed: {key}")
        if not hasattr(settings_obj, key):
            raise ValueError(f"Settings has no attribute '{key}'")
        setattr(settings_obj, key, value)
    # Track active profile on the settings object for observability
    setattr(settings_obj, "profile", profile)
