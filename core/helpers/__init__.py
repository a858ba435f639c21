"""Shared helper utilities for consistency across the bot."""

from .validation import (
    EPSILON,
    require_count,
    require_finite,
    require_fraction,
    require_non_negative,
    safe_divide,
)
from .reasons import ExitReason, GateReason

__all__ = [
    "EPSILON",
    "require_count",
    "require_finite",
    "require_fraction",
    "require_non_negative",
    "safe_divide",
    "ExitReason",
    "GateReason",
]
