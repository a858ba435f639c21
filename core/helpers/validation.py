"""Validation helpers to keep numeric inputs finite and well-shaped."""

import math
import sys
from typing import Any, Optional

from core.errors import InputValidationError

EPSILON = sys.float_info.epsilon


def require_finite(field: str, value: Any) -> float:
    """Coerce to float, rejecting NaN, infinities and non-numbers."""
    try:
        fval = float(value)
    except (TypeError, ValueError):
        raise InputValidationError(field, f"must be a number, got {value!r}")
    if not math.isfinite(fval):
        raise InputValidationError(field, "cannot be NaN or infinite")
    return fval


def require_fraction(field: str, value: Any) -> float:
    """Finite float in [0, 1]."""
    fval = require_finite(field, value)
    if fval < 0.0 or fval > 1.0:
        raise InputValidationError(field, f"must be between 0.0 and 1.0, got {fval}")
    return fval


def require_non_negative(field: str, value: Any) -> float:
    fval = require_finite(field, value)
    if fval < 0.0:
        raise InputValidationError(field, f"cannot be negative, got {fval}")
    return fval


def require_count(field: str, value: Any) -> int:
    """Non-negative integral count (holder counts arrive as ints or int-valued floats)."""
    fval = require_non_negative(field, value)
    if fval != int(fval):
        raise InputValidationError(field, f"must be a whole number, got {fval}")
    return int(fval)


def safe_divide(numerator: float, denominator: float) -> Optional[float]:
    """Divide, or None when |denominator| <= machine epsilon."""
    if abs(denominator) <= EPSILON:
        return None
    return numerator / denominator
