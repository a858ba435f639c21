"""Candidate safety filters.

Pure function of candidate state and config. Fails fast on the first
violated rule and reports a human-readable reason.
"""

from datetime import datetime
from typing import Optional, Tuple

from core.config import SniperConfig
from core.models import GraduationCandidate


def token_age_minutes(candidate: GraduationCandidate, now: datetime) -> Optional[float]:
    """Minutes since token creation, None when the creation time is unknown."""
    if candidate.token_created_at is None:
        return None
    return max(0.0, (now - candidate.token_created_at).total_seconds() / 60.0)


def check_safety(
    candidate: GraduationCandidate,
    config: SniperConfig,
    now: datetime,
) -> Tuple[bool, str]:
    """Check if a candidate passes all safety rules."""
    if candidate.holder_count < config.min_unique_holders:
        return False, f"Holder count {candidate.holder_count} < min {config.min_unique_holders}"

    if candidate.creator_holding_pct > config.max_creator_holding_pct:
        return False, (
            f"Creator holds {candidate.creator_holding_pct:.1%} > "
            f"max {config.max_creator_holding_pct:.1%}"
        )

    if candidate.liquidity < config.min_liquidity:
        return False, f"Liquidity {candidate.liquidity:.2f} < min {config.min_liquidity:.2f}"

    age = token_age_minutes(candidate, now)
    if age is not None and age > config.max_token_age_minutes:
        return False, f"Token age {age:.1f}m > max {config.max_token_age_minutes:.0f}m"

    return True, "OK"
