"""Typed data models for the signal core."""

from core.models.candle import Candle
from core.models.candidate import MAX_HISTORY_POINTS, BondingCurvePoint, GraduationCandidate
from core.models.position import SniperPosition
from core.models.signal import LaunchSignal, MomentumKind, MomentumSignal

__all__ = [
    "MAX_HISTORY_POINTS",
    "BondingCurvePoint",
    "Candle",
    "GraduationCandidate",
    "LaunchSignal",
    "MomentumKind",
    "MomentumSignal",
    "SniperPosition",
]
