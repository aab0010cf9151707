"""
Kelly Criterion Position Cap

Kelly fraction f = (b*p - q) / b

Where:
- b = average win / average loss (reward-to-risk)
- p = win rate
- q = 1 - p

The result is clamped to [0, cap]; a non-positive average loss or win
(zero denominator) yields 0.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class KellyResult:
    """Result from Kelly Criterion calculation"""
    kelly_fraction: float
    capped_fraction: float
    cap: float
    rejection_reason: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            'kelly_fraction': float(self.kelly_fraction),
            'capped_fraction': float(self.capped_fraction),
            'cap': float(self.cap),
            'rejection_reason': self.rejection_reason,
        }


def kelly_fraction(win_rate: float, avg_win: float, avg_loss: float, cap: float = 0.05) -> KellyResult:
    """Capped Kelly fraction with defined fallbacks for degenerate inputs"""
    if not 0 <= win_rate <= 1:
        return KellyResult(0.0, 0.0, cap, f"Invalid win_rate: {win_rate} (must be in [0,1])")
    if avg_loss <= 0:
        return KellyResult(0.0, 0.0, cap, f"Invalid avg_loss: {avg_loss} (must be > 0)")
    if avg_win <= 0:
        return KellyResult(0.0, 0.0, cap, f"Invalid avg_win: {avg_win} (must be > 0)")

    b = avg_win / avg_loss
    p = win_rate
    q = 1 - p
    fraction = (b * p - q) / b

    capped = max(0.0, min(fraction, cap))
    reason = None if fraction > 0 else f"Negative edge: Kelly = {fraction:.4f}"
    return KellyResult(fraction, capped, cap, reason)
