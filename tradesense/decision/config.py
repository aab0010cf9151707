"""
Decision Combiner Configuration

Fusion weights, activation floor and stop-loss / take-profit bases.
"""

from dataclasses import dataclass, field, asdict
from typing import Dict
import hashlib
import json


@dataclass
class FusionConfig:
    """
    Weighted multi-source fusion parameters.

    Weights must sum to 1.0 within `weight_tolerance`.
    """

    # ========================================
    # SOURCE WEIGHTS
    # ========================================

    technical_weight: float = 0.5
    sentiment_weight: float = 0.3
    prediction_weight: float = 0.2
    weight_tolerance: float = 0.01

    # Weight of an unavailable source is credited to HOLD at this factor
    unavailable_hold_factor: float = 0.5

    # ========================================
    # DECISION THRESHOLDS
    # ========================================

    activation_floor: float = 0.6  # BUY/SELL score must exceed this
    hold_confidence_floor: float = 0.3
    min_confidence: float = 0.1
    max_confidence: float = 0.95
    market_order_threshold: float = 0.8  # MARKET above, LIMIT otherwise

    # ========================================
    # STOP LOSS / TAKE PROFIT
    # ========================================

    high_confidence_threshold: float = 0.8
    high_confidence_stop_loss: float = 0.02
    high_confidence_take_profit: float = 0.04
    stop_loss: float = 0.015
    take_profit: float = 0.03

    volatility_multipliers: Dict[str, float] = field(default_factory=lambda: {
        'LOW': 0.7,
        'MEDIUM': 1.0,
        'HIGH': 1.5,
    })

    config_version: str = "1.0.0"

    def validation_errors(self) -> list:
        """List every violated constraint"""
        errors = []
        for name in ('technical_weight', 'sentiment_weight', 'prediction_weight'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                errors.append(f"{name} must be in [0, 1], got {value}")
        total = self.technical_weight + self.sentiment_weight + self.prediction_weight
        if abs(total - 1.0) > self.weight_tolerance:
            errors.append(
                f"Fusion weights must sum to 1.0 (±{self.weight_tolerance}), got {total:.4f}"
            )
        if not 0 < self.min_confidence <= self.max_confidence <= 1:
            errors.append(
                f"confidence bounds must satisfy 0 < min <= max <= 1, "
                f"got [{self.min_confidence}, {self.max_confidence}]"
            )
        for level in ('LOW', 'MEDIUM', 'HIGH'):
            if self.volatility_multipliers.get(level, 0) <= 0:
                errors.append(f"volatility multiplier for {level} must be > 0")
        return errors

    def validate(self):
        errors = self.validation_errors()
        if errors:
            raise ValueError("; ".join(errors))

    def to_dict(self) -> dict:
        return asdict(self)

    def get_config_hash(self) -> str:
        config_str = json.dumps(self.to_dict(), sort_keys=True)
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]
