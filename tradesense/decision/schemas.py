"""
Decision Combiner Schemas
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from tradesense.indicators.schemas import VolatilityLevel
from tradesense.signal_engine.schemas import BucketScores, SignalDirection


class OrderType(str, Enum):
    MARKET = "MARKET"
    LIMIT = "LIMIT"


@dataclass(frozen=True)
class FusionReasoning:
    """Component scores behind a composite decision"""
    technical_confidence: Optional[float]
    sentiment_confidence: Optional[float]
    prediction_confidence: Optional[float]
    scores: BucketScores
    unused_weight: float
    sources_used: tuple
    volatility_level: Optional[VolatilityLevel] = None
    volatility_source: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'technical_confidence': self.technical_confidence,
            'sentiment_confidence': self.sentiment_confidence,
            'prediction_confidence': self.prediction_confidence,
            'scores': self.scores.to_dict(),
            'unused_weight': float(self.unused_weight),
            'sources_used': list(self.sources_used),
            'volatility_level': self.volatility_level.value if self.volatility_level else None,
            'volatility_source': self.volatility_source,
        }


@dataclass(frozen=True)
class CompositeSignal:
    """
    Fused trading decision.

    order_type, stop_loss_distance and take_profit_distance are set only
    for BUY / SELL; a HOLD carries none of them.
    """
    symbol: str
    direction: SignalDirection
    strength: float
    confidence: float
    reasoning: FusionReasoning
    order_type: Optional[OrderType] = None
    stop_loss_distance: Optional[float] = None
    take_profit_distance: Optional[float] = None
    timeframe: Optional[str] = None
    metadata: Dict[str, object] = field(default_factory=dict)

    def __post_init__(self):
        if self.direction not in (SignalDirection.BUY, SignalDirection.SELL, SignalDirection.HOLD):
            raise ValueError(f"Composite direction must be BUY, SELL or HOLD, got {self.direction}")
        exits = (self.order_type, self.stop_loss_distance, self.take_profit_distance)
        if self.direction == SignalDirection.HOLD:
            if any(v is not None for v in exits):
                raise ValueError("HOLD decisions must not carry order type or exit distances")
        elif any(v is None for v in exits):
            raise ValueError(f"{self.direction.value} decisions require order type and exit distances")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be in [0, 1], got {self.confidence}")

    @property
    def is_actionable(self) -> bool:
        return self.direction != SignalDirection.HOLD

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            'symbol': self.symbol,
            'timeframe': self.timeframe,
            'direction': self.direction.value,
            'strength': float(self.strength),
            'confidence': float(self.confidence),
            'order_type': self.order_type.value if self.order_type else None,
            'stop_loss_distance': self.stop_loss_distance,
            'take_profit_distance': self.take_profit_distance,
            'reasoning': self.reasoning.to_dict(),
            'metadata': dict(self.metadata),
        }
