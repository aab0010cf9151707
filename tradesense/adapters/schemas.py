"""
External Signal Adapter Schemas

Typed contracts for sentiment and prediction collaborators.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from tradesense.indicators.schemas import VolatilityLevel
from tradesense.signal_engine.schemas import Signal


class PredictionDirection(str, Enum):
    UP = "UP"
    DOWN = "DOWN"
    NEUTRAL = "NEUTRAL"


@dataclass(frozen=True)
class SentimentReading:
    """Sentiment collaborator output: score in [-1, 1], confidence in [0, 1]"""
    score: float
    confidence: float

    def __post_init__(self):
        if not -1.0 <= self.score <= 1.0:
            raise ValueError(f"score must be in [-1, 1], got {self.score}")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be in [0, 1], got {self.confidence}")

    @classmethod
    def from_dict(cls, data: dict) -> 'SentimentReading':
        return cls(score=float(data['score']), confidence=float(data['confidence']))

    def to_dict(self) -> dict:
        return {'score': float(self.score), 'confidence': float(self.confidence)}


@dataclass(frozen=True)
class PredictionReading:
    """Prediction collaborator output"""
    direction: PredictionDirection
    confidence: float
    volatility_level: VolatilityLevel = VolatilityLevel.MEDIUM

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be in [0, 1], got {self.confidence}")
        object.__setattr__(self, 'direction', PredictionDirection(self.direction))
        object.__setattr__(self, 'volatility_level', VolatilityLevel(self.volatility_level))

    @classmethod
    def from_dict(cls, data: dict) -> 'PredictionReading':
        return cls(
            direction=PredictionDirection(data['direction']),
            confidence=float(data['confidence']),
            volatility_level=VolatilityLevel(data.get('volatility_level', 'MEDIUM')),
        )

    def to_dict(self) -> dict:
        return {
            'direction': self.direction.value,
            'confidence': float(self.confidence),
            'volatility_level': self.volatility_level.value,
        }


@dataclass(frozen=True)
class MarketFeatures:
    """Features handed to a prediction provider"""
    symbol: str
    timeframe: str
    returns: tuple
    volume_ratio: Optional[float]
    volatility: Optional[float]
    momentum: Optional[float]
    hour_of_day: Optional[int]
    day_of_week: Optional[int]
    volatility_level: Optional[VolatilityLevel] = None

    def to_dict(self) -> dict:
        return {
            'symbol': self.symbol,
            'timeframe': self.timeframe,
            'returns': list(self.returns),
            'volume_ratio': self.volume_ratio,
            'volatility': self.volatility,
            'momentum': self.momentum,
            'hour_of_day': self.hour_of_day,
            'day_of_week': self.day_of_week,
            'volatility_level': self.volatility_level.value if self.volatility_level else None,
        }


@dataclass
class ExternalSignals:
    """
    Result of one collaborator fan-out.

    A source is None when it failed, timed out, returned an invalid
    reading, or was not configured. `failures` names each failed source
    with a short reason.
    """
    sentiment_reading: Optional[SentimentReading] = None
    prediction_reading: Optional[PredictionReading] = None
    sentiment: Optional[Signal] = None
    prediction: Optional[Signal] = None
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def sources_available(self) -> List[str]:
        names = []
        if self.sentiment is not None:
            names.append('sentiment')
        if self.prediction is not None:
            names.append('prediction')
        return names

    def to_dict(self) -> dict:
        return {
            'sentiment': self.sentiment.to_dict() if self.sentiment else None,
            'prediction': self.prediction.to_dict() if self.prediction else None,
            'sentiment_reading': self.sentiment_reading.to_dict() if self.sentiment_reading else None,
            'prediction_reading': self.prediction_reading.to_dict() if self.prediction_reading else None,
            'failures': dict(self.failures),
        }
