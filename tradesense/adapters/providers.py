"""
Collaborator provider interfaces.

Sentiment and prediction sources are pluggable: anything implementing
the async `get` contract below can be handed to the engine.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional
import asyncio
import logging

from tradesense.adapters.schemas import (
    MarketFeatures,
    PredictionDirection,
    PredictionReading,
    SentimentReading,
)
from tradesense.indicators.schemas import VolatilityLevel

LOG = logging.getLogger(__name__)


class SentimentProvider(ABC):
    """Source of sentiment readings for a symbol"""

    name: str = "sentiment"

    @abstractmethod
    async def get(self, symbol: str) -> SentimentReading:
        """Return a reading; may raise or time out"""


class PredictionProvider(ABC):
    """Source of direction / volatility predictions"""

    name: str = "prediction"

    @abstractmethod
    async def get(self, features: MarketFeatures, symbol: str) -> PredictionReading:
        """Return a reading; may raise or time out"""


class StaticSentimentProvider(SentimentProvider):
    """Serves fixed readings per symbol (feeds, fixtures, replays)"""

    def __init__(self, readings: Optional[Dict[str, SentimentReading]] = None,
                 default: Optional[SentimentReading] = None, name: str = "sentiment"):
        self.readings = dict(readings or {})
        self.default = default
        self.name = name

    async def get(self, symbol: str) -> SentimentReading:
        reading = self.readings.get(symbol, self.default)
        if reading is None:
            raise LookupError(f"No sentiment reading for {symbol}")
        return reading


class WeightedSentimentProvider(SentimentProvider):
    """
    Blends social, news and market sentiment feeds.

    score      = 0.3 * social + 0.4 * news + 0.3 * market
    confidence = mean of the three confidences

    A failing feed fails the blend; the caller degrades the whole
    sentiment source.
    """

    DEFAULT_WEIGHTS = {'social': 0.3, 'news': 0.4, 'market': 0.3}

    def __init__(self, social: SentimentProvider, news: SentimentProvider,
                 market: SentimentProvider, weights: Optional[Dict[str, float]] = None):
        self.feeds = {'social': social, 'news': news, 'market': market}
        self.weights = dict(weights or self.DEFAULT_WEIGHTS)
        total = sum(self.weights.values())
        if abs(total - 1.0) > 0.001:
            raise ValueError(f"Sentiment weights must sum to 1.0, got {total}")
        self.name = "sentiment"

    async def get(self, symbol: str) -> SentimentReading:
        names = list(self.feeds)
        readings = await asyncio.gather(*(self.feeds[n].get(symbol) for n in names))
        by_name = dict(zip(names, readings))

        score = sum(by_name[n].score * self.weights[n] for n in names)
        confidence = sum(r.confidence for r in readings) / len(readings)
        return SentimentReading(
            score=max(-1.0, min(1.0, score)),
            confidence=confidence,
        )


class StaticPredictionProvider(PredictionProvider):
    """Serves fixed predictions per symbol"""

    def __init__(self, readings: Optional[Dict[str, PredictionReading]] = None,
                 default: Optional[PredictionReading] = None):
        self.readings = dict(readings or {})
        self.default = default

    async def get(self, features: MarketFeatures, symbol: str) -> PredictionReading:
        reading = self.readings.get(symbol, self.default)
        if reading is None:
            raise LookupError(f"No prediction for {symbol}")
        return reading


class MomentumPredictionProvider(PredictionProvider):
    """
    Deterministic rule-based predictor.

    Direction follows short-vs-long momentum beyond a threshold; confidence
    grows with the momentum magnitude and is capped. Volatility level is
    taken from the features (MEDIUM when unknown).
    """

    def __init__(self, threshold: float = 0.01, sensitivity: float = 10.0,
                 base_confidence: float = 0.5, max_confidence: float = 0.9):
        if threshold <= 0:
            raise ValueError(f"threshold must be > 0, got {threshold}")
        self.threshold = threshold
        self.sensitivity = sensitivity
        self.base_confidence = base_confidence
        self.max_confidence = max_confidence

    async def get(self, features: MarketFeatures, symbol: str) -> PredictionReading:
        momentum = features.momentum or 0.0
        if momentum > self.threshold:
            direction = PredictionDirection.UP
        elif momentum < -self.threshold:
            direction = PredictionDirection.DOWN
        else:
            direction = PredictionDirection.NEUTRAL

        confidence = min(self.max_confidence, self.base_confidence + abs(momentum) * self.sensitivity)
        return PredictionReading(
            direction=direction,
            confidence=confidence,
            volatility_level=features.volatility_level or VolatilityLevel.MEDIUM,
        )
