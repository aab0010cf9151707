"""
External Signal Adapters

Typed wrappers around sentiment and prediction collaborators.

    - Providers: async `get` contracts, swappable implementations
    - Signals: reading → directional signal conversion
    - Cache: (source, symbol) read-through TTL cache with injected clock
    - Gateway: concurrent fan-out where each source degrades on its own
"""

from tradesense.adapters.schemas import (
    PredictionDirection,
    SentimentReading,
    PredictionReading,
    MarketFeatures,
    ExternalSignals,
)
from tradesense.adapters.providers import (
    SentimentProvider,
    PredictionProvider,
    StaticSentimentProvider,
    WeightedSentimentProvider,
    StaticPredictionProvider,
    MomentumPredictionProvider,
)
from tradesense.adapters.signals import sentiment_to_signal, prediction_to_signal
from tradesense.adapters.features import extract_features
from tradesense.adapters.cache import ReadingCache
from tradesense.adapters.gateway import gather_external_signals

__all__ = [
    'PredictionDirection',
    'SentimentReading',
    'PredictionReading',
    'MarketFeatures',
    'ExternalSignals',
    'SentimentProvider',
    'PredictionProvider',
    'StaticSentimentProvider',
    'WeightedSentimentProvider',
    'StaticPredictionProvider',
    'MomentumPredictionProvider',
    'sentiment_to_signal',
    'prediction_to_signal',
    'extract_features',
    'ReadingCache',
    'gather_external_signals',
]
