"""
Technical Signal Generator

Converts indicator and chart-pattern readings into directional votes and
aggregates them into one technical verdict.

Flow:
    Indicator Library → Pattern Detector → Signal Generator → Decision Combiner

Responsibilities:
    1. Compute the indicator set for a price series
    2. Apply one threshold rule per indicator
    3. Bucket votes (BUY / SELL / HOLD) and pick the strict winner
    4. Report per-indicator votes for auditing
"""

from tradesense.signal_engine.config import SignalEngineConfig
from tradesense.signal_engine.schemas import (
    Signal,
    SignalDirection,
    BucketScores,
    TechnicalVerdict,
)
from tradesense.signal_engine.engine import TechnicalSignalGenerator, aggregate_signals

__version__ = "1.0.0"

__all__ = [
    'SignalEngineConfig',
    'Signal',
    'SignalDirection',
    'BucketScores',
    'TechnicalVerdict',
    'TechnicalSignalGenerator',
    'aggregate_signals',
]
