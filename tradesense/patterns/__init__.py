"""
Pattern Detector

Finds local extrema in a price series and recognises composite chart
shapes with a heuristic confidence in [0.3, 0.95].
"""

from tradesense.patterns.config import PatternConfig
from tradesense.patterns.schemas import (
    PatternType,
    ChartPattern,
    BULLISH_PATTERNS,
    BEARISH_PATTERNS,
)
from tradesense.patterns.detector import PatternDetector, pivot_slope

__version__ = "1.0.0"

__all__ = [
    'PatternConfig',
    'PatternType',
    'ChartPattern',
    'BULLISH_PATTERNS',
    'BEARISH_PATTERNS',
    'PatternDetector',
    'pivot_slope',
]
