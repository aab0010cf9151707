"""
Pattern Detector Schemas
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict


class PatternType(str, Enum):
    """Recognised chart shapes"""
    DOUBLE_TOP = "DOUBLE_TOP"
    DOUBLE_BOTTOM = "DOUBLE_BOTTOM"
    HEAD_AND_SHOULDERS = "HEAD_AND_SHOULDERS"
    HEAD_AND_SHOULDERS_INVERSE = "HEAD_AND_SHOULDERS_INVERSE"
    ASCENDING_TRIANGLE = "ASCENDING_TRIANGLE"
    DESCENDING_TRIANGLE = "DESCENDING_TRIANGLE"


BULLISH_PATTERNS = frozenset({
    PatternType.DOUBLE_BOTTOM,
    PatternType.HEAD_AND_SHOULDERS_INVERSE,
    PatternType.ASCENDING_TRIANGLE,
})

BEARISH_PATTERNS = frozenset({
    PatternType.DOUBLE_TOP,
    PatternType.HEAD_AND_SHOULDERS,
    PatternType.DESCENDING_TRIANGLE,
})


@dataclass(frozen=True)
class ChartPattern:
    """
    Detected chart pattern.

    Indices refer to positions in the analysed price series. `levels`
    holds the prices that define the shape (e.g. both tops of a double
    top, or the flat resistance of an ascending triangle).
    """
    pattern_type: PatternType
    start_index: int
    end_index: int
    confidence: float
    levels: Dict[str, float] = field(default_factory=dict)

    @property
    def is_bullish(self) -> bool:
        return self.pattern_type in BULLISH_PATTERNS

    @property
    def is_bearish(self) -> bool:
        return self.pattern_type in BEARISH_PATTERNS

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            'pattern_type': self.pattern_type.value,
            'start_index': self.start_index,
            'end_index': self.end_index,
            'confidence': float(self.confidence),
            'levels': {k: float(v) for k, v in self.levels.items()},
        }
