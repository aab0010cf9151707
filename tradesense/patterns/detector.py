"""
Chart Pattern Detector

Recognises composite shapes from local extrema:
    - Double top / double bottom
    - Head and shoulders (and the inverted form on troughs)
    - Ascending / descending triangles

Confidence scores are heuristic and clamped to [0.3, 0.95].
"""

from typing import List, Optional, Sequence
import logging

import numpy as np
from scipy import stats

from tradesense.indicators.levels import find_peaks, find_troughs
from tradesense.indicators.moving_averages import SeriesLike, as_array
from tradesense.indicators.schemas import Extremum
from tradesense.patterns.config import PatternConfig
from tradesense.patterns.schemas import ChartPattern, PatternType

LOG = logging.getLogger(__name__)


def pivot_slope(values: Sequence[float]) -> float:
    """Least-squares slope of values against their ordinal position"""
    if len(values) < 2:
        return 0.0
    return float(stats.linregress(np.arange(len(values)), values).slope)


class PatternDetector:
    """
    Chart pattern detector.

    Stateless apart from its configuration; safe to share across symbols.
    """

    def __init__(self, config: Optional[PatternConfig] = None):
        self.config = config or PatternConfig()
        self.config.validate()

    def detect(self, prices: SeriesLike) -> List[ChartPattern]:
        """
        Detect all patterns in a price series.

        Requires at least 3 * window prices; returns [] otherwise.
        """
        arr = as_array(prices)
        window = self.config.window
        if len(arr) < window * 3:
            return []

        peaks = find_peaks(arr, window)
        troughs = find_troughs(arr, window)

        patterns: List[ChartPattern] = []
        patterns.extend(self._double_extrema(peaks, PatternType.DOUBLE_TOP))
        patterns.extend(self._double_extrema(troughs, PatternType.DOUBLE_BOTTOM))
        patterns.extend(self._head_and_shoulders(peaks))
        if self.config.detect_inverse_head_and_shoulders:
            patterns.extend(self._inverse_head_and_shoulders(troughs))
        patterns.extend(self._triangles(arr))

        if patterns:
            LOG.debug(f"Detected {len(patterns)} patterns: {[p.pattern_type.value for p in patterns]}")
        return patterns

    # ------------------------------------------------------------------
    # Shapes
    # ------------------------------------------------------------------

    def _double_extrema(self, extrema: List[Extremum], pattern_type: PatternType) -> List[ChartPattern]:
        found = []
        for first, second in zip(extrema, extrema[1:]):
            diff = abs(first.price - second.price) / first.price if first.price else float('inf')
            if diff < self.config.double_tolerance and second.index - first.index > self.config.window:
                confidence = self.config.base_confidence + (self.config.double_tolerance - diff) * 10
                found.append(ChartPattern(
                    pattern_type=pattern_type,
                    start_index=first.index,
                    end_index=second.index,
                    confidence=self._clamp(confidence),
                    levels={'price1': first.price, 'price2': second.price},
                ))
        return found

    def _head_and_shoulders(self, peaks: List[Extremum]) -> List[ChartPattern]:
        found = []
        for left, head, right in zip(peaks, peaks[1:], peaks[2:]):
            if not (head.price > left.price and head.price > right.price):
                continue
            shoulder_diff = abs(left.price - right.price) / left.price if left.price else float('inf')
            if shoulder_diff >= self.config.shoulder_tolerance:
                continue
            head_height = (head.price - max(left.price, right.price)) / head.price if head.price else 0.0
            confidence = (self.config.base_confidence
                          + (self.config.shoulder_tolerance - shoulder_diff) * 5
                          + head_height * 2)
            found.append(ChartPattern(
                pattern_type=PatternType.HEAD_AND_SHOULDERS,
                start_index=left.index,
                end_index=right.index,
                confidence=self._clamp(confidence),
                levels={'left_shoulder': left.price, 'head': head.price, 'right_shoulder': right.price},
            ))
        return found

    def _inverse_head_and_shoulders(self, troughs: List[Extremum]) -> List[ChartPattern]:
        found = []
        for left, head, right in zip(troughs, troughs[1:], troughs[2:]):
            if not (head.price < left.price and head.price < right.price):
                continue
            shoulder_diff = abs(left.price - right.price) / left.price if left.price else float('inf')
            if shoulder_diff >= self.config.shoulder_tolerance:
                continue
            shallower = min(left.price, right.price)
            head_depth = (shallower - head.price) / shallower if shallower else 0.0
            confidence = (self.config.base_confidence
                          + (self.config.shoulder_tolerance - shoulder_diff) * 5
                          + head_depth * 2)
            found.append(ChartPattern(
                pattern_type=PatternType.HEAD_AND_SHOULDERS_INVERSE,
                start_index=left.index,
                end_index=right.index,
                confidence=self._clamp(confidence),
                levels={'left_shoulder': left.price, 'head': head.price, 'right_shoulder': right.price},
            ))
        return found

    def _triangles(self, prices: np.ndarray) -> List[ChartPattern]:
        window = self.config.window
        if len(prices) < window * 2:
            return []

        offset = len(prices) - window * 2
        recent = prices[offset:]
        pivot = self.config.triangle_pivot_window
        highs = find_peaks(recent, pivot)
        lows = find_troughs(recent, pivot)
        if len(highs) < 2 or len(lows) < 2:
            return []

        high_slope = pivot_slope([h.price for h in highs])
        low_slope = pivot_slope([l.price for l in lows])
        flat = self.config.triangle_flat_slope

        start = offset + min(highs[0].index, lows[0].index)
        end = offset + max(highs[-1].index, lows[-1].index)

        found = []
        if abs(high_slope) < flat and low_slope > flat:
            found.append(ChartPattern(
                pattern_type=PatternType.ASCENDING_TRIANGLE,
                start_index=start,
                end_index=end,
                confidence=self._clamp(self.config.triangle_confidence),
                levels={'resistance': float(np.mean([h.price for h in highs]))},
            ))
        if abs(low_slope) < flat and high_slope < -flat:
            found.append(ChartPattern(
                pattern_type=PatternType.DESCENDING_TRIANGLE,
                start_index=start,
                end_index=end,
                confidence=self._clamp(self.config.triangle_confidence),
                levels={'support': float(np.mean([l.price for l in lows]))},
            ))
        return found

    def _clamp(self, confidence: float) -> float:
        return float(max(self.config.min_confidence, min(self.config.max_confidence, confidence)))
