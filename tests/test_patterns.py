"""
Test suite for the chart pattern detector.

Price paths are piecewise-linear between hand-placed knots so every
peak and trough is known in advance.

Run: pytest tests/test_patterns.py -v
"""

import numpy as np
import pytest

from tradesense.patterns import (
    PatternConfig,
    PatternDetector,
    PatternType,
    pivot_slope,
)


def path(knots, prefix=None):
    """Linear interpolation through {index: price} knots"""
    xs = sorted(knots)
    values = np.interp(np.arange(xs[-1] + 1), xs, [knots[x] for x in xs])
    if prefix is not None:
        values = np.concatenate([np.full(prefix[0], prefix[1]), values])
    return values


DOUBLE_TOP = {0: 100, 25: 120, 50: 105, 75: 120.5, 100: 100}
DOUBLE_BOTTOM = {0: 100, 25: 80, 50: 95, 75: 79.8, 100: 100}
HEAD_AND_SHOULDERS = {0: 100, 30: 115, 55: 105, 80: 125, 105: 105, 130: 115.5, 160: 100}
ASCENDING = {0: 105, 5: 100, 10: 110, 15: 102, 20: 110, 25: 104, 30: 110, 35: 106, 39: 108}
DESCENDING = {0: 105, 5: 110, 10: 100, 15: 108, 20: 100, 25: 106, 30: 100, 35: 104, 39: 102}


def types(patterns):
    return {p.pattern_type for p in patterns}


# ============================================================================
# TEST CONFIGURATION
# ============================================================================

class TestPatternConfig:

    def test_defaults(self):
        config = PatternConfig()
        assert config.window == 20
        assert config.min_confidence == 0.3
        assert config.max_confidence == 0.95

    def test_invalid_window(self):
        with pytest.raises(ValueError, match="window must be >= 1"):
            PatternDetector(PatternConfig(window=0))

    def test_hash_stable(self):
        assert PatternConfig().get_config_hash() == PatternConfig().get_config_hash()


# ============================================================================
# TEST DETECTION
# ============================================================================

class TestDoubleExtrema:
    """Double top and double bottom"""

    def test_double_top(self):
        patterns = PatternDetector().detect(path(DOUBLE_TOP))
        assert types(patterns) == {PatternType.DOUBLE_TOP}

        top = patterns[0]
        assert top.start_index == 25
        assert top.end_index == 75
        # 0.6 + (0.02 - 0.5 / 120) * 10
        assert top.confidence == pytest.approx(0.6 + (0.02 - 0.5 / 120) * 10)
        assert top.is_bearish

    def test_double_bottom(self):
        patterns = PatternDetector().detect(path(DOUBLE_BOTTOM))
        assert types(patterns) == {PatternType.DOUBLE_BOTTOM}
        assert patterns[0].confidence == pytest.approx(0.775)
        assert patterns[0].is_bullish

    def test_tops_too_far_apart_in_price(self):
        knots = dict(DOUBLE_TOP)
        knots[75] = 130
        assert PatternType.DOUBLE_TOP not in types(PatternDetector().detect(path(knots)))


class TestHeadAndShoulders:

    def test_head_and_shoulders(self):
        patterns = PatternDetector().detect(path(HEAD_AND_SHOULDERS))
        # the two neckline troughs also form a double bottom
        assert types(patterns) == {PatternType.HEAD_AND_SHOULDERS, PatternType.DOUBLE_BOTTOM}

        hs = next(p for p in patterns if p.pattern_type == PatternType.HEAD_AND_SHOULDERS)
        assert hs.confidence == pytest.approx(0.95)
        assert hs.levels['head'] == pytest.approx(125.0)
        assert (hs.start_index, hs.end_index) == (30, 130)

    def test_inverse_head_and_shoulders(self):
        inverted = {k: 200 - v for k, v in HEAD_AND_SHOULDERS.items()}
        patterns = PatternDetector().detect(path(inverted))
        assert types(patterns) == {PatternType.HEAD_AND_SHOULDERS_INVERSE, PatternType.DOUBLE_TOP}

        inverse = next(p for p in patterns if p.pattern_type == PatternType.HEAD_AND_SHOULDERS_INVERSE)
        assert inverse.confidence == pytest.approx(0.95)
        assert inverse.is_bullish

    def test_inverse_detection_can_be_disabled(self):
        inverted = {k: 200 - v for k, v in HEAD_AND_SHOULDERS.items()}
        detector = PatternDetector(PatternConfig(detect_inverse_head_and_shoulders=False))
        assert types(detector.detect(path(inverted))) == {PatternType.DOUBLE_TOP}


class TestTriangles:

    def test_ascending_triangle(self):
        patterns = PatternDetector().detect(path(ASCENDING, prefix=(20, 105.0)))
        assert types(patterns) == {PatternType.ASCENDING_TRIANGLE}

        triangle = patterns[0]
        assert triangle.confidence == pytest.approx(0.7)
        assert triangle.levels['resistance'] == pytest.approx(110.0)
        # indices are positions in the full series
        assert (triangle.start_index, triangle.end_index) == (25, 50)

    def test_descending_triangle(self):
        patterns = PatternDetector().detect(path(DESCENDING, prefix=(20, 105.0)))
        assert types(patterns) == {PatternType.DESCENDING_TRIANGLE}
        assert patterns[0].levels['support'] == pytest.approx(100.0)


class TestDetectorEdgeCases:

    def test_short_series(self):
        assert PatternDetector().detect(np.linspace(100, 110, 59)) == []

    def test_monotone_series(self):
        assert PatternDetector().detect(np.linspace(100, 200, 200)) == []

    def test_zero_price_extrema(self):
        # troughs at zero have no relative distance and never pair up
        assert PatternDetector().detect(path({0: 20, 25: 0, 50: 15, 75: 0, 100: 20})) == []

    def test_confidence_bounds(self, random_walk_closes):
        for pattern in PatternDetector(PatternConfig(window=5)).detect(random_walk_closes):
            assert 0.3 <= pattern.confidence <= 0.95
            assert pattern.start_index <= pattern.end_index

    def test_to_dict(self):
        pattern = PatternDetector().detect(path(DOUBLE_TOP))[0]
        data = pattern.to_dict()
        assert data['pattern_type'] == 'DOUBLE_TOP'
        assert set(data['levels']) == {'price1', 'price2'}


def test_pivot_slope():
    assert pivot_slope([1.0, 3.0, 5.0]) == pytest.approx(2.0)
    assert pivot_slope([4.0]) == 0.0
