"""
Volume Metrics

Volume trend classification, volume-price trend and volume profile.
"""

from typing import List
import logging

import numpy as np

from tradesense.indicators.moving_averages import SeriesLike, as_array
from tradesense.indicators.schemas import (
    VolumeAnalysis,
    VolumeProfileBin,
    VolumeStrength,
    VolumeTrend,
)

LOG = logging.getLogger(__name__)

TREND_UPPER = 1.2
TREND_LOWER = 0.8
STRENGTH_HIGH = 2.0
STRENGTH_MEDIUM = 1.5
UNUSUAL_MULTIPLE = 3.0


def calculate_vpt(prices: SeriesLike, volumes: SeriesLike) -> np.ndarray:
    """
    Volume-price trend.

    VPT[0] = 0, VPT[i] = VPT[i-1] + volume[i] * (price[i] - price[i-1]) / price[i-1]
    """
    p, v = as_array(prices), as_array(volumes)
    if len(p) < 2 or len(p) != len(v):
        return np.zeros(min(len(p), 1), dtype=float)

    with np.errstate(divide='ignore', invalid='ignore'):
        change = np.where(p[:-1] != 0, np.diff(p) / p[:-1], 0.0)
    return np.concatenate([[0.0], np.cumsum(v[1:] * change)])


def calculate_volume_profile(
    prices: SeriesLike,
    volumes: SeriesLike,
    bins: int = 10,
) -> List[VolumeProfileBin]:
    """Distribute volume across equal-width price bins"""
    p, v = as_array(prices), as_array(volumes)
    if len(p) == 0 or len(p) != len(v) or bins < 1:
        return []

    low, high = float(p.min()), float(p.max())
    bin_size = (high - low) / bins
    if bin_size == 0:
        return [VolumeProfileBin(low, high, float(v.sum()))]

    idx = np.minimum(((p - low) / bin_size).astype(int), bins - 1)
    totals = np.bincount(idx, weights=v, minlength=bins)
    return [
        VolumeProfileBin(low + i * bin_size, low + (i + 1) * bin_size, float(totals[i]))
        for i in range(bins)
    ]


def analyze_volume(
    prices: SeriesLike,
    volumes: SeriesLike,
    min_samples: int = 20,
    recent_window: int = 5,
    profile_bins: int = 10,
) -> VolumeAnalysis:
    """
    Classify recent volume against the full-series average.

    Trend:
        INCREASING if recent > 1.2x average, DECREASING if < 0.8x, else STABLE
    Strength:
        HIGH if recent > 2x average, MEDIUM if > 1.5x, else LOW
    Unusual activity:
        latest sample > 3x average

    Fewer than `min_samples` volumes yields trend UNKNOWN (unavailable).
    """
    v = as_array(volumes)
    if len(v) < min_samples:
        return VolumeAnalysis()

    average = float(v.mean())
    recent = float(v[-recent_window:].mean())

    if recent > average * TREND_UPPER:
        trend = VolumeTrend.INCREASING
    elif recent < average * TREND_LOWER:
        trend = VolumeTrend.DECREASING
    else:
        trend = VolumeTrend.STABLE

    if recent > average * STRENGTH_HIGH:
        strength = VolumeStrength.HIGH
    elif recent > average * STRENGTH_MEDIUM:
        strength = VolumeStrength.MEDIUM
    else:
        strength = VolumeStrength.LOW

    return VolumeAnalysis(
        trend=trend,
        strength=strength,
        average_volume=average,
        recent_volume=recent,
        unusual_activity=bool(v[-1] > average * UNUSUAL_MULTIPLE),
        vpt=calculate_vpt(prices, v),
        profile=calculate_volume_profile(prices, v, profile_bins),
    )
