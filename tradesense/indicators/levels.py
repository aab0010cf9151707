"""
Price Levels

Local extrema, support/resistance clustering and Fibonacci levels.
"""

from typing import List, Optional, Sequence
import logging

import numpy as np

from tradesense.indicators.moving_averages import SeriesLike, as_array
from tradesense.indicators.schemas import (
    Extremum,
    FibonacciLevels,
    PriceLevel,
    SupportResistance,
)

LOG = logging.getLogger(__name__)

FIBONACCI_RATIOS = (0.0, 0.236, 0.382, 0.5, 0.618, 0.786, 1.0)


def _extrema(prices: SeriesLike, window: int, pick) -> List[Extremum]:
    arr = as_array(prices)
    found = []
    for i in range(window, len(arr) - window):
        segment = arr[i - window:i + window + 1]
        if arr[i] == pick(segment):
            found.append(Extremum(index=i, price=float(arr[i])))
    return found


def find_peaks(prices: SeriesLike, window: int) -> List[Extremum]:
    """Points equal to the max of the symmetric window around them"""
    return _extrema(prices, window, np.max)


def find_troughs(prices: SeriesLike, window: int) -> List[Extremum]:
    """Points equal to the min of the symmetric window around them"""
    return _extrema(prices, window, np.min)


def cluster_levels(extrema: Sequence[Extremum], threshold: float = 0.02) -> List[PriceLevel]:
    """
    Group extrema by relative price proximity.

    Extrema are sorted by price; each one joins the current cluster while
    it lies within `threshold` of its predecessor. Cluster price is the
    member mean, strength the member count. Strongest cluster first.
    """
    if not extrema:
        return []

    ordered = sorted(extrema, key=lambda e: e.price)
    clusters: List[List[Extremum]] = [[ordered[0]]]
    for prev, cur in zip(ordered, ordered[1:]):
        diff = abs(cur.price - prev.price) / prev.price if prev.price else float('inf')
        if diff <= threshold:
            clusters[-1].append(cur)
        else:
            clusters.append([cur])

    levels = [
        PriceLevel(price=float(np.mean([e.price for e in members])), strength=len(members))
        for members in clusters
    ]
    return sorted(levels, key=lambda level: level.strength, reverse=True)


def find_support_resistance(
    prices: SeriesLike,
    window: int = 20,
    threshold: float = 0.02,
) -> SupportResistance:
    """
    Ranked support (from troughs) and resistance (from peaks) levels.

    Falls back to the global min/max when the series is shorter than
    2 * window or no extrema were found on a side.
    """
    arr = as_array(prices)
    if len(arr) == 0:
        return SupportResistance()

    global_low = PriceLevel(price=float(arr.min()), strength=1)
    global_high = PriceLevel(price=float(arr.max()), strength=1)

    if len(arr) < window * 2:
        return SupportResistance(support=[global_low], resistance=[global_high], fallback=True)

    resistance = cluster_levels(find_peaks(arr, window), threshold)
    support = cluster_levels(find_troughs(arr, window), threshold)
    fallback = not resistance or not support

    return SupportResistance(
        support=support or [global_low],
        resistance=resistance or [global_high],
        fallback=fallback,
    )


def calculate_fibonacci(
    prices: SeriesLike,
    lookback: int = 50,
    ratios: Sequence[float] = FIBONACCI_RATIOS,
) -> Optional[FibonacciLevels]:
    """
    Fibonacci retracements and extensions over the last `lookback` prices.

    retracement(r) = high - range * r
    extension(r)   = high + range * r   (r > 0)
    """
    arr = as_array(prices)
    if lookback < 1 or len(arr) < lookback:
        return None

    recent = arr[-lookback:]
    high, low = float(recent.max()), float(recent.min())
    span = high - low
    return FibonacciLevels(
        high=high,
        low=low,
        retracements={r: high - span * r for r in ratios},
        extensions={r: high + span * r for r in ratios if r > 0},
    )
