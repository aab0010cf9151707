"""
Volatility Indicators

Bollinger Bands, Average True Range and realised volatility.
"""

from typing import Optional
import logging

import numpy as np
import pandas as pd
from numpy.lib.stride_tricks import sliding_window_view

from tradesense.indicators.config import PERIODS_PER_YEAR
from tradesense.indicators.moving_averages import SeriesLike, as_array, calculate_ema
from tradesense.indicators.schemas import VolatilityLevel

LOG = logging.getLogger(__name__)

BOLLINGER_COLUMNS = ['middle', 'upper', 'lower', 'bandwidth', 'percent_b']


def calculate_bollinger_bands(
    prices: SeriesLike,
    period: int = 20,
    num_std: float = 2.0,
) -> pd.DataFrame:
    """
    Bollinger Bands using population standard deviation.

    Columns:
        middle, upper, lower: band values
        bandwidth: (upper - lower) / middle
        percent_b: (price - lower) / (upper - lower), unclamped; 0.5 when
            the band has zero width
    """
    arr = as_array(prices)
    if period < 1 or len(arr) < period:
        return pd.DataFrame(columns=BOLLINGER_COLUMNS, dtype=float)

    windows = sliding_window_view(arr, period)
    middle = windows.mean(axis=1)
    std = windows.std(axis=1, ddof=0)
    width = 2.0 * num_std * std
    upper = middle + num_std * std
    lower = middle - num_std * std
    price = arr[period - 1:]

    with np.errstate(divide='ignore', invalid='ignore'):
        bandwidth = np.where(middle != 0, width / middle, 0.0)
        percent_b = np.where(width > 0, (price - lower) / width, 0.5)

    return pd.DataFrame({
        'middle': middle,
        'upper': upper,
        'lower': lower,
        'bandwidth': bandwidth,
        'percent_b': percent_b,
    })


def true_range(highs: SeriesLike, lows: SeriesLike, closes: SeriesLike) -> np.ndarray:
    """
    True range for bars 1..n-1.

    TR = max(high - low, |high - prev_close|, |low - prev_close|)
    """
    h, l, c = as_array(highs), as_array(lows), as_array(closes)
    if len(h) < 2:
        return np.array([], dtype=float)
    prev_close = c[:-1]
    return np.maximum.reduce([
        h[1:] - l[1:],
        np.abs(h[1:] - prev_close),
        np.abs(l[1:] - prev_close),
    ])


def calculate_atr(
    highs: SeriesLike,
    lows: SeriesLike,
    closes: SeriesLike,
    period: int = 14,
) -> np.ndarray:
    """Average True Range as an EMA of true ranges"""
    return calculate_ema(true_range(highs, lows, closes), period)


def realized_volatility(prices: SeriesLike, timeframe: str = '1h') -> Optional[float]:
    """
    Annualised volatility of simple returns.

    Uses population std of returns scaled by sqrt(bars per year) for the
    timeframe. Returns None with fewer than two returns or an unknown
    timeframe.
    """
    arr = as_array(prices)
    if len(arr) < 3 or np.any(arr[:-1] == 0):
        return None

    periods = PERIODS_PER_YEAR.get(timeframe)
    if periods is None:
        LOG.debug(f"Unknown timeframe {timeframe!r}; realised volatility unavailable")
        return None

    returns = np.diff(arr) / arr[:-1]
    return float(np.std(returns, ddof=0) * np.sqrt(periods))


def classify_volatility(
    value: Optional[float],
    low_threshold: float = 0.15,
    high_threshold: float = 0.40,
) -> Optional[VolatilityLevel]:
    """Map annualised volatility to LOW / MEDIUM / HIGH"""
    if value is None or not np.isfinite(value):
        return None
    if value > high_threshold:
        return VolatilityLevel.HIGH
    if value < low_threshold:
        return VolatilityLevel.LOW
    return VolatilityLevel.MEDIUM
