"""
Moving Averages

SMA, EMA and MACD. Every function returns an empty result when the
input is shorter than the requested period.
"""

from typing import Sequence, Union
import logging

import numpy as np
import pandas as pd
from numpy.lib.stride_tricks import sliding_window_view

LOG = logging.getLogger(__name__)

SeriesLike = Union[Sequence[float], np.ndarray, pd.Series]

MACD_COLUMNS = ['macd', 'signal', 'histogram']


def as_array(values: SeriesLike) -> np.ndarray:
    """Coerce a sequence, ndarray or Series to a float ndarray"""
    if isinstance(values, pd.Series):
        return values.to_numpy(dtype=float)
    return np.asarray(values, dtype=float)


def calculate_sma(prices: SeriesLike, period: int) -> np.ndarray:
    """
    Simple moving average over a trailing window.

    Returns len(prices) - period + 1 values, or an empty array.
    """
    arr = as_array(prices)
    if period < 1 or len(arr) < period:
        return np.array([], dtype=float)
    return sliding_window_view(arr, period).mean(axis=1)


def calculate_ema(prices: SeriesLike, period: int) -> np.ndarray:
    """
    Exponential moving average.

    Multiplier 2/(period+1), seeded with the first raw value. Output is
    aligned one-to-one with the input once the series reaches `period`
    samples; shorter input yields an empty array.
    """
    arr = as_array(prices)
    if period < 1 or len(arr) < period:
        return np.array([], dtype=float)
    return pd.Series(arr).ewm(span=period, adjust=False).mean().to_numpy()


def calculate_macd(
    prices: SeriesLike,
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> pd.DataFrame:
    """
    MACD line, signal line and histogram.

    The MACD line starts at index slow_period - 1 of the input. The signal
    line is an EMA of the MACD line seeded with its first value.

    No partial output: until the MACD line has signal_period values the
    whole result is empty, so callers treat MACD as unavailable.
    """
    arr = as_array(prices)
    fast = calculate_ema(arr, fast_period)
    slow = calculate_ema(arr, slow_period)
    if len(slow) == 0 or len(fast) == 0:
        return pd.DataFrame(columns=MACD_COLUMNS, dtype=float)

    macd_line = fast[slow_period - 1:] - slow[slow_period - 1:]
    signal_line = calculate_ema(macd_line, signal_period)
    if len(signal_line) == 0:
        return pd.DataFrame(columns=MACD_COLUMNS, dtype=float)

    return pd.DataFrame({
        'macd': macd_line,
        'signal': signal_line,
        'histogram': macd_line - signal_line,
    })
