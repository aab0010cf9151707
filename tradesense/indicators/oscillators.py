"""
Oscillators

RSI, Stochastic, Williams %R and CCI.

Range-based oscillators resolve zero-width windows to their neutral
value instead of propagating NaN:
    - Stochastic %K -> 50
    - Williams %R   -> -50
    - CCI           -> 0
"""

import logging

import numpy as np
import pandas as pd
from numpy.lib.stride_tricks import sliding_window_view

from tradesense.indicators.moving_averages import SeriesLike, as_array, calculate_sma

LOG = logging.getLogger(__name__)

CCI_CONSTANT = 0.015


def calculate_rsi(prices: SeriesLike, period: int = 14) -> np.ndarray:
    """
    Relative Strength Index with Wilder smoothing.

    The first value uses a plain average of the first `period` gains and
    losses; each later value updates avg = (avg * (period - 1) + new) / period.
    A zero average loss yields RSI = 100. Empty when len < period + 1.
    """
    arr = as_array(prices)
    if period < 1 or len(arr) < period + 1:
        return np.array([], dtype=float)

    changes = np.diff(arr)
    gains = np.where(changes > 0, changes, 0.0)
    losses = np.where(changes < 0, -changes, 0.0)

    avg_gain = gains[:period].mean()
    avg_loss = losses[:period].mean()

    rsi = [_rsi_value(avg_gain, avg_loss)]
    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        rsi.append(_rsi_value(avg_gain, avg_loss))

    return np.array(rsi, dtype=float)


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def _window_extremes(highs: np.ndarray, lows: np.ndarray, period: int):
    highest = sliding_window_view(highs, period).max(axis=1)
    lowest = sliding_window_view(lows, period).min(axis=1)
    return highest, lowest


def calculate_stochastic(
    highs: SeriesLike,
    lows: SeriesLike,
    closes: SeriesLike,
    k_period: int = 14,
    d_period: int = 3,
) -> pd.DataFrame:
    """
    Stochastic oscillator.

    Returns DataFrame with columns k and d. d is the SMA of k and is NaN
    for the first d_period - 1 rows.
    """
    h, l, c = as_array(highs), as_array(lows), as_array(closes)
    if k_period < 1 or len(h) < k_period:
        return pd.DataFrame(columns=['k', 'd'], dtype=float)

    highest, lowest = _window_extremes(h, l, k_period)
    close = c[k_period - 1:]
    span = highest - lowest
    with np.errstate(divide='ignore', invalid='ignore'):
        k = np.where(span > 0, (close - lowest) / span * 100.0, 50.0)

    d = np.full(len(k), np.nan)
    d_values = calculate_sma(k, d_period)
    if len(d_values):
        d[d_period - 1:] = d_values

    return pd.DataFrame({'k': k, 'd': d})


def calculate_williams_r(
    highs: SeriesLike,
    lows: SeriesLike,
    closes: SeriesLike,
    period: int = 14,
) -> np.ndarray:
    """Williams %R in [-100, 0]"""
    h, l, c = as_array(highs), as_array(lows), as_array(closes)
    if period < 1 or len(h) < period:
        return np.array([], dtype=float)

    highest, lowest = _window_extremes(h, l, period)
    close = c[period - 1:]
    span = highest - lowest
    with np.errstate(divide='ignore', invalid='ignore'):
        return np.where(span > 0, (highest - close) / span * -100.0, -50.0)


def calculate_cci(
    highs: SeriesLike,
    lows: SeriesLike,
    closes: SeriesLike,
    period: int = 20,
) -> np.ndarray:
    """
    Commodity Channel Index.

    CCI = (TP - SMA(TP)) / (0.015 * mean deviation), TP = (H + L + C) / 3
    """
    h, l, c = as_array(highs), as_array(lows), as_array(closes)
    if period < 1 or len(h) < period:
        return np.array([], dtype=float)

    typical = (h + l + c) / 3.0
    windows = sliding_window_view(typical, period)
    sma = windows.mean(axis=1)
    mean_dev = np.abs(windows - sma[:, None]).mean(axis=1)
    current = typical[period - 1:]

    with np.errstate(divide='ignore', invalid='ignore'):
        return np.where(mean_dev > 0, (current - sma) / (CCI_CONSTANT * mean_dev), 0.0)
