"""
Feature extraction for prediction providers.

All features derive from the price series itself; calendar features come
from the last bar's timestamp so that identical inputs give identical
features.
"""

import logging

import numpy as np

from tradesense.adapters.schemas import MarketFeatures
from tradesense.indicators.schemas import PriceSeries
from tradesense.indicators.volatility import classify_volatility, realized_volatility

LOG = logging.getLogger(__name__)

SHORT_WINDOW = 5
LONG_WINDOW = 20


def extract_features(series: PriceSeries, symbol: str, timeframe: str) -> MarketFeatures:
    """
    Build prediction features from a price series.

    returns:      simple bar-to-bar returns
    volume_ratio: mean of last 5 volumes / mean of all volumes
    volatility:   population std of returns (per bar)
    momentum:     (mean of last 5 closes - mean of last 20) / mean of last 20
    """
    closes = series.closes
    volumes = series.volumes

    if len(closes) >= 2 and np.all(closes[:-1] != 0):
        returns = np.diff(closes) / closes[:-1]
    else:
        returns = np.array([], dtype=float)

    volume_ratio = None
    if len(volumes):
        average = volumes.mean()
        if average > 0:
            volume_ratio = float(volumes[-SHORT_WINDOW:].mean() / average)

    volatility = float(np.std(returns, ddof=0)) if len(returns) else None

    momentum = None
    if len(closes):
        long_avg = closes[-LONG_WINDOW:].mean()
        if long_avg != 0:
            momentum = float((closes[-SHORT_WINDOW:].mean() - long_avg) / long_avg)

    last_ts = series.last_timestamp

    return MarketFeatures(
        symbol=symbol,
        timeframe=timeframe,
        returns=tuple(float(r) for r in returns),
        volume_ratio=volume_ratio,
        volatility=volatility,
        momentum=momentum,
        hour_of_day=last_ts.hour if last_ts else None,
        day_of_week=last_ts.weekday() if last_ts else None,
        volatility_level=classify_volatility(realized_volatility(closes, timeframe)),
    )
