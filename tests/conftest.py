"""
Shared fixtures for the TradeSense test suite.
"""

from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from tradesense.indicators.schemas import Bar, PriceSeries


BASE_TIME = datetime(2025, 1, 1, 0, 0, 0, tzinfo=timezone.utc)


def make_series(closes, volumes=None, spread=0.005, step=timedelta(hours=1)) -> PriceSeries:
    """Build a PriceSeries from closes; highs/lows sit `spread` around each close"""
    closes = np.asarray(closes, dtype=float)
    if volumes is None:
        volumes = np.full(len(closes), 1000.0)
    bars = tuple(
        Bar(
            timestamp=BASE_TIME + step * i,
            open=float(c),
            high=float(c * (1 + spread)),
            low=float(c * (1 - spread)),
            close=float(c),
            volume=float(v),
        )
        for i, (c, v) in enumerate(zip(closes, volumes))
    )
    return PriceSeries(bars=bars)


@pytest.fixture
def random_walk_closes():
    """200 closes of a seeded random walk starting at 100"""
    np.random.seed(42)
    returns = np.random.normal(0.0001, 0.01, 200)
    return 100.0 * np.cumprod(1 + returns)


@pytest.fixture
def sample_series(random_walk_closes):
    """Seeded OHLCV series with random volumes"""
    np.random.seed(7)
    volumes = np.random.uniform(1000, 10000, len(random_walk_closes))
    return make_series(random_walk_closes, volumes)


@pytest.fixture
def uptrend_series():
    """Strictly rising closes with constant volume"""
    return make_series(100.0 + np.arange(200) * 0.5)
