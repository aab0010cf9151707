"""
Indicator Library

Pure, stateless functions over numeric price and volume series.

Contract:
    - Inputs: sequences, numpy arrays or pandas Series
    - Output aligned to a suffix of the input (shorter by the warm-up)
    - Insufficient length returns an empty result, never raises
    - Degenerate arithmetic resolves to defined values (RSI = 100 on zero
      average loss, %b = 0.5 on zero band width)

Families:
    1. Moving averages (SMA, EMA, MACD)
    2. Oscillators (RSI, Stochastic, Williams %R, CCI)
    3. Volatility (Bollinger Bands, ATR, realised volatility)
    4. Volume (trend, VPT, volume profile)
    5. Levels (extrema, support/resistance clusters, Fibonacci)
"""

from tradesense.indicators.config import IndicatorConfig, PERIODS_PER_YEAR
from tradesense.indicators.schemas import (
    Bar,
    PriceSeries,
    VolumeTrend,
    VolumeStrength,
    VolatilityLevel,
    VolumeAnalysis,
    VolumeProfileBin,
    Extremum,
    PriceLevel,
    SupportResistance,
    FibonacciLevels,
)
from tradesense.indicators.moving_averages import (
    calculate_sma,
    calculate_ema,
    calculate_macd,
)
from tradesense.indicators.oscillators import (
    calculate_rsi,
    calculate_stochastic,
    calculate_williams_r,
    calculate_cci,
)
from tradesense.indicators.volatility import (
    calculate_bollinger_bands,
    calculate_atr,
    true_range,
    realized_volatility,
    classify_volatility,
)
from tradesense.indicators.volume import (
    analyze_volume,
    calculate_vpt,
    calculate_volume_profile,
)
from tradesense.indicators.levels import (
    find_peaks,
    find_troughs,
    cluster_levels,
    find_support_resistance,
    calculate_fibonacci,
)

__version__ = "1.0.0"

__all__ = [
    'IndicatorConfig',
    'PERIODS_PER_YEAR',
    'Bar',
    'PriceSeries',
    'VolumeTrend',
    'VolumeStrength',
    'VolatilityLevel',
    'VolumeAnalysis',
    'VolumeProfileBin',
    'Extremum',
    'PriceLevel',
    'SupportResistance',
    'FibonacciLevels',
    'calculate_sma',
    'calculate_ema',
    'calculate_macd',
    'calculate_rsi',
    'calculate_stochastic',
    'calculate_williams_r',
    'calculate_cci',
    'calculate_bollinger_bands',
    'calculate_atr',
    'true_range',
    'realized_volatility',
    'classify_volatility',
    'analyze_volume',
    'calculate_vpt',
    'calculate_volume_profile',
    'find_peaks',
    'find_troughs',
    'cluster_levels',
    'find_support_resistance',
    'calculate_fibonacci',
]
