"""
Technical Signal Rules

One threshold rule per indicator. Each rule returns a Signal, or None
when its indicator is unavailable (the indicator abstains).

Per-indicator confidence equals the rule strength.
"""

from typing import List, Optional
import logging

import numpy as np
import pandas as pd

from tradesense.indicators.schemas import (
    SupportResistance,
    VolumeAnalysis,
    VolumeStrength,
    VolumeTrend,
)
from tradesense.patterns.schemas import ChartPattern
from tradesense.signal_engine.config import (
    BandRuleConfig,
    LevelRuleConfig,
    MovingAverageRuleConfig,
    OscillatorRuleConfig,
    PatternRuleConfig,
    VolumeRuleConfig,
)
from tradesense.signal_engine.schemas import Signal, SignalDirection

LOG = logging.getLogger(__name__)


def _vote(direction: SignalDirection, strength: float, source: str,
          label: Optional[str] = None, **metadata) -> Signal:
    return Signal(
        direction=direction,
        strength=strength,
        confidence=strength,
        source=source,
        label=label,
        metadata=metadata,
    )


def _latest(values) -> Optional[float]:
    if values is None or len(values) == 0:
        return None
    value = float(values[-1])
    return value if np.isfinite(value) else None


def sma_crossover_signal(fast: np.ndarray, slow: np.ndarray,
                         cfg: MovingAverageRuleConfig) -> Optional[Signal]:
    """BUY when fast SMA > slow * 1.01, SELL when < slow * 0.99"""
    f, s = _latest(fast), _latest(slow)
    if f is None or s is None:
        return None
    if f > s * cfg.sma_buy_ratio:
        return _vote(SignalDirection.BUY, cfg.sma_strength, 'sma_crossover', fast=f, slow=s)
    if f < s * cfg.sma_sell_ratio:
        return _vote(SignalDirection.SELL, cfg.sma_strength, 'sma_crossover', fast=f, slow=s)
    return _vote(SignalDirection.HOLD, cfg.sma_hold_strength, 'sma_crossover', fast=f, slow=s)


def ema_crossover_signal(fast: np.ndarray, slow: np.ndarray,
                         cfg: MovingAverageRuleConfig) -> Optional[Signal]:
    """BUY when fast EMA > slow * 1.005, SELL when < slow * 0.995"""
    f, s = _latest(fast), _latest(slow)
    if f is None or s is None:
        return None
    if f > s * cfg.ema_buy_ratio:
        return _vote(SignalDirection.BUY, cfg.ema_strength, 'ema_crossover', fast=f, slow=s)
    if f < s * cfg.ema_sell_ratio:
        return _vote(SignalDirection.SELL, cfg.ema_strength, 'ema_crossover', fast=f, slow=s)
    return _vote(SignalDirection.HOLD, cfg.ema_hold_strength, 'ema_crossover', fast=f, slow=s)


def macd_signal(macd: pd.DataFrame, cfg: MovingAverageRuleConfig) -> Optional[Signal]:
    """BUY when the MACD line is above signal with positive histogram"""
    if macd is None or macd.empty:
        return None
    row = macd.iloc[-1]
    line, signal, hist = float(row['macd']), float(row['signal']), float(row['histogram'])
    if line > signal and hist > 0:
        return _vote(SignalDirection.BUY, cfg.macd_strength, 'macd', histogram=hist)
    if line < signal and hist < 0:
        return _vote(SignalDirection.SELL, cfg.macd_strength, 'macd', histogram=hist)
    return _vote(SignalDirection.HOLD, cfg.macd_hold_strength, 'macd', histogram=hist)


def rsi_signal(rsi: np.ndarray, cfg: OscillatorRuleConfig) -> Optional[Signal]:
    """Oversold below 30 (BUY), overbought above 70 (SELL)"""
    value = _latest(rsi)
    if value is None:
        return None
    if value < cfg.rsi_oversold:
        return _vote(SignalDirection.BUY, cfg.rsi_strength, 'rsi', 'OVERSOLD', rsi=value)
    if value > cfg.rsi_overbought:
        return _vote(SignalDirection.SELL, cfg.rsi_strength, 'rsi', 'OVERBOUGHT', rsi=value)
    if cfg.rsi_neutral_low < value < cfg.rsi_neutral_high:
        return _vote(SignalDirection.HOLD, cfg.rsi_neutral_strength, 'rsi', rsi=value)
    return _vote(SignalDirection.HOLD, cfg.rsi_hold_strength, 'rsi', rsi=value)


def bollinger_signal(price: Optional[float], bands: pd.DataFrame,
                     cfg: BandRuleConfig) -> Optional[Signal]:
    """Band touches are full signals; side of the middle band is a weak one"""
    if price is None or bands is None or bands.empty:
        return None
    row = bands.iloc[-1]
    upper, middle, lower = float(row['upper']), float(row['middle']), float(row['lower'])
    if price <= lower:
        return _vote(SignalDirection.BUY, cfg.band_strength, 'bollinger', 'LOWER_BAND')
    if price >= upper:
        return _vote(SignalDirection.SELL, cfg.band_strength, 'bollinger', 'UPPER_BAND')
    if price > middle:
        return _vote(SignalDirection.BUY, cfg.weak_strength, 'bollinger', 'WEAK_BUY')
    if price < middle:
        return _vote(SignalDirection.SELL, cfg.weak_strength, 'bollinger', 'WEAK_SELL')
    return _vote(SignalDirection.HOLD, cfg.hold_strength, 'bollinger')


def support_resistance_signal(price: Optional[float], levels: SupportResistance,
                              cfg: LevelRuleConfig) -> Optional[Signal]:
    """
    Breakouts beat bounces.

    Above resistance * 1.002 -> BUY 0.8; below support * 0.998 -> SELL 0.8;
    within 1% of support -> BUY 0.6; within 1% of resistance -> SELL 0.6.
    """
    if price is None or levels is None or not levels.available:
        return None
    support, resistance = levels.nearest_support, levels.nearest_resistance
    meta = {'support': support, 'resistance': resistance}

    if price > resistance * (1 + cfg.breakout_ratio):
        return _vote(SignalDirection.BUY, cfg.breakout_strength, 'support_resistance', 'BREAKOUT', **meta)
    if price < support * (1 - cfg.breakout_ratio):
        return _vote(SignalDirection.SELL, cfg.breakout_strength, 'support_resistance', 'BREAKDOWN', **meta)
    if support * (1 - cfg.proximity) <= price <= support * (1 + cfg.proximity):
        return _vote(SignalDirection.BUY, cfg.proximity_strength, 'support_resistance', 'NEAR_SUPPORT', **meta)
    if resistance * (1 - cfg.proximity) <= price <= resistance * (1 + cfg.proximity):
        return _vote(SignalDirection.SELL, cfg.proximity_strength, 'support_resistance', 'NEAR_RESISTANCE', **meta)
    return _vote(SignalDirection.HOLD, cfg.hold_strength, 'support_resistance', **meta)


def volume_signal(volume: VolumeAnalysis, cfg: VolumeRuleConfig) -> Optional[Signal]:
    """Volume confirms activity but never picks a side"""
    if volume is None or not volume.available:
        return None
    if volume.unusual_activity and volume.trend == VolumeTrend.INCREASING:
        return _vote(SignalDirection.NEUTRAL, cfg.unusual_strength, 'volume', 'STRONG_SIGNAL')
    if volume.strength == VolumeStrength.HIGH and volume.trend == VolumeTrend.INCREASING:
        return _vote(SignalDirection.NEUTRAL, cfg.confirmation_strength, 'volume', 'CONFIRMATION')
    if volume.strength == VolumeStrength.LOW:
        return _vote(SignalDirection.NEUTRAL, cfg.weak_strength, 'volume', 'WEAK_SIGNAL')
    return _vote(SignalDirection.NEUTRAL, cfg.neutral_strength, 'volume')


def pattern_signal(patterns: List[ChartPattern], cfg: PatternRuleConfig) -> Optional[Signal]:
    """First directional pattern wins; no patterns abstains"""
    if not patterns:
        return None
    for pattern in patterns:
        if pattern.is_bullish:
            return _vote(SignalDirection.BUY, cfg.pattern_strength, 'pattern',
                         pattern.pattern_type.value, pattern_confidence=pattern.confidence)
        if pattern.is_bearish:
            return _vote(SignalDirection.SELL, cfg.pattern_strength, 'pattern',
                         pattern.pattern_type.value, pattern_confidence=pattern.confidence)
    return _vote(SignalDirection.HOLD, cfg.hold_strength, 'pattern')
