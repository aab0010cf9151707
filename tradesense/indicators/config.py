"""
Indicator Library Configuration

Default periods and thresholds for every indicator.
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, List
import hashlib
import json


@dataclass
class IndicatorConfig:
    """
    Indicator periods used by the technical signal generator.

    Functions in this package take explicit periods; this object only
    collects the values the generator passes in.
    """

    # Moving averages
    sma_fast: int = 20
    sma_slow: int = 50
    ema_fast: int = 12
    ema_slow: int = 26
    macd_signal: int = 9

    # Oscillators
    rsi_period: int = 14
    stochastic_k: int = 14
    stochastic_d: int = 3
    williams_period: int = 14
    cci_period: int = 20
    atr_period: int = 14

    # Bands
    bollinger_period: int = 20
    bollinger_std: float = 2.0

    # Volume
    volume_min_samples: int = 20
    volume_recent_window: int = 5
    volume_profile_bins: int = 10

    # Levels
    sr_window: int = 20
    sr_threshold: float = 0.02
    fibonacci_lookback: int = 50
    fibonacci_ratios: List[float] = field(
        default_factory=lambda: [0.0, 0.236, 0.382, 0.5, 0.618, 0.786, 1.0]
    )

    # Volatility classification (annualised)
    volatility_low: float = 0.15
    volatility_high: float = 0.40

    config_version: str = "1.0.0"

    def validate(self):
        """Raise ValueError on non-positive periods or inverted bounds"""
        for name in ('sma_fast', 'sma_slow', 'ema_fast', 'ema_slow', 'macd_signal',
                     'rsi_period', 'stochastic_k', 'stochastic_d', 'williams_period',
                     'cci_period', 'atr_period', 'bollinger_period', 'volume_min_samples',
                     'volume_recent_window', 'sr_window', 'fibonacci_lookback'):
            value = getattr(self, name)
            if value < 1:
                raise ValueError(f"{name} must be >= 1, got {value}")
        if self.sma_fast >= self.sma_slow:
            raise ValueError(f"sma_fast must be < sma_slow, got {self.sma_fast} >= {self.sma_slow}")
        if self.ema_fast >= self.ema_slow:
            raise ValueError(f"ema_fast must be < ema_slow, got {self.ema_fast} >= {self.ema_slow}")
        if not 0 < self.volatility_low < self.volatility_high:
            raise ValueError(
                f"volatility thresholds must satisfy 0 < low < high, "
                f"got {self.volatility_low}, {self.volatility_high}"
            )

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return asdict(self)

    def get_config_hash(self) -> str:
        """Deterministic hash of indicator settings"""
        config_str = json.dumps(self.to_dict(), sort_keys=True)
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]


# Bars per year for annualising realised volatility
PERIODS_PER_YEAR: Dict[str, float] = {
    '1m': 525600,
    '5m': 105120,
    '15m': 35040,
    '30m': 17520,
    '1h': 8760,
    '4h': 2190,
    '1d': 365,
    '1w': 52,
}
