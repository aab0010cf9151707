"""
Signal Engine Configuration

Threshold rules that turn indicator readings into directional signals.
"""

from dataclasses import dataclass, field
import hashlib
import json

from tradesense.indicators.config import IndicatorConfig
from tradesense.patterns.config import PatternConfig


@dataclass
class MovingAverageRuleConfig:
    """Crossover bands for SMA and EMA pairs"""

    # SMA fast/slow
    sma_buy_ratio: float = 1.01   # fast > slow * 1.01
    sma_sell_ratio: float = 0.99  # fast < slow * 0.99
    sma_strength: float = 0.7
    sma_hold_strength: float = 0.3

    # EMA fast/slow
    ema_buy_ratio: float = 1.005
    ema_sell_ratio: float = 0.995
    ema_strength: float = 0.8
    ema_hold_strength: float = 0.4

    # MACD
    macd_strength: float = 0.75
    macd_hold_strength: float = 0.4


@dataclass
class OscillatorRuleConfig:
    """RSI zones"""
    rsi_oversold: float = 30.0
    rsi_overbought: float = 70.0
    rsi_strength: float = 0.8
    rsi_neutral_low: float = 45.0
    rsi_neutral_high: float = 55.0
    rsi_neutral_strength: float = 0.6
    rsi_hold_strength: float = 0.4


@dataclass
class BandRuleConfig:
    """Bollinger band touches"""
    band_strength: float = 0.7
    weak_strength: float = 0.4
    hold_strength: float = 0.3


@dataclass
class LevelRuleConfig:
    """Support / resistance breakouts and bounces"""
    breakout_ratio: float = 0.002  # beyond the level by 0.2%
    breakout_strength: float = 0.8
    proximity: float = 0.01  # within 1% of the level
    proximity_strength: float = 0.6
    hold_strength: float = 0.3


@dataclass
class VolumeRuleConfig:
    """Volume confirmation strengths (direction-neutral)"""
    unusual_strength: float = 0.9
    confirmation_strength: float = 0.7
    weak_strength: float = 0.3
    neutral_strength: float = 0.5


@dataclass
class PatternRuleConfig:
    pattern_strength: float = 0.8
    hold_strength: float = 0.4


@dataclass
class SignalEngineConfig:
    """
    Complete technical signal generator configuration.

    Groups indicator periods, pattern thresholds and the per-indicator
    threshold rules.
    """

    indicators: IndicatorConfig = field(default_factory=IndicatorConfig)
    patterns: PatternConfig = field(default_factory=PatternConfig)
    moving_averages: MovingAverageRuleConfig = field(default_factory=MovingAverageRuleConfig)
    oscillators: OscillatorRuleConfig = field(default_factory=OscillatorRuleConfig)
    bands: BandRuleConfig = field(default_factory=BandRuleConfig)
    levels: LevelRuleConfig = field(default_factory=LevelRuleConfig)
    volume: VolumeRuleConfig = field(default_factory=VolumeRuleConfig)
    pattern_rules: PatternRuleConfig = field(default_factory=PatternRuleConfig)

    # Signal source identification
    signal_source_name: str = "technical_v1"
    config_version: str = "1.0.0"

    def validate(self):
        self.indicators.validate()
        self.patterns.validate()
        if not self.oscillators.rsi_oversold < self.oscillators.rsi_overbought:
            raise ValueError(
                f"rsi_oversold must be < rsi_overbought, got "
                f"{self.oscillators.rsi_oversold} >= {self.oscillators.rsi_overbought}"
            )

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            'indicators': self.indicators.to_dict(),
            'patterns': self.patterns.to_dict(),
            'moving_averages': vars(self.moving_averages).copy(),
            'oscillators': vars(self.oscillators).copy(),
            'bands': vars(self.bands).copy(),
            'levels': vars(self.levels).copy(),
            'volume': vars(self.volume).copy(),
            'pattern_rules': vars(self.pattern_rules).copy(),
            'signal_source_name': self.signal_source_name,
            'config_version': self.config_version,
        }

    def compute_hash(self) -> str:
        """
        Compute deterministic hash of configuration.

        Used for versioning and reproducibility.
        """
        config_json = json.dumps(self.to_dict(), sort_keys=True)
        return hashlib.sha256(config_json.encode()).hexdigest()[:12]
