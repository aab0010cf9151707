"""
Technical Signal Generator

Computes the indicator set over a price series, applies one threshold
rule per indicator and aggregates the votes into a single verdict.

Aggregation:
    1. Partition votes into BUY / SELL / HOLD buckets (NEUTRAL -> HOLD)
    2. Sum strengths per bucket
    3. The strictly largest bucket wins; any tie resolves to HOLD
    4. Confidence = winning sum / total sum (0 when nobody voted)

Abstaining indicators (insufficient data) are excluded from the sums.
"""

from typing import Dict, Iterable, Optional, Tuple
import logging

import numpy as np

from tradesense.indicators import (
    PriceSeries,
    analyze_volume,
    calculate_bollinger_bands,
    calculate_ema,
    calculate_fibonacci,
    calculate_macd,
    calculate_rsi,
    calculate_sma,
    find_support_resistance,
)
from tradesense.patterns.detector import PatternDetector
from tradesense.signal_engine import rules
from tradesense.signal_engine.config import SignalEngineConfig
from tradesense.signal_engine.schemas import (
    BucketScores,
    Signal,
    SignalDirection,
    TechnicalVerdict,
)

LOG = logging.getLogger(__name__)


def aggregate_signals(signals: Iterable[Signal], source: str = 'technical') -> Tuple[Signal, BucketScores]:
    """
    Aggregate per-indicator votes into one signal.

    Verdict strength is the mean strength of the winning bucket's votes.
    """
    members: Dict[SignalDirection, list] = {
        SignalDirection.BUY: [],
        SignalDirection.SELL: [],
        SignalDirection.HOLD: [],
    }
    for signal in signals:
        members[signal.bucket].append(signal.strength)

    scores = BucketScores(
        buy=float(sum(members[SignalDirection.BUY])),
        sell=float(sum(members[SignalDirection.SELL])),
        hold=float(sum(members[SignalDirection.HOLD])),
    )

    if scores.buy > scores.sell and scores.buy > scores.hold:
        winner = SignalDirection.BUY
    elif scores.sell > scores.buy and scores.sell > scores.hold:
        winner = SignalDirection.SELL
    else:
        winner = SignalDirection.HOLD

    total = scores.total
    confidence = scores.get(winner) / total if total > 0 else 0.0
    votes = members[winner]
    strength = float(np.mean(votes)) if votes else 0.0

    verdict = Signal(
        direction=winner,
        strength=min(max(strength, 0.0), 1.0),
        confidence=min(max(confidence, 0.0), 1.0),
        source=source,
        metadata={'votes': sum(len(v) for v in members.values())},
    )
    return verdict, scores


class TechnicalSignalGenerator:
    """
    Technical Signal Generator

    Stateless; one instance can analyse any number of symbols.
    """

    def __init__(self, config: Optional[SignalEngineConfig] = None):
        """
        Initialize generator.

        Args:
            config: Generator configuration (uses defaults if None)
        """
        self.config = config or SignalEngineConfig()
        self.config.validate()
        self.config_hash = self.config.compute_hash()
        self.pattern_detector = PatternDetector(self.config.patterns)

    def generate(self, series: PriceSeries) -> TechnicalVerdict:
        """
        Analyse a price series and return the technical verdict.

        Never raises on short input: unavailable indicators abstain, and a
        series where every indicator abstains yields HOLD with zero
        confidence.
        """
        ind = self.config.indicators
        closes = series.closes
        volumes = series.volumes
        price = series.last_close

        sma_fast = calculate_sma(closes, ind.sma_fast)
        sma_slow = calculate_sma(closes, ind.sma_slow)
        ema_fast = calculate_ema(closes, ind.ema_fast)
        ema_slow = calculate_ema(closes, ind.ema_slow)
        macd = calculate_macd(closes, ind.ema_fast, ind.ema_slow, ind.macd_signal)
        rsi = calculate_rsi(closes, ind.rsi_period)
        bands = calculate_bollinger_bands(closes, ind.bollinger_period, ind.bollinger_std)
        levels = find_support_resistance(closes, ind.sr_window, ind.sr_threshold)
        volume = analyze_volume(closes, volumes, ind.volume_min_samples,
                                ind.volume_recent_window, ind.volume_profile_bins)
        fibonacci = calculate_fibonacci(closes, ind.fibonacci_lookback, ind.fibonacci_ratios)
        patterns = self.pattern_detector.detect(closes)

        candidates = {
            'sma_crossover': rules.sma_crossover_signal(sma_fast, sma_slow, self.config.moving_averages),
            'ema_crossover': rules.ema_crossover_signal(ema_fast, ema_slow, self.config.moving_averages),
            'macd': rules.macd_signal(macd, self.config.moving_averages),
            'rsi': rules.rsi_signal(rsi, self.config.oscillators),
            'bollinger': rules.bollinger_signal(price, bands, self.config.bands),
            'support_resistance': rules.support_resistance_signal(price, levels, self.config.levels),
            'volume': rules.volume_signal(volume, self.config.volume),
            'pattern': rules.pattern_signal(patterns, self.config.pattern_rules),
        }
        signals = {name: s for name, s in candidates.items() if s is not None}

        abstained = sorted(name for name, s in candidates.items() if s is None)
        if abstained:
            LOG.debug(f"Indicators abstaining on {len(series)} bars: {abstained}")

        verdict, scores = aggregate_signals(signals.values(), source=self.config.signal_source_name)

        snapshot = {
            'price': price,
            'sma_fast': _last(sma_fast),
            'sma_slow': _last(sma_slow),
            'ema_fast': _last(ema_fast),
            'ema_slow': _last(ema_slow),
            'macd': None if macd.empty else {k: float(v) for k, v in macd.iloc[-1].items()},
            'rsi': _last(rsi),
            'bollinger': None if bands.empty else {k: float(v) for k, v in bands.iloc[-1].items()},
            'support_resistance': levels.to_dict(),
            'volume': volume.to_dict(),
            'fibonacci': fibonacci.to_dict() if fibonacci else None,
        }

        return TechnicalVerdict(
            signal=verdict,
            scores=scores,
            signals=signals,
            indicators=snapshot,
            patterns=patterns,
        )


def _last(values) -> Optional[float]:
    return float(values[-1]) if len(values) else None
