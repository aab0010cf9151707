"""
Signal Engine Schemas

Directional signals and the aggregated technical verdict.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class SignalDirection(str, Enum):
    """Direction carried by a signal"""
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"
    NEUTRAL = "NEUTRAL"  # informational (e.g. volume), bucketed with HOLD

    @property
    def bucket(self) -> 'SignalDirection':
        return SignalDirection.HOLD if self is SignalDirection.NEUTRAL else self


@dataclass(frozen=True)
class Signal:
    """
    Immutable directional signal.

    strength and confidence are both in [0, 1]. `label` keeps the rule's
    finer-grained reading (WEAK_BUY, CONFIRMATION, ...) for reporting.
    """
    direction: SignalDirection
    strength: float
    confidence: float
    source: str = ""
    label: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not 0.0 <= self.strength <= 1.0:
            raise ValueError(f"strength must be in [0, 1], got {self.strength}")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be in [0, 1], got {self.confidence}")

    @property
    def bucket(self) -> SignalDirection:
        return self.direction.bucket

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            'direction': self.direction.value,
            'strength': float(self.strength),
            'confidence': float(self.confidence),
            'source': self.source,
            'label': self.label or self.direction.value,
            'metadata': dict(self.metadata),
        }


@dataclass(frozen=True)
class BucketScores:
    """Summed contributions per direction"""
    buy: float = 0.0
    sell: float = 0.0
    hold: float = 0.0

    @property
    def total(self) -> float:
        return self.buy + self.sell + self.hold

    def get(self, direction: SignalDirection) -> float:
        return {
            SignalDirection.BUY: self.buy,
            SignalDirection.SELL: self.sell,
            SignalDirection.HOLD: self.hold,
        }[direction.bucket]

    def to_dict(self) -> dict:
        return {'buy': float(self.buy), 'sell': float(self.sell), 'hold': float(self.hold)}


@dataclass
class TechnicalVerdict:
    """
    Aggregated technical analysis for one price series.

    `signal` is the winning bucket (BUY, SELL or HOLD); `signals` holds
    the per-indicator votes that produced it (abstaining indicators are
    absent); `indicators` is a snapshot of the latest indicator values.
    """
    signal: Signal
    scores: BucketScores
    signals: Dict[str, Signal] = field(default_factory=dict)
    indicators: Dict[str, Any] = field(default_factory=dict)
    patterns: List[Any] = field(default_factory=list)

    @property
    def direction(self) -> SignalDirection:
        return self.signal.direction

    @property
    def confidence(self) -> float:
        return self.signal.confidence

    @property
    def abstained(self) -> bool:
        return not self.signals

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            'signal': self.signal.to_dict(),
            'scores': self.scores.to_dict(),
            'signals': {name: s.to_dict() for name, s in self.signals.items()},
            'indicators': self.indicators,
            'patterns': [p.to_dict() for p in self.patterns],
        }
