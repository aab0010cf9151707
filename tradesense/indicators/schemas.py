"""
Indicator Library Schemas

Price series container and structured indicator outputs.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd
from dateutil import parser as date_parser


OHLCV_COLUMNS = ['open', 'high', 'low', 'close', 'volume']


@dataclass(frozen=True)
class Bar:
    """Single OHLCV bar"""
    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            'timestamp': self.timestamp.isoformat(),
            'open': float(self.open),
            'high': float(self.high),
            'low': float(self.low),
            'close': float(self.close),
            'volume': float(self.volume),
        }


@dataclass(frozen=True)
class PriceSeries:
    """
    Immutable ordered sequence of OHLCV bars.

    Timestamps must be strictly increasing. Owned by the caller and
    borrowed by every indicator function, which read the numpy views
    exposed below.
    """
    bars: Tuple[Bar, ...]

    def __post_init__(self):
        bars = tuple(self.bars)
        object.__setattr__(self, 'bars', bars)
        for prev, cur in zip(bars, bars[1:]):
            if cur.timestamp <= prev.timestamp:
                raise ValueError(
                    f"Timestamps must be strictly increasing, got {cur.timestamp.isoformat()} "
                    f"after {prev.timestamp.isoformat()}"
                )

    def __len__(self) -> int:
        return len(self.bars)

    def _column(self, name: str) -> np.ndarray:
        return np.array([getattr(bar, name) for bar in self.bars], dtype=float)

    @property
    def opens(self) -> np.ndarray:
        return self._column('open')

    @property
    def highs(self) -> np.ndarray:
        return self._column('high')

    @property
    def lows(self) -> np.ndarray:
        return self._column('low')

    @property
    def closes(self) -> np.ndarray:
        return self._column('close')

    @property
    def volumes(self) -> np.ndarray:
        return self._column('volume')

    @property
    def timestamps(self) -> List[datetime]:
        return [bar.timestamp for bar in self.bars]

    @property
    def last_close(self) -> Optional[float]:
        return float(self.bars[-1].close) if self.bars else None

    @property
    def last_timestamp(self) -> Optional[datetime]:
        return self.bars[-1].timestamp if self.bars else None

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> 'PriceSeries':
        """
        Build a series from dict records.

        Timestamps may be datetime objects or ISO-8601 strings.
        """
        bars = []
        for record in records:
            ts = record['timestamp']
            if isinstance(ts, str):
                ts = date_parser.isoparse(ts)
            bars.append(Bar(
                timestamp=ts,
                open=float(record['open']),
                high=float(record['high']),
                low=float(record['low']),
                close=float(record['close']),
                volume=float(record.get('volume', 0.0)),
            ))
        return cls(bars=tuple(bars))

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame, timestamp_col: str = 'timestamp') -> 'PriceSeries':
        """Build a series from a DataFrame with OHLCV columns"""
        missing = [c for c in OHLCV_COLUMNS if c not in df.columns]
        if missing:
            raise ValueError(f"Missing OHLCV columns: {missing}")

        if timestamp_col in df.columns:
            timestamps = pd.to_datetime(df[timestamp_col], utc=True)
        else:
            timestamps = pd.to_datetime(df.index, utc=True)

        bars = tuple(
            Bar(
                timestamp=ts.to_pydatetime(),
                open=float(row.open),
                high=float(row.high),
                low=float(row.low),
                close=float(row.close),
                volume=float(row.volume),
            )
            for ts, row in zip(timestamps, df[OHLCV_COLUMNS].itertuples(index=False))
        )
        return cls(bars=bars)

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to a timestamp-indexed OHLCV DataFrame"""
        df = pd.DataFrame(
            {
                'open': self.opens,
                'high': self.highs,
                'low': self.lows,
                'close': self.closes,
                'volume': self.volumes,
            },
            index=pd.DatetimeIndex(self.timestamps, name='timestamp'),
        )
        return df


class VolumeTrend(str, Enum):
    """Recent volume relative to the longer average"""
    INCREASING = "INCREASING"
    DECREASING = "DECREASING"
    STABLE = "STABLE"
    UNKNOWN = "UNKNOWN"


class VolumeStrength(str, Enum):
    """Magnitude of recent volume relative to the longer average"""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class VolatilityLevel(str, Enum):
    """Volatility classification shared by adapters, combiner and risk"""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass(frozen=True)
class VolumeProfileBin:
    price_low: float
    price_high: float
    volume: float


@dataclass
class VolumeAnalysis:
    """Volume trend, strength and supplementary metrics"""
    trend: VolumeTrend = VolumeTrend.UNKNOWN
    strength: VolumeStrength = VolumeStrength.LOW
    average_volume: float = 0.0
    recent_volume: float = 0.0
    unusual_activity: bool = False
    vpt: np.ndarray = field(default_factory=lambda: np.array([], dtype=float))
    profile: List[VolumeProfileBin] = field(default_factory=list)

    @property
    def available(self) -> bool:
        return self.trend != VolumeTrend.UNKNOWN

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            'trend': self.trend.value,
            'strength': self.strength.value,
            'average_volume': float(self.average_volume),
            'recent_volume': float(self.recent_volume),
            'unusual_activity': bool(self.unusual_activity),
            'vpt': float(self.vpt[-1]) if len(self.vpt) else None,
            'profile': [
                {'price_low': b.price_low, 'price_high': b.price_high, 'volume': b.volume}
                for b in self.profile
            ],
        }


@dataclass(frozen=True)
class Extremum:
    """Local peak or trough"""
    index: int
    price: float


@dataclass(frozen=True)
class PriceLevel:
    """Clustered support or resistance level"""
    price: float
    strength: int  # number of clustered extrema


@dataclass
class SupportResistance:
    """Ranked support and resistance levels, strongest first"""
    support: List[PriceLevel] = field(default_factory=list)
    resistance: List[PriceLevel] = field(default_factory=list)
    fallback: bool = False

    @property
    def nearest_support(self) -> Optional[float]:
        return self.support[0].price if self.support else None

    @property
    def nearest_resistance(self) -> Optional[float]:
        return self.resistance[0].price if self.resistance else None

    @property
    def available(self) -> bool:
        return bool(self.support) and bool(self.resistance)

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            'support': [{'price': l.price, 'strength': l.strength} for l in self.support],
            'resistance': [{'price': l.price, 'strength': l.strength} for l in self.resistance],
            'fallback': self.fallback,
        }


@dataclass
class FibonacciLevels:
    """Retracement and extension levels over a lookback window"""
    high: float
    low: float
    retracements: Dict[float, float] = field(default_factory=dict)
    extensions: Dict[float, float] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            'high': float(self.high),
            'low': float(self.low),
            'retracements': {str(k): float(v) for k, v in self.retracements.items()},
            'extensions': {str(k): float(v) for k, v in self.extensions.items()},
        }
