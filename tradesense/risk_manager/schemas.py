"""
Risk Manager Schemas

Portfolio snapshot inputs, per-gate results and the final assessment.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple

from tradesense.indicators.schemas import VolatilityLevel


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    EXTREME = "EXTREME"
    UNKNOWN = "UNKNOWN"

    def escalate(self) -> 'RiskLevel':
        """One level up; EXTREME stays EXTREME"""
        order = [RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH, RiskLevel.EXTREME]
        if self not in order:
            return RiskLevel.HIGH
        return order[min(order.index(self) + 1, len(order) - 1)]


class RiskGate(str, Enum):
    """Evaluation gates in order"""
    SYMBOL_ALLOWED = "SYMBOL_ALLOWED"
    MARKET_CONDITIONS = "MARKET_CONDITIONS"
    EXPOSURE = "EXPOSURE"
    SIGNAL_QUALITY = "SIGNAL_QUALITY"
    POSITION_SIZE = "POSITION_SIZE"
    CORRELATION = "CORRELATION"
    VENUE_AVAILABLE = "VENUE_AVAILABLE"


# ========================================
# PORTFOLIO SNAPSHOT
# ========================================

def _optional_float(value) -> Optional[float]:
    return None if value is None else float(value)


@dataclass(frozen=True)
class Balance:
    currency: str
    available: float
    locked: float = 0.0

    @property
    def total(self) -> float:
        return self.available + self.locked


@dataclass(frozen=True)
class OpenPosition:
    symbol: str
    quantity: float
    current_price: float

    @property
    def value(self) -> float:
        return abs(self.quantity * self.current_price)


@dataclass(frozen=True)
class VenueAccount:
    """
    Balances and positions held at one venue.

    supported_symbols None means the venue trades any symbol.
    """
    balances: Tuple[Balance, ...] = ()
    positions: Tuple[OpenPosition, ...] = ()
    supported_symbols: Optional[FrozenSet[str]] = None
    healthy: bool = True
    risk_level: RiskLevel = RiskLevel.LOW

    def supports(self, symbol: str) -> bool:
        return self.supported_symbols is None or symbol in self.supported_symbols


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Caller-supplied account state across venues"""
    accounts: Dict[str, VenueAccount] = field(default_factory=dict)
    conversion_rates: Dict[str, float] = field(default_factory=dict)  # currency -> quote
    peak_equity: Optional[float] = None
    daily_pnl: Optional[float] = None

    @classmethod
    def from_dict(cls, data: dict) -> 'PortfolioSnapshot':
        """
        Build from a JSON-style mapping:

            {"accounts": {"binance": {"balances": [...], "positions": [...]}},
             "conversion_rates": {"BTC": 45000}}
        """
        accounts = {}
        for venue, raw in (data.get('accounts') or {}).items():
            supported = raw.get('supported_symbols')
            accounts[venue] = VenueAccount(
                balances=tuple(
                    Balance(b['currency'], float(b.get('available', 0.0)), float(b.get('locked', 0.0)))
                    for b in raw.get('balances', [])
                ),
                positions=tuple(
                    OpenPosition(p['symbol'], float(p['quantity']), float(p['current_price']))
                    for p in raw.get('positions', [])
                ),
                supported_symbols=frozenset(supported) if supported is not None else None,
                healthy=bool(raw.get('healthy', True)),
                risk_level=RiskLevel(raw.get('risk_level', 'LOW')),
            )
        return cls(
            accounts=accounts,
            conversion_rates={k: float(v) for k, v in (data.get('conversion_rates') or {}).items()},
            peak_equity=_optional_float(data.get('peak_equity')),
            daily_pnl=_optional_float(data.get('daily_pnl')),
        )


@dataclass(frozen=True)
class PortfolioExposure:
    """Read-only fractional exposure derived from a snapshot"""
    total_fraction: float
    by_asset: Dict[str, float]
    by_sector: Dict[str, float]
    account_value: float
    position_values: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            'total_fraction': float(self.total_fraction),
            'by_asset': {k: float(v) for k, v in self.by_asset.items()},
            'by_sector': {k: float(v) for k, v in self.by_sector.items()},
            'account_value': float(self.account_value),
        }


# ========================================
# MARKET CONTEXT
# ========================================

@dataclass(frozen=True)
class MarketConditions:
    volatility: float = 0.2
    major_events: Tuple[str, ...] = ()
    is_market_hours: bool = True
    liquidity_score: float = 0.8


@dataclass(frozen=True)
class TradeStatistics:
    """Historical outcome statistics for Kelly sizing"""
    win_rate: float
    avg_win: float
    avg_loss: float


@dataclass(frozen=True)
class VenueStatus:
    """Health override for a venue"""
    healthy: bool = True
    risk_level: RiskLevel = RiskLevel.LOW
    supports_symbol: bool = True
    reason: Optional[str] = None


@dataclass(frozen=True)
class MarketContext:
    """
    Optional caller-supplied context.

    correlations maps held symbols to their correlation with the symbol
    being evaluated; missing entries count as uncorrelated.
    """
    market_conditions: Optional[MarketConditions] = None
    asset_volatility: Optional[float] = None
    sector_map: Dict[str, str] = field(default_factory=dict)
    correlations: Dict[str, float] = field(default_factory=dict)
    trade_statistics: Optional[TradeStatistics] = None
    venue_status: Dict[str, VenueStatus] = field(default_factory=dict)
    volatility_level: Optional[VolatilityLevel] = None


# ========================================
# GATE RESULTS
# ========================================

@dataclass(frozen=True)
class MarketRisk:
    level: RiskLevel
    factors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ExposureCheck:
    allowed: bool
    exposure: Optional[PortfolioExposure]
    reason: Optional[str] = None


@dataclass(frozen=True)
class SignalQuality:
    score: float
    factors: Tuple[str, ...]
    recommendation: str  # HIGH / MEDIUM / LOW


@dataclass(frozen=True)
class PositionSizeResult:
    size: float
    trade_value: float
    adjustments: Dict[str, float] = field(default_factory=dict)
    kelly_fraction: Optional[float] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class CorrelatedPosition:
    symbol: str
    correlation: float
    exposure: float


@dataclass(frozen=True)
class CorrelationRisk:
    level: RiskLevel
    total_correlated_exposure: float
    max_correlation: float
    correlated_positions: Tuple[CorrelatedPosition, ...] = ()


# ========================================
# ASSESSMENTS
# ========================================

@dataclass(frozen=True)
class RiskAssessment:
    """
    Final risk decision.

    approved implies recommended_size > 0 and a non-empty venue set.
    `gate` names the gate that rejected the trade (None when approved).
    """
    approved: bool
    recommended_size: float
    reason: str
    risk_level: RiskLevel
    approved_venues: FrozenSet[str] = frozenset()
    conditions: Tuple[str, ...] = ()
    gate: Optional[RiskGate] = None
    signal_quality: Optional[float] = None

    def __post_init__(self):
        if self.recommended_size < 0:
            raise ValueError(f"recommended_size must be >= 0, got {self.recommended_size}")
        if self.approved and (self.recommended_size <= 0 or not self.approved_venues):
            raise ValueError("Approved assessments require a positive size and at least one venue")

    @classmethod
    def rejected(cls, reason: str, gate: Optional[RiskGate] = None,
                 risk_level: RiskLevel = RiskLevel.UNKNOWN,
                 signal_quality: Optional[float] = None) -> 'RiskAssessment':
        return cls(
            approved=False,
            recommended_size=0.0,
            reason=reason,
            risk_level=risk_level,
            gate=gate,
            signal_quality=signal_quality,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            'approved': self.approved,
            'recommended_size': float(self.recommended_size),
            'reason': self.reason,
            'risk_level': self.risk_level.value,
            'approved_venues': sorted(self.approved_venues),
            'conditions': list(self.conditions),
            'gate': self.gate.value if self.gate else None,
            'signal_quality': self.signal_quality,
        }


@dataclass
class PortfolioAssessment:
    """Whole-portfolio health check"""
    risk_level: RiskLevel = RiskLevel.LOW
    recommendations: List[str] = field(default_factory=list)
    risky_positions: List[str] = field(default_factory=list)
    metrics: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            'risk_level': self.risk_level.value,
            'recommendations': list(self.recommendations),
            'risky_positions': list(self.risky_positions),
            'metrics': dict(self.metrics),
        }


@dataclass
class EvaluatorMetrics:
    """Running decision counters"""
    total_decisions: int = 0
    trades_approved: int = 0
    trades_rejected: int = 0
    evaluation_errors: int = 0
    rejections_by_gate: Dict[str, int] = field(default_factory=dict)
    approval_rate: float = 0.0

    def to_dict(self) -> dict:
        return {
            'total_decisions': self.total_decisions,
            'trades_approved': self.trades_approved,
            'trades_rejected': self.trades_rejected,
            'evaluation_errors': self.evaluation_errors,
            'rejections_by_gate': dict(self.rejections_by_gate),
            'approval_rate': float(self.approval_rate),
        }
