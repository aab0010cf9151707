"""
Risk Evaluator

Final gatekeeper between the decision combiner and any execution layer.

Core Principle:
    The combiner proposes a trade; the risk evaluator decides whether it
    may exist and how large it may be.

Responsibilities:
    1. Configuration validation (every violation listed, never silently clamped)
    2. Symbol allow / block lists
    3. Market condition escalation
    4. Portfolio exposure caps (total, per asset, per sector)
    5. Signal quality scoring
    6. Bounded position sizing (optional capped Kelly fraction)
    7. Correlation risk
    8. Venue availability
"""

from tradesense.risk_manager.config import RiskConfig
from tradesense.risk_manager.exceptions import ConfigValidationError, EvaluationInProgressError
from tradesense.risk_manager.schemas import (
    RiskLevel,
    RiskGate,
    Balance,
    OpenPosition,
    VenueAccount,
    PortfolioSnapshot,
    PortfolioExposure,
    MarketConditions,
    MarketContext,
    TradeStatistics,
    VenueStatus,
    MarketRisk,
    ExposureCheck,
    SignalQuality,
    PositionSizeResult,
    CorrelatedPosition,
    CorrelationRisk,
    RiskAssessment,
    PortfolioAssessment,
    EvaluatorMetrics,
)
from tradesense.risk_manager.exposure import account_value, compute_exposure, check_exposure
from tradesense.risk_manager.market_conditions import assess_market_conditions
from tradesense.risk_manager.signal_quality import assess_signal_quality
from tradesense.risk_manager.kelly_criterion import KellyResult, kelly_fraction
from tradesense.risk_manager.position_sizing import calculate_position_size
from tradesense.risk_manager.correlation_risk import check_correlation_risk, estimate_correlations
from tradesense.risk_manager.venues import approved_venues
from tradesense.risk_manager.engine import (
    RiskEvaluator,
    is_symbol_allowed,
    calculate_risk_level,
    trade_conditions,
)

__version__ = "1.0.0"

__all__ = [
    'RiskConfig',
    'ConfigValidationError',
    'EvaluationInProgressError',
    'RiskLevel',
    'RiskGate',
    'Balance',
    'OpenPosition',
    'VenueAccount',
    'PortfolioSnapshot',
    'PortfolioExposure',
    'MarketConditions',
    'MarketContext',
    'TradeStatistics',
    'VenueStatus',
    'MarketRisk',
    'ExposureCheck',
    'SignalQuality',
    'PositionSizeResult',
    'CorrelatedPosition',
    'CorrelationRisk',
    'RiskAssessment',
    'PortfolioAssessment',
    'EvaluatorMetrics',
    'account_value',
    'compute_exposure',
    'check_exposure',
    'assess_market_conditions',
    'assess_signal_quality',
    'KellyResult',
    'kelly_fraction',
    'calculate_position_size',
    'check_correlation_risk',
    'estimate_correlations',
    'approved_venues',
    'RiskEvaluator',
    'is_symbol_allowed',
    'calculate_risk_level',
    'trade_conditions',
]
