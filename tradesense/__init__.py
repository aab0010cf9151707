"""
TradeSense

Risk-gated trading decision core.

Flow:
    Indicator Library → Pattern Detector → Technical Signal Generator
        → (Sentiment, Prediction adapters) → Decision Combiner → Risk Evaluator

Entry point:
    TradingDecisionEngine.evaluate(symbol, price_series, timeframe,
                                   portfolio_snapshot, risk_config)
        -> (CompositeSignal, RiskAssessment)

The indicator and pattern functions are usable on their own for callers
that only need raw signal data.
"""

from tradesense.engine import TradingDecisionEngine, MarketAnalysis
from tradesense.indicators import Bar, PriceSeries, VolatilityLevel
from tradesense.decision import CompositeSignal, OrderType
from tradesense.risk_manager import (
    RiskConfig,
    RiskAssessment,
    PortfolioSnapshot,
    MarketContext,
    ConfigValidationError,
    EvaluationInProgressError,
)

__version__ = "1.0.0"

__all__ = [
    'TradingDecisionEngine',
    'MarketAnalysis',
    'Bar',
    'PriceSeries',
    'VolatilityLevel',
    'CompositeSignal',
    'OrderType',
    'RiskConfig',
    'RiskAssessment',
    'PortfolioSnapshot',
    'MarketContext',
    'ConfigValidationError',
    'EvaluationInProgressError',
]
