"""
Decision Combiner

Fuses technical, sentiment and prediction signals into one composite
decision with explicit weights, an activation floor and volatility-scaled
exit distances.
"""

from tradesense.decision.config import FusionConfig
from tradesense.decision.schemas import OrderType, CompositeSignal, FusionReasoning
from tradesense.decision.combiner import DecisionCombiner, resolve_volatility

__all__ = [
    'FusionConfig',
    'OrderType',
    'CompositeSignal',
    'FusionReasoning',
    'DecisionCombiner',
    'resolve_volatility',
]
