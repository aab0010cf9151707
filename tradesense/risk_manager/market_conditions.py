"""
Market Condition Assessment

Escalation rules:
    volatility > 0.40          -> HIGH
    volatility > 0.25          -> MEDIUM
    scheduled major events     -> at least HIGH (HIGH becomes EXTREME)
    outside market hours       -> LOW becomes MEDIUM
    liquidity score < 0.5      -> one level up
"""

from typing import Optional

from tradesense.risk_manager.config import RiskConfig
from tradesense.risk_manager.schemas import MarketConditions, MarketRisk, RiskLevel


def assess_market_conditions(
    conditions: Optional[MarketConditions],
    config: RiskConfig,
) -> MarketRisk:
    conditions = conditions or MarketConditions()
    factors = []
    level = RiskLevel.LOW

    if conditions.volatility > config.market_volatility_high:
        factors.append('High market volatility')
        level = RiskLevel.HIGH
    elif conditions.volatility > config.market_volatility_medium:
        factors.append('Elevated market volatility')
        level = RiskLevel.MEDIUM

    if conditions.major_events:
        factors.append('Major economic events scheduled')
        level = RiskLevel.EXTREME if level == RiskLevel.HIGH else RiskLevel.HIGH

    if not conditions.is_market_hours:
        factors.append('Trading outside market hours')
        if level == RiskLevel.LOW:
            level = RiskLevel.MEDIUM

    if conditions.liquidity_score < config.min_liquidity_score:
        factors.append('Low market liquidity')
        level = level.escalate()

    return MarketRisk(level=level, factors=tuple(factors))
