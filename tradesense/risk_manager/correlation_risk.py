"""
Correlation Risk

Sums the exposure of held positions whose |correlation| with the
candidate symbol exceeds the threshold (0.7):
    > 0.30 correlated exposure -> HIGH (trade rejected)
    > 0.15                     -> MEDIUM
"""

from typing import Dict, Mapping, Sequence
import logging

import numpy as np
import pandas as pd

from tradesense.risk_manager.config import RiskConfig
from tradesense.risk_manager.schemas import (
    CorrelatedPosition,
    CorrelationRisk,
    PortfolioExposure,
    RiskLevel,
)

LOG = logging.getLogger(__name__)


def check_correlation_risk(
    symbol: str,
    exposure: PortfolioExposure,
    correlations: Mapping[str, float],
    config: RiskConfig,
) -> CorrelationRisk:
    """
    Args:
        symbol: Candidate symbol
        exposure: Current fractional exposure per held symbol
        correlations: Held symbol -> correlation with the candidate. A
            missing entry counts as 0; the candidate itself counts as 1.
    """
    correlated = []
    for held in sorted(exposure.by_asset):
        if held == symbol:
            rho = correlations.get(held, 1.0)
        else:
            rho = correlations.get(held, 0.0)
        if abs(rho) > config.correlation_threshold:
            correlated.append(CorrelatedPosition(held, float(rho), exposure.by_asset[held]))

    total = float(sum(p.exposure for p in correlated))
    max_corr = max((abs(p.correlation) for p in correlated), default=0.0)

    if total > config.correlation_high_exposure:
        level = RiskLevel.HIGH
    elif total > config.correlation_medium_exposure:
        level = RiskLevel.MEDIUM
    else:
        level = RiskLevel.LOW

    return CorrelationRisk(
        level=level,
        total_correlated_exposure=total,
        max_correlation=max_corr,
        correlated_positions=tuple(correlated),
    )


def estimate_correlations(
    symbol: str,
    price_histories: Mapping[str, Sequence[float]],
    min_periods: int = 20,
) -> Dict[str, float]:
    """
    Pearson correlation of returns between `symbol` and every other history.

    Histories are aligned on their trailing common length. Pairs with fewer
    than `min_periods` overlapping returns are omitted.
    """
    if symbol not in price_histories:
        return {}

    length = min(len(v) for v in price_histories.values())
    if length < min_periods + 1:
        return {}

    frame = pd.DataFrame({k: np.asarray(v, dtype=float)[-length:] for k, v in price_histories.items()})
    returns = frame.diff() / frame.shift(1)
    corr = returns.corr(min_periods=min_periods)

    result = {}
    for other in corr.columns:
        if other == symbol:
            continue
        value = corr.at[symbol, other]
        if pd.notna(value):
            result[other] = float(value)
    return result
