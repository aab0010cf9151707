"""
Position Sizing

size = max_position_size
       * (0.2 + 0.8 * confidence)
       * max(0.3, 1 - asset_volatility)
       * market multiplier (LOW 1.0, MEDIUM 0.7, HIGH 0.5)

optionally capped by the Kelly fraction, then:
    - collapsed to 0 when size * account_value < min_trade_value
    - capped at max_trade_value / account_value
    - clamped to [0, max_position_size]
"""

from typing import Optional
import logging

from tradesense.risk_manager.config import RiskConfig
from tradesense.risk_manager.kelly_criterion import kelly_fraction
from tradesense.risk_manager.schemas import (
    PositionSizeResult,
    RiskLevel,
    TradeStatistics,
)

LOG = logging.getLogger(__name__)

MARKET_MULTIPLIERS = {
    RiskLevel.LOW: 1.0,
    RiskLevel.MEDIUM: 0.7,
    RiskLevel.HIGH: 0.5,
    RiskLevel.EXTREME: 0.0,
}

MIN_VOLATILITY_FACTOR = 0.3


def calculate_position_size(
    symbol: str,
    confidence: float,
    market_level: RiskLevel,
    asset_volatility: float,
    account_value: float,
    config: RiskConfig,
    trade_statistics: Optional[TradeStatistics] = None,
) -> PositionSizeResult:
    """Bounded position size as a fraction of account value"""
    confidence_adj = 0.2 + 0.8 * confidence
    volatility_adj = max(MIN_VOLATILITY_FACTOR, 1.0 - asset_volatility)
    market_adj = MARKET_MULTIPLIERS.get(market_level, MARKET_MULTIPLIERS[RiskLevel.HIGH])

    size = config.max_position_size * confidence_adj * volatility_adj * market_adj
    adjustments = {
        'confidence': confidence_adj,
        'volatility': volatility_adj,
        'market': market_adj,
    }

    kelly = None
    if config.use_kelly_criterion:
        if trade_statistics is None:
            LOG.debug(f"Kelly sizing enabled but no trade statistics for {symbol}; cap skipped")
        else:
            result = kelly_fraction(
                trade_statistics.win_rate,
                trade_statistics.avg_win,
                trade_statistics.avg_loss,
                cap=config.kelly_cap,
            )
            kelly = result.capped_fraction
            size = min(size, kelly)

    trade_value = size * account_value
    if trade_value < config.min_trade_value:
        return PositionSizeResult(
            size=0.0,
            trade_value=trade_value,
            adjustments=adjustments,
            kelly_fraction=kelly,
            reason=f"Trade value {trade_value:.2f} below minimum {config.min_trade_value:.2f}",
        )

    max_trade_value = config.max_trade_value
    if max_trade_value is None:
        max_trade_value = account_value * 0.1
    size = min(size, max_trade_value / account_value)
    size = max(0.0, min(size, config.max_position_size))

    LOG.debug(
        f"Position size for {symbol}: {size * 100:.2f}% "
        f"(confidence={confidence_adj:.2f}, volatility={volatility_adj:.2f}, market={market_adj:.2f})"
    )

    return PositionSizeResult(
        size=size,
        trade_value=size * account_value,
        adjustments=adjustments,
        kelly_fraction=kelly,
    )
