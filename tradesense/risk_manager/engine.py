"""
Risk Evaluator

Gate chain, first failure wins:

    SYMBOL_ALLOWED → MARKET_CONDITIONS → EXPOSURE → SIGNAL_QUALITY
        → POSITION_SIZE → CORRELATION → VENUE_AVAILABLE

Every rejection carries a specific reason string and approved=False.
Passing all gates yields an approved assessment with a bounded size,
the approved venues, a risk level and trade conditions.

Configuration errors are fatal (ConfigValidationError). Any other
unexpected failure is logged and resolves to a rejected assessment.
"""

from typing import List, Optional
import logging

from tradesense.decision.schemas import CompositeSignal, FusionReasoning, OrderType
from tradesense.indicators.schemas import VolatilityLevel
from tradesense.risk_manager.config import RiskConfig
from tradesense.risk_manager.correlation_risk import check_correlation_risk
from tradesense.risk_manager.exposure import check_exposure, compute_exposure
from tradesense.risk_manager.market_conditions import assess_market_conditions
from tradesense.risk_manager.position_sizing import calculate_position_size
from tradesense.risk_manager.schemas import (
    CorrelationRisk,
    EvaluatorMetrics,
    MarketContext,
    PortfolioAssessment,
    PortfolioExposure,
    PortfolioSnapshot,
    RiskAssessment,
    RiskGate,
    RiskLevel,
)
from tradesense.risk_manager.signal_quality import assess_signal_quality
from tradesense.risk_manager.venues import approved_venues
from tradesense.signal_engine.schemas import BucketScores, SignalDirection

LOG = logging.getLogger(__name__)

REASON_SYMBOL = "Symbol not in allowed trading list"
REASON_MARKET = "Extreme market conditions detected"
REASON_NO_PORTFOLIO = "Portfolio snapshot unavailable"
REASON_NO_SIGNAL = "No actionable signal (HOLD)"
REASON_QUALITY = "Signal quality too low for trading"
REASON_SIZE = "Calculated position size too small to trade"
REASON_CORRELATION = "High correlation with existing positions"
REASON_VENUE = "No approved venues for this trade"
REASON_FAILED = "Risk evaluation failed"

# Defaults used for manually entered orders
MANUAL_CONFIDENCE = 0.7
MANUAL_TECHNICAL_CONFIDENCE = 0.6
MANUAL_SENTIMENT_CONFIDENCE = 0.5
MANUAL_PREDICTION_CONFIDENCE = 0.5


def is_symbol_allowed(symbol: str, config: RiskConfig) -> bool:
    """Blocked list wins; a non-empty allow list is exclusive"""
    if symbol in config.blocked_symbols:
        return False
    if config.allowed_symbols:
        return symbol in config.allowed_symbols
    return True


def calculate_risk_level(
    composite: CompositeSignal,
    exposure: PortfolioExposure,
    correlation: CorrelationRisk,
    volatility_level: Optional[VolatilityLevel],
) -> RiskLevel:
    """
    Post-approval risk level.

    HIGH_EXPOSURE or HIGH_CORRELATION -> HIGH; two or more factors ->
    MEDIUM; otherwise LOW.
    """
    factors = risk_factors(composite, exposure, correlation, volatility_level)
    if 'HIGH_EXPOSURE' in factors or 'HIGH_CORRELATION' in factors:
        return RiskLevel.HIGH
    if len(factors) >= 2:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def risk_factors(composite, exposure, correlation, volatility_level) -> List[str]:
    factors = []
    if composite.confidence < 0.7:
        factors.append('LOW_CONFIDENCE')
    if exposure.total_fraction > 0.8:
        factors.append('HIGH_EXPOSURE')
    if correlation.level == RiskLevel.HIGH:
        factors.append('HIGH_CORRELATION')
    if volatility_level == VolatilityLevel.HIGH:
        factors.append('HIGH_VOLATILITY')
    return factors


def trade_conditions(
    composite: CompositeSignal,
    risk_level: RiskLevel,
    volatility_level: Optional[VolatilityLevel],
) -> List[str]:
    conditions = []
    if risk_level == RiskLevel.HIGH:
        conditions.append('Reduced position size due to high risk')
        conditions.append('Tighter stop loss required')
    if composite.confidence < 0.8:
        conditions.append('Limit order recommended due to lower confidence')
    if volatility_level == VolatilityLevel.HIGH:
        conditions.append('Extra caution due to high volatility')
    return conditions


class RiskEvaluator:
    """
    Risk Evaluator

    Holds no portfolio state: every call derives exposure from the
    snapshot it is given. Only decision counters are retained.
    """

    def __init__(self):
        self.metrics = EvaluatorMetrics()

    def evaluate(
        self,
        symbol: str,
        composite: CompositeSignal,
        snapshot: Optional[PortfolioSnapshot],
        config: RiskConfig,
        context: Optional[MarketContext] = None,
    ) -> RiskAssessment:
        """
        Run the gate chain for one candidate trade.

        Raises:
            ConfigValidationError: config violates its bounds
        """
        config.ensure_valid()
        context = context or MarketContext()

        try:
            assessment = self._run_gates(symbol, composite, snapshot, config, context)
        except Exception as e:
            LOG.exception(f"Error evaluating trading opportunity for {symbol}: {e}")
            self.metrics.evaluation_errors += 1
            assessment = RiskAssessment.rejected(REASON_FAILED)

        self._update_metrics(assessment)
        return assessment

    def _run_gates(self, symbol, composite, snapshot, config, context) -> RiskAssessment:
        # ========================================
        # GATE 1: SYMBOL ALLOWED
        # ========================================

        if not is_symbol_allowed(symbol, config):
            return RiskAssessment.rejected(REASON_SYMBOL, RiskGate.SYMBOL_ALLOWED)

        # ========================================
        # GATE 2: MARKET CONDITIONS
        # ========================================

        market = assess_market_conditions(context.market_conditions, config)
        if market.level == RiskLevel.EXTREME:
            return RiskAssessment.rejected(REASON_MARKET, RiskGate.MARKET_CONDITIONS, market.level)

        # ========================================
        # GATE 3: PORTFOLIO EXPOSURE
        # ========================================

        if snapshot is None:
            return RiskAssessment.rejected(REASON_NO_PORTFOLIO, RiskGate.EXPOSURE, market.level)

        exposure = compute_exposure(snapshot, config, context.sector_map)
        exposure_check = check_exposure(symbol, exposure, config, context.sector_map.get(symbol))
        if not exposure_check.allowed:
            return RiskAssessment.rejected(exposure_check.reason, RiskGate.EXPOSURE, market.level)

        # ========================================
        # GATE 4: SIGNAL QUALITY
        # ========================================

        quality = assess_signal_quality(composite)
        if not composite.is_actionable:
            return RiskAssessment.rejected(REASON_NO_SIGNAL, RiskGate.SIGNAL_QUALITY,
                                           market.level, quality.score)
        if quality.score < config.min_signal_quality:
            return RiskAssessment.rejected(REASON_QUALITY, RiskGate.SIGNAL_QUALITY,
                                           market.level, quality.score)

        # ========================================
        # GATE 5: POSITION SIZE
        # ========================================

        asset_volatility = context.asset_volatility
        if asset_volatility is None:
            asset_volatility = config.default_asset_volatility

        sizing = calculate_position_size(
            symbol=symbol,
            confidence=composite.confidence,
            market_level=market.level,
            asset_volatility=asset_volatility,
            account_value=exposure.account_value,
            config=config,
            trade_statistics=context.trade_statistics,
        )
        if sizing.size <= 0:
            return RiskAssessment.rejected(REASON_SIZE, RiskGate.POSITION_SIZE,
                                           market.level, quality.score)

        # ========================================
        # GATE 6: CORRELATION
        # ========================================

        correlation = check_correlation_risk(symbol, exposure, context.correlations, config)
        if correlation.level == RiskLevel.HIGH:
            return RiskAssessment.rejected(REASON_CORRELATION, RiskGate.CORRELATION,
                                           RiskLevel.HIGH, quality.score)

        # ========================================
        # GATE 7: VENUE AVAILABLE
        # ========================================

        venues = approved_venues(symbol, snapshot, context.venue_status)
        if not venues:
            return RiskAssessment.rejected(REASON_VENUE, RiskGate.VENUE_AVAILABLE,
                                           market.level, quality.score)

        # ========================================
        # APPROVED
        # ========================================

        volatility_level = composite.reasoning.volatility_level or context.volatility_level
        level = calculate_risk_level(composite, exposure, correlation, volatility_level)
        conditions = trade_conditions(composite, level, volatility_level)

        LOG.info(
            f"Trade approved for {symbol}: size={sizing.size * 100:.2f}% "
            f"risk={level.value} venues={sorted(venues)}"
        )

        return RiskAssessment(
            approved=True,
            recommended_size=sizing.size,
            reason="All risk checks passed",
            risk_level=level,
            approved_venues=venues,
            conditions=tuple(conditions),
            signal_quality=quality.score,
        )

    # ------------------------------------------------------------------
    # Manual trades & portfolio checks
    # ------------------------------------------------------------------

    def evaluate_manual_trade(
        self,
        symbol: str,
        side: str,
        snapshot: Optional[PortfolioSnapshot],
        config: RiskConfig,
        context: Optional[MarketContext] = None,
    ) -> RiskAssessment:
        """
        Evaluate a manually entered order.

        Manual orders carry no analysis, so fixed sub-confidences stand in
        for the technical, sentiment and prediction sources, and exits use
        the configured stop-loss / take-profit percentages.
        """
        direction = SignalDirection(side.upper())
        if direction not in (SignalDirection.BUY, SignalDirection.SELL):
            raise ValueError(f"Manual trade side must be BUY or SELL, got {side}")

        composite = CompositeSignal(
            symbol=symbol,
            direction=direction,
            strength=MANUAL_CONFIDENCE,
            confidence=MANUAL_CONFIDENCE,
            reasoning=FusionReasoning(
                technical_confidence=MANUAL_TECHNICAL_CONFIDENCE,
                sentiment_confidence=MANUAL_SENTIMENT_CONFIDENCE,
                prediction_confidence=MANUAL_PREDICTION_CONFIDENCE,
                scores=BucketScores(),
                unused_weight=0.0,
                sources_used=('manual',),
                volatility_level=VolatilityLevel.MEDIUM,
                volatility_source='manual',
            ),
            order_type=OrderType.LIMIT,
            stop_loss_distance=config.stop_loss_percentage,
            take_profit_distance=config.take_profit_percentage,
            metadata={'manual': True},
        )
        return self.evaluate(symbol, composite, snapshot, config, context)

    def assess_portfolio(
        self,
        snapshot: PortfolioSnapshot,
        config: RiskConfig,
        context: Optional[MarketContext] = None,
    ) -> PortfolioAssessment:
        """
        Whole-portfolio health: drawdown, daily loss, concentration and
        sector exposure.
        """
        config.ensure_valid()
        context = context or MarketContext()
        exposure = compute_exposure(snapshot, config, context.sector_map)
        assessment = PortfolioAssessment()
        assessment.metrics = {
            'account_value': exposure.account_value,
            'total_exposure': exposure.total_fraction,
            'positions': float(len(exposure.by_asset)),
        }

        def raise_level(level: RiskLevel):
            order = [RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH]
            if order.index(level) > order.index(assessment.risk_level):
                assessment.risk_level = level

        # Drawdown
        if snapshot.peak_equity:
            drawdown = max(0.0, (snapshot.peak_equity - exposure.account_value) / snapshot.peak_equity)
            assessment.metrics['drawdown'] = drawdown
            if drawdown > config.max_drawdown:
                raise_level(RiskLevel.HIGH)
                assessment.recommendations.append(
                    f"Drawdown {drawdown * 100:.1f}% exceeds limit {config.max_drawdown * 100:.1f}%; halt new trades"
                )
            elif drawdown > config.max_drawdown * 0.5:
                raise_level(RiskLevel.MEDIUM)
                assessment.recommendations.append(
                    f"Drawdown {drawdown * 100:.1f}% above half of limit; reduce position sizes"
                )

        # Daily loss
        if snapshot.daily_pnl is not None and snapshot.daily_pnl < 0:
            daily_loss = -snapshot.daily_pnl / exposure.account_value
            assessment.metrics['daily_loss'] = daily_loss
            if daily_loss > config.max_daily_loss:
                raise_level(RiskLevel.HIGH)
                assessment.recommendations.append(
                    f"Daily loss {daily_loss * 100:.1f}% exceeds limit {config.max_daily_loss * 100:.1f}%"
                )

        # Concentration
        if exposure.total_fraction >= config.max_total_exposure:
            raise_level(RiskLevel.HIGH)
            assessment.recommendations.append(
                f"Total exposure {exposure.total_fraction * 100:.1f}% at or above "
                f"limit {config.max_total_exposure * 100:.1f}%"
            )
        for held, fraction in sorted(exposure.by_asset.items()):
            if fraction > config.max_position_size:
                raise_level(RiskLevel.MEDIUM)
                assessment.risky_positions.append(held)
                assessment.recommendations.append(
                    f"Reduce {held}: {fraction * 100:.1f}% of portfolio exceeds "
                    f"{config.max_position_size * 100:.1f}% position limit"
                )

        # Sector
        for sector, fraction in sorted(exposure.by_sector.items()):
            if fraction > config.max_sector_exposure:
                raise_level(RiskLevel.MEDIUM)
                assessment.recommendations.append(
                    f"Sector {sector} at {fraction * 100:.1f}% exceeds "
                    f"{config.max_sector_exposure * 100:.1f}% limit"
                )

        return assessment

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    def _update_metrics(self, assessment: RiskAssessment) -> None:
        m = self.metrics
        m.total_decisions += 1
        if assessment.approved:
            m.trades_approved += 1
        else:
            m.trades_rejected += 1
            key = assessment.gate.value if assessment.gate else 'ERROR'
            m.rejections_by_gate[key] = m.rejections_by_gate.get(key, 0) + 1
        m.approval_rate = m.trades_approved / m.total_decisions

    def get_health_status(self) -> dict:
        return {'metrics': self.metrics.to_dict()}
