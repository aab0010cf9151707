"""
Test suite for the risk evaluator.

Tests cover:
- Configuration validation and loading
- Exposure, market condition, quality, sizing, correlation and venue gates
- Kelly criterion cap
- Full gate chain ordering and rejection reasons
- Manual trades and portfolio health checks
"""

import numpy as np
import pytest

from tradesense.decision import CompositeSignal, FusionReasoning, OrderType
from tradesense.indicators import VolatilityLevel
from tradesense.risk_manager import (
    RiskConfig,
    ConfigValidationError,
    RiskLevel,
    RiskGate,
    Balance,
    OpenPosition,
    VenueAccount,
    PortfolioSnapshot,
    MarketConditions,
    MarketContext,
    TradeStatistics,
    VenueStatus,
    account_value,
    compute_exposure,
    check_exposure,
    assess_market_conditions,
    assess_signal_quality,
    kelly_fraction,
    calculate_position_size,
    check_correlation_risk,
    estimate_correlations,
    approved_venues,
    RiskEvaluator,
    is_symbol_allowed,
    calculate_risk_level,
    trade_conditions,
)
from tradesense.risk_manager.engine import (
    REASON_CORRELATION,
    REASON_FAILED,
    REASON_MARKET,
    REASON_NO_PORTFOLIO,
    REASON_NO_SIGNAL,
    REASON_QUALITY,
    REASON_SIZE,
    REASON_SYMBOL,
    REASON_VENUE,
)
from tradesense.signal_engine import BucketScores, SignalDirection


# ============================================================================
# FIXTURES
# ============================================================================

def snapshot(usdt=10000.0, positions=(), venue='binance', **account):
    return PortfolioSnapshot(accounts={
        venue: VenueAccount(
            balances=(Balance('USDT', usdt),),
            positions=tuple(OpenPosition(s, q, p) for s, q, p in positions),
            **account,
        )
    })


def composite(direction=SignalDirection.BUY, confidence=0.9, technical=0.9,
              sentiment=0.9, prediction=0.9, volatility=VolatilityLevel.LOW):
    reasoning = FusionReasoning(
        technical_confidence=technical,
        sentiment_confidence=sentiment,
        prediction_confidence=prediction,
        scores=BucketScores(buy=confidence),
        unused_weight=0.0,
        sources_used=('technical', 'sentiment', 'prediction'),
        volatility_level=volatility,
        volatility_source='prediction',
    )
    if direction == SignalDirection.HOLD:
        return CompositeSignal('BTCUSDT', direction, confidence, confidence, reasoning)
    return CompositeSignal(
        'BTCUSDT', direction, confidence, confidence, reasoning,
        order_type=OrderType.MARKET, stop_loss_distance=0.014, take_profit_distance=0.028,
    )


@pytest.fixture
def config():
    return RiskConfig()


@pytest.fixture
def evaluator():
    return RiskEvaluator()


@pytest.fixture
def calm_context():
    return MarketContext(asset_volatility=0.3)


# ============================================================================
# TEST CONFIGURATION
# ============================================================================

class TestRiskConfig:
    """Validation, loading and hashing"""

    def test_defaults_valid(self, config):
        assert config.validate() == []
        assert config.max_position_size == 0.02
        assert config.max_total_exposure == 0.80

    def test_all_violations_listed(self):
        bad = RiskConfig(max_position_size=0.2, max_daily_loss=0.0)
        with pytest.raises(ConfigValidationError) as exc_info:
            bad.ensure_valid()
        assert len(exc_info.value.violations) == 2
        assert 'max_position_size' in exc_info.value.violations[0]

    def test_weights_must_sum_to_one(self):
        errors = RiskConfig(technical_weight=0.6).validate()
        assert any('fusion weights must sum to 1.0' in e for e in errors)

    def test_allowed_and_blocked_overlap(self):
        errors = RiskConfig(allowed_symbols=['BTCUSDT'], blocked_symbols=['BTCUSDT']).validate()
        assert errors == ["symbols both allowed and blocked: ['BTCUSDT']"]

    def test_non_numeric_values_listed(self):
        bad = RiskConfig.from_dict({'max_position_size': 'abc', 'use_kelly_criterion': 'yes'})
        with pytest.raises(ConfigValidationError) as exc_info:
            bad.ensure_valid()
        assert exc_info.value.violations == [
            "max_position_size must be numeric, got 'abc'",
            "use_kelly_criterion must be a boolean, got 'yes'",
        ]

    def test_bool_is_not_numeric(self):
        errors = RiskConfig(kelly_cap=True).validate()
        assert errors == ["kelly_cap must be numeric, got True"]

    def test_optional_and_list_fields(self):
        assert RiskConfig(max_trade_value=None).validate() == []
        assert RiskConfig(allowed_symbols='BTCUSDT').validate() == [
            "allowed_symbols must be a list of strings, got 'BTCUSDT'"
        ]

    def test_clamped_reports_changes(self):
        clamped, warnings = RiskConfig(max_position_size=0.5).clamped()
        assert clamped.max_position_size == 0.10
        assert warnings == ["max_position_size clamped from 0.5 to 0.1"]

    def test_from_dict_accepts_camel_case(self):
        loaded = RiskConfig.from_dict({'maxPositionSize': 0.05, 'use_kelly_criterion': True})
        assert loaded.max_position_size == 0.05
        assert loaded.use_kelly_criterion is True

    def test_from_dict_unknown_key(self):
        with pytest.raises(ConfigValidationError, match="unknown risk setting: leverage"):
            RiskConfig.from_dict({'leverage': 10})

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv('TRADESENSE_MAX_POSITION_SIZE', '0.03')
        monkeypatch.setenv('TRADESENSE_USE_KELLY_CRITERION', 'true')
        monkeypatch.setenv('TRADESENSE_BLOCKED_SYMBOLS', 'DOGEUSDT, SHIBUSDT')
        monkeypatch.setenv('TRADESENSE_MAX_TRADE_VALUE', 'none')
        loaded = RiskConfig.from_env()
        assert loaded.max_position_size == 0.03
        assert loaded.use_kelly_criterion is True
        assert loaded.blocked_symbols == ['DOGEUSDT', 'SHIBUSDT']
        assert loaded.max_trade_value is None

    def test_hash_tracks_changes(self, config):
        assert config.get_config_hash() == RiskConfig().get_config_hash()
        assert config.get_config_hash() != RiskConfig(max_position_size=0.03).get_config_hash()

    def test_fusion_config(self):
        fusion = RiskConfig(technical_weight=0.4, sentiment_weight=0.4).fusion_config()
        assert fusion.technical_weight == 0.4
        assert fusion.prediction_weight == 0.2


# ============================================================================
# TEST EXPOSURE
# ============================================================================

class TestExposure:

    def test_account_value_converts_currencies(self, config):
        snap = PortfolioSnapshot(
            accounts={'binance': VenueAccount(balances=(
                Balance('USDT', 5000.0),
                Balance('BTC', 0.1),
                Balance('XRP', 1000.0),  # no rate: ignored
            ))},
            conversion_rates={'BTC': 45000.0},
        )
        assert account_value(snap, config) == pytest.approx(9500.0)

    def test_account_value_floor(self, config):
        assert account_value(snapshot(usdt=200.0), config) == 1000.0

    def test_positions_aggregate_across_venues(self, config):
        snap = PortfolioSnapshot(accounts={
            'binance': VenueAccount(balances=(Balance('USDT', 10000.0),),
                                    positions=(OpenPosition('ETHUSDT', 1.0, 1000.0),)),
            'kraken': VenueAccount(positions=(OpenPosition('ETHUSDT', -0.5, 1000.0),)),
        })
        exposure = compute_exposure(snap, config, {'ETHUSDT': 'L1'})
        assert exposure.by_asset['ETHUSDT'] == pytest.approx(0.15)
        assert exposure.by_sector['L1'] == pytest.approx(0.15)
        assert exposure.total_fraction == pytest.approx(0.15)

    def test_total_cap(self, config):
        exposure = compute_exposure(snapshot(positions=[('ETHUSDT', 5.0, 1700.0)]), config)
        check = check_exposure('BTCUSDT', exposure, config)
        assert not check.allowed
        assert check.reason == "Total portfolio exposure (85.0%) exceeds limit (80.0%)"

    def test_single_asset_cap(self, config):
        exposure = compute_exposure(snapshot(positions=[('BTCUSDT', 0.005, 45000.0)]), config)
        check = check_exposure('BTCUSDT', exposure, config)
        assert not check.allowed
        assert "exceeds single asset limit (2.0%)" in check.reason

    def test_sector_cap(self, config):
        sectors = {'ETHUSDT': 'L1', 'BTCUSDT': 'L1'}
        exposure = compute_exposure(snapshot(positions=[('ETHUSDT', 1.0, 3500.0)]), config, sectors)
        check = check_exposure('BTCUSDT', exposure, config, 'L1')
        assert not check.allowed
        assert check.reason.startswith("Exposure to L1 sector (35.0%)")

    def test_cap_is_inclusive(self, config):
        exposure = compute_exposure(snapshot(positions=[('ETHUSDT', 8.0, 1000.0)]), config)
        assert not check_exposure('BTCUSDT', exposure, config).allowed


# ============================================================================
# TEST MARKET CONDITIONS
# ============================================================================

class TestMarketConditions:

    @pytest.mark.parametrize("conditions,expected", [
        (MarketConditions(), RiskLevel.LOW),
        (MarketConditions(volatility=0.3), RiskLevel.MEDIUM),
        (MarketConditions(volatility=0.5), RiskLevel.HIGH),
        (MarketConditions(major_events=('FOMC',)), RiskLevel.HIGH),
        (MarketConditions(volatility=0.5, major_events=('FOMC',)), RiskLevel.EXTREME),
        (MarketConditions(is_market_hours=False), RiskLevel.MEDIUM),
        (MarketConditions(volatility=0.3, liquidity_score=0.3), RiskLevel.HIGH),
        (MarketConditions(volatility=0.5, liquidity_score=0.3), RiskLevel.EXTREME),
    ])
    def test_escalation(self, config, conditions, expected):
        assert assess_market_conditions(conditions, config).level == expected

    def test_factors_reported(self, config):
        risk = assess_market_conditions(MarketConditions(volatility=0.5, liquidity_score=0.1), config)
        assert risk.factors == ('High market volatility', 'Low market liquidity')

    def test_missing_conditions_default_low(self, config):
        assert assess_market_conditions(None, config).level == RiskLevel.LOW


# ============================================================================
# TEST SIGNAL QUALITY
# ============================================================================

class TestSignalQuality:

    def test_weighted_score(self):
        quality = assess_signal_quality(composite())
        assert quality.score == pytest.approx(0.9)
        assert quality.recommendation == 'HIGH'
        assert len(quality.factors) == 4

    def test_missing_sources_contribute_nothing(self):
        quality = assess_signal_quality(composite(confidence=0.8, sentiment=None, prediction=None))
        # 0.4 * 0.8 + 0.3 * 0.9
        assert quality.score == pytest.approx(0.59)
        assert quality.recommendation == 'LOW'


# ============================================================================
# TEST KELLY AND SIZING
# ============================================================================

class TestKellyCriterion:

    def test_positive_edge_capped(self):
        result = kelly_fraction(0.6, 2.0, 1.0, cap=0.05)
        assert result.kelly_fraction == pytest.approx(0.4)
        assert result.capped_fraction == pytest.approx(0.05)
        assert result.rejection_reason is None

    def test_negative_edge(self):
        result = kelly_fraction(0.3, 1.0, 1.0)
        assert result.capped_fraction == 0.0
        assert result.rejection_reason.startswith("Negative edge")

    def test_zero_average_loss(self):
        result = kelly_fraction(0.6, 2.0, 0.0)
        assert result.capped_fraction == 0.0
        assert "avg_loss" in result.rejection_reason


class TestPositionSizing:

    def test_formula(self, config):
        result = calculate_position_size('BTCUSDT', 0.9, RiskLevel.LOW, 0.3, 10000.0, config)
        # 0.02 * (0.2 + 0.8 * 0.9) * (1 - 0.3) * 1.0
        assert result.size == pytest.approx(0.01288)
        assert result.adjustments['volatility'] == pytest.approx(0.7)

    def test_volatility_floor(self, config):
        result = calculate_position_size('BTCUSDT', 0.9, RiskLevel.LOW, 0.95, 10000.0, config)
        assert result.adjustments['volatility'] == pytest.approx(0.3)

    def test_market_multiplier(self, config):
        low = calculate_position_size('BTCUSDT', 0.9, RiskLevel.LOW, 0.3, 10000.0, config)
        medium = calculate_position_size('BTCUSDT', 0.9, RiskLevel.MEDIUM, 0.3, 10000.0, config)
        assert medium.size == pytest.approx(low.size * 0.7)

    def test_extreme_market_sizes_zero(self, config):
        result = calculate_position_size('BTCUSDT', 0.9, RiskLevel.EXTREME, 0.3, 10000.0, config)
        assert result.size == 0.0

    def test_below_min_trade_value(self, config):
        result = calculate_position_size('BTCUSDT', 0.1, RiskLevel.LOW, 0.3, 1000.0, config)
        assert result.size == 0.0
        assert result.reason.startswith("Trade value 3.92 below minimum")

    def test_max_trade_value_cap(self, config):
        result = calculate_position_size('BTCUSDT', 0.9, RiskLevel.LOW, 0.3, 1_000_000.0, config)
        assert result.size == pytest.approx(0.001)
        assert result.trade_value == pytest.approx(1000.0)

    def test_kelly_cap(self):
        config = RiskConfig(use_kelly_criterion=True, kelly_cap=0.005)
        stats = TradeStatistics(win_rate=0.6, avg_win=2.0, avg_loss=1.0)
        result = calculate_position_size('BTCUSDT', 0.9, RiskLevel.LOW, 0.3, 10000.0, config, stats)
        assert result.size == pytest.approx(0.005)
        assert result.kelly_fraction == pytest.approx(0.005)

    def test_kelly_without_statistics_skipped(self):
        config = RiskConfig(use_kelly_criterion=True)
        result = calculate_position_size('BTCUSDT', 0.9, RiskLevel.LOW, 0.3, 10000.0, config)
        assert result.size == pytest.approx(0.01288)
        assert result.kelly_fraction is None

    def test_never_exceeds_max_position(self, config):
        for confidence in np.linspace(0, 1, 11):
            for volatility in (0.0, 0.5, 2.0):
                result = calculate_position_size('X', confidence, RiskLevel.LOW, volatility, 10000.0, config)
                assert 0.0 <= result.size <= config.max_position_size


# ============================================================================
# TEST CORRELATION AND VENUES
# ============================================================================

class TestCorrelationRisk:

    def test_correlated_exposure_high(self, config):
        positions = [('ETHUSDT', 1.0, 1200.0), ('SOLUSDT', 1.0, 1200.0), ('ADAUSDT', 1.0, 1200.0)]
        exposure = compute_exposure(snapshot(positions=positions), config)
        correlations = {'ETHUSDT': 0.8, 'SOLUSDT': 0.8, 'ADAUSDT': 0.8}
        risk = check_correlation_risk('BTCUSDT', exposure, correlations, config)
        assert risk.level == RiskLevel.HIGH
        assert risk.total_correlated_exposure == pytest.approx(0.36)
        assert risk.max_correlation == pytest.approx(0.8)

    def test_missing_correlation_is_uncorrelated(self, config):
        exposure = compute_exposure(snapshot(positions=[('ETHUSDT', 1.0, 4000.0)]), config)
        risk = check_correlation_risk('BTCUSDT', exposure, {}, config)
        assert risk.level == RiskLevel.LOW
        assert risk.correlated_positions == ()

    def test_candidate_is_fully_correlated(self, config):
        exposure = compute_exposure(snapshot(positions=[('BTCUSDT', 0.004, 40000.0)]), config)
        risk = check_correlation_risk('BTCUSDT', exposure, {}, config)
        assert risk.total_correlated_exposure == pytest.approx(0.016)

    def test_negative_correlation_counts(self, config):
        exposure = compute_exposure(snapshot(positions=[('ETHUSDT', 1.0, 2000.0)]), config)
        risk = check_correlation_risk('BTCUSDT', exposure, {'ETHUSDT': -0.9}, config)
        assert risk.level == RiskLevel.MEDIUM

    def test_estimate_correlations(self):
        np.random.seed(3)
        base = 100 * np.cumprod(1 + np.random.normal(0, 0.01, 60))
        other = 100 * np.cumprod(1 + np.random.normal(0, 0.01, 60))
        result = estimate_correlations('BTCUSDT', {'BTCUSDT': base, 'WBTC': base * 2, 'ETHUSDT': other})
        assert result['WBTC'] == pytest.approx(1.0)
        assert 'BTCUSDT' not in result
        assert -1.0 <= result['ETHUSDT'] <= 1.0

    def test_estimate_correlations_short_history(self):
        assert estimate_correlations('A', {'A': [1.0, 2.0], 'B': [2.0, 3.0]}) == {}


class TestVenues:

    def test_snapshot_flags(self):
        snap = PortfolioSnapshot(accounts={
            'binance': VenueAccount(),
            'kraken': VenueAccount(healthy=False),
            'coinbase': VenueAccount(supported_symbols=frozenset({'ETHUSDT'})),
            'bybit': VenueAccount(risk_level=RiskLevel.HIGH),
        })
        assert approved_venues('BTCUSDT', snap, {}) == frozenset({'binance'})

    def test_override_takes_precedence(self):
        snap = PortfolioSnapshot(accounts={'binance': VenueAccount(), 'kraken': VenueAccount(healthy=False)})
        overrides = {
            'binance': VenueStatus(risk_level=RiskLevel.EXTREME),
            'kraken': VenueStatus(healthy=True),
        }
        assert approved_venues('BTCUSDT', snap, overrides) == frozenset({'kraken'})


# ============================================================================
# TEST GATE CHAIN
# ============================================================================

class TestRiskEvaluator:
    """Full gate chain"""

    def test_approved(self, evaluator, config, calm_context):
        assessment = evaluator.evaluate('BTCUSDT', composite(), snapshot(), config, calm_context)

        assert assessment.approved
        assert assessment.recommended_size == pytest.approx(0.01288)
        assert assessment.approved_venues == frozenset({'binance'})
        assert assessment.risk_level == RiskLevel.LOW
        assert assessment.conditions == ()
        assert assessment.gate is None
        assert assessment.signal_quality == pytest.approx(0.9)

    def test_invalid_config_raises(self, evaluator):
        with pytest.raises(ConfigValidationError):
            evaluator.evaluate('BTCUSDT', composite(), snapshot(), RiskConfig(max_position_size=0.5))

    def test_blocked_symbol(self, evaluator):
        config = RiskConfig(blocked_symbols=['BTCUSDT'])
        assessment = evaluator.evaluate('BTCUSDT', composite(), snapshot(), config)
        assert assessment.reason == REASON_SYMBOL
        assert assessment.gate == RiskGate.SYMBOL_ALLOWED

    def test_extreme_market(self, evaluator, config):
        context = MarketContext(market_conditions=MarketConditions(volatility=0.5, major_events=('CPI',)))
        assessment = evaluator.evaluate('BTCUSDT', composite(), snapshot(), config, context)
        assert assessment.reason == REASON_MARKET
        assert assessment.risk_level == RiskLevel.EXTREME

    def test_missing_snapshot(self, evaluator, config):
        assessment = evaluator.evaluate('BTCUSDT', composite(), None, config)
        assert assessment.reason == REASON_NO_PORTFOLIO
        assert assessment.gate == RiskGate.EXPOSURE

    def test_exposure_limit(self, evaluator, config):
        snap = snapshot(positions=[('ETHUSDT', 5.0, 1700.0)])
        assessment = evaluator.evaluate('BTCUSDT', composite(), snap, config)
        assert assessment.reason == "Total portfolio exposure (85.0%) exceeds limit (80.0%)"

    def test_hold_rejected(self, evaluator, config):
        assessment = evaluator.evaluate('BTCUSDT', composite(SignalDirection.HOLD, confidence=0.3),
                                        snapshot(), config)
        assert assessment.reason == REASON_NO_SIGNAL
        assert assessment.gate == RiskGate.SIGNAL_QUALITY

    def test_low_quality(self, evaluator, config):
        weak = composite(confidence=0.65, technical=0.3, sentiment=None, prediction=None)
        assessment = evaluator.evaluate('BTCUSDT', weak, snapshot(), config)
        assert assessment.reason == REASON_QUALITY
        assert assessment.signal_quality == pytest.approx(0.35)

    def test_size_too_small(self, evaluator, config):
        tiny = composite(confidence=0.1, technical=1.0, sentiment=1.0, prediction=1.0)
        assessment = evaluator.evaluate('BTCUSDT', tiny, snapshot(usdt=500.0), config)
        assert assessment.reason == REASON_SIZE
        assert assessment.gate == RiskGate.POSITION_SIZE

    def test_correlated_book(self, evaluator, config):
        positions = [('ETHUSDT', 1.0, 1200.0), ('SOLUSDT', 1.0, 1200.0), ('ADAUSDT', 1.0, 1200.0)]
        context = MarketContext(asset_volatility=0.3,
                                correlations={'ETHUSDT': 0.8, 'SOLUSDT': 0.8, 'ADAUSDT': 0.8})
        assessment = evaluator.evaluate('BTCUSDT', composite(), snapshot(positions=positions), config, context)
        assert assessment.reason == REASON_CORRELATION
        assert assessment.risk_level == RiskLevel.HIGH

    def test_no_venue(self, evaluator, config, calm_context):
        assessment = evaluator.evaluate('BTCUSDT', composite(), snapshot(healthy=False), config, calm_context)
        assert assessment.reason == REASON_VENUE
        assert assessment.gate == RiskGate.VENUE_AVAILABLE

    def test_unexpected_error_rejects(self, evaluator, config):
        broken = PortfolioSnapshot(accounts=None)
        assessment = evaluator.evaluate('BTCUSDT', composite(), broken, config)
        assert not assessment.approved
        assert assessment.reason == REASON_FAILED
        assert evaluator.metrics.evaluation_errors == 1
        assert evaluator.metrics.rejections_by_gate == {'ERROR': 1}

    def test_metrics(self, evaluator, config, calm_context):
        evaluator.evaluate('BTCUSDT', composite(), snapshot(), config, calm_context)
        evaluator.evaluate('BTCUSDT', composite(), None, config)
        metrics = evaluator.get_health_status()['metrics']
        assert metrics['total_decisions'] == 2
        assert metrics['approval_rate'] == pytest.approx(0.5)
        assert metrics['rejections_by_gate'] == {'EXPOSURE': 1}

    def test_to_dict(self, evaluator, config, calm_context):
        data = evaluator.evaluate('BTCUSDT', composite(), snapshot(), config, calm_context).to_dict()
        assert data['approved'] is True
        assert data['approved_venues'] == ['binance']
        assert data['risk_level'] == 'LOW'


class TestRiskLevelAndConditions:

    def test_symbol_filters(self):
        assert is_symbol_allowed('BTCUSDT', RiskConfig())
        assert not is_symbol_allowed('DOGEUSDT', RiskConfig(allowed_symbols=['BTCUSDT']))
        assert not is_symbol_allowed('BTCUSDT', RiskConfig(blocked_symbols=['BTCUSDT']))

    def test_two_factors_medium(self, config):
        exposure = compute_exposure(snapshot(), config)
        correlation = check_correlation_risk('BTCUSDT', exposure, {}, config)
        level = calculate_risk_level(composite(confidence=0.65), exposure, correlation, VolatilityLevel.HIGH)
        assert level == RiskLevel.MEDIUM

    def test_high_exposure_is_high(self, config):
        exposure = compute_exposure(snapshot(positions=[('ETHUSDT', 1.0, 8500.0)]), config)
        correlation = check_correlation_risk('BTCUSDT', exposure, {}, config)
        assert calculate_risk_level(composite(), exposure, correlation, None) == RiskLevel.HIGH

    def test_conditions(self):
        conditions = trade_conditions(composite(confidence=0.7), RiskLevel.HIGH, VolatilityLevel.HIGH)
        assert conditions == [
            'Reduced position size due to high risk',
            'Tighter stop loss required',
            'Limit order recommended due to lower confidence',
            'Extra caution due to high volatility',
        ]


# ============================================================================
# TEST MANUAL TRADES AND PORTFOLIO HEALTH
# ============================================================================

class TestManualTrades:

    def test_manual_buy(self, evaluator, config):
        assessment = evaluator.evaluate_manual_trade('BTCUSDT', 'buy', snapshot(), config)
        # 0.4 * 0.7 + 0.3 * 0.6 + 0.2 * 0.5 + 0.1 * 0.5
        assert assessment.signal_quality == pytest.approx(0.61)
        # default asset volatility 0.3
        assert assessment.recommended_size == pytest.approx(0.02 * 0.76 * 0.7)
        assert 'Limit order recommended due to lower confidence' in assessment.conditions

    def test_manual_invalid_side(self, evaluator, config):
        with pytest.raises(ValueError):
            evaluator.evaluate_manual_trade('BTCUSDT', 'hold', snapshot(), config)


class TestPortfolioAssessment:

    def test_breaches_reported(self, evaluator, config):
        snap = PortfolioSnapshot(
            accounts={'binance': VenueAccount(
                balances=(Balance('USDT', 10000.0),),
                positions=(OpenPosition('ETHUSDT', 1.0, 300.0),),
            )},
            peak_equity=12000.0,
            daily_pnl=-200.0,
        )
        assessment = evaluator.assess_portfolio(snap, config)
        assert assessment.risk_level == RiskLevel.HIGH
        assert assessment.metrics['drawdown'] == pytest.approx(2000.0 / 12000.0)
        assert assessment.metrics['daily_loss'] == pytest.approx(0.02)
        assert assessment.risky_positions == ['ETHUSDT']
        assert len(assessment.recommendations) == 3

    def test_healthy_portfolio(self, evaluator, config):
        assessment = evaluator.assess_portfolio(snapshot(), config)
        assert assessment.risk_level == RiskLevel.LOW
        assert assessment.recommendations == []


class TestSnapshotParsing:

    def test_from_dict(self):
        snap = PortfolioSnapshot.from_dict({
            'accounts': {
                'binance': {
                    'balances': [{'currency': 'USDT', 'available': 9000, 'locked': 1000}],
                    'positions': [{'symbol': 'ETHUSDT', 'quantity': 1, 'current_price': 2000}],
                    'supported_symbols': ['BTCUSDT', 'ETHUSDT'],
                    'risk_level': 'MEDIUM',
                },
            },
            'conversion_rates': {'BTC': 45000},
        })
        account = snap.accounts['binance']
        assert account.balances[0].total == 10000.0
        assert account.positions[0].value == 2000.0
        assert account.supports('BTCUSDT')
        assert not account.supports('SOLUSDT')
        assert account.risk_level == RiskLevel.MEDIUM
        assert snap.conversion_rates == {'BTC': 45000.0}

    def test_equity_fields_coerced(self):
        snap = PortfolioSnapshot.from_dict({'peak_equity': '12000', 'daily_pnl': -150})
        assert snap.peak_equity == 12000.0
        assert snap.daily_pnl == -150.0
        assert PortfolioSnapshot.from_dict({}).peak_equity is None

    def test_non_numeric_equity_rejected(self):
        with pytest.raises(ValueError):
            PortfolioSnapshot.from_dict({'daily_pnl': 'abc'})
