"""
Test suite for the trading decision engine.

End-to-end evaluation from a price series to a risk-gated decision.

Run: pytest tests/test_engine.py -v
"""

import asyncio
import json

import pytest

from tradesense import (
    TradingDecisionEngine,
    CompositeSignal,
    OrderType,
    RiskConfig,
    RiskAssessment,
    PortfolioSnapshot,
    MarketContext,
    VolatilityLevel,
    ConfigValidationError,
    EvaluationInProgressError,
)
from tradesense.adapters import (
    PredictionDirection,
    PredictionReading,
    SentimentProvider,
    SentimentReading,
    StaticPredictionProvider,
    StaticSentimentProvider,
)
from tradesense.indicators import realized_volatility
from tradesense.risk_manager import Balance, VenueAccount
from tradesense.signal_engine import (
    BucketScores,
    Signal,
    SignalDirection,
    TechnicalSignalGenerator,
    TechnicalVerdict,
)


class FixedBuyGenerator(TechnicalSignalGenerator):
    """Technical generator that always reports a full-strength BUY"""

    def generate(self, series):
        vote = Signal(SignalDirection.BUY, 1.0, 1.0, 'technical')
        return TechnicalVerdict(signal=vote, scores=BucketScores(buy=1.0), signals={'sma_crossover': vote})


class FailingSentimentProvider(SentimentProvider):
    async def get(self, symbol):
        raise ConnectionError("sentiment feed unreachable")


class GatedSentimentProvider(SentimentProvider):
    """Blocks BTCUSDT readings until released"""

    def __init__(self):
        self.release = asyncio.Event()

    async def get(self, symbol):
        if symbol == 'BTCUSDT':
            await self.release.wait()
        return SentimentReading(0.0, 0.8)


def bullish_sentiment():
    return StaticSentimentProvider(default=SentimentReading(score=0.9, confidence=1.0))


def bullish_prediction(level=VolatilityLevel.LOW):
    return StaticPredictionProvider(default=PredictionReading(PredictionDirection.UP, 1.0, level))


def portfolio(usdt=10000.0):
    return PortfolioSnapshot(accounts={'binance': VenueAccount(balances=(Balance('USDT', usdt),))})


# ============================================================================
# TEST EVALUATION
# ============================================================================

class TestEvaluate:
    """Full pipeline"""

    def test_default_engine_holds(self, sample_series):
        # technical alone can contribute at most 0.5, under the activation floor
        engine = TradingDecisionEngine()
        signal, assessment = asyncio.run(
            engine.evaluate('BTCUSDT', sample_series, '1h', portfolio(), RiskConfig())
        )
        assert isinstance(signal, CompositeSignal)
        assert isinstance(assessment, RiskAssessment)
        assert signal.direction == SignalDirection.HOLD
        assert signal.stop_loss_distance is None
        assert not assessment.approved
        assert assessment.reason == "No actionable signal (HOLD)"

    def test_agreeing_sources_approved(self, sample_series):
        engine = TradingDecisionEngine(
            sentiment_provider=bullish_sentiment(),
            prediction_provider=bullish_prediction(),
            technical_generator=FixedBuyGenerator(),
        )
        signal, assessment = asyncio.run(
            engine.evaluate('BTCUSDT', sample_series, '1h', portfolio(), RiskConfig())
        )

        assert signal.direction == SignalDirection.BUY
        assert signal.confidence == pytest.approx(0.87)
        assert signal.order_type == OrderType.MARKET
        assert signal.stop_loss_distance == pytest.approx(0.014)
        assert signal.reasoning.volatility_source == 'prediction'

        # realised volatility of the series feeds position sizing
        rv = realized_volatility(sample_series.closes, '1h')
        expected = 0.02 * (0.2 + 0.8 * 0.87) * max(0.3, 1 - rv)
        assert assessment.approved
        assert assessment.recommended_size == pytest.approx(expected)
        assert assessment.signal_quality == pytest.approx(0.948)
        assert assessment.approved_venues == frozenset({'binance'})

    def test_explicit_asset_volatility_wins(self, sample_series):
        engine = TradingDecisionEngine(
            sentiment_provider=bullish_sentiment(),
            prediction_provider=bullish_prediction(),
            technical_generator=FixedBuyGenerator(),
        )
        _, assessment = asyncio.run(engine.evaluate(
            'BTCUSDT', sample_series, '1h', portfolio(), RiskConfig(),
            MarketContext(asset_volatility=0.1),
        ))
        assert assessment.recommended_size == pytest.approx(0.02 * (0.2 + 0.8 * 0.87) * 0.9)

    def test_realized_volatility_sets_exits(self, sample_series):
        # no prediction: exits scale with the series' own volatility
        engine = TradingDecisionEngine(
            sentiment_provider=bullish_sentiment(),
            technical_generator=FixedBuyGenerator(),
        )
        signal, _ = asyncio.run(engine.evaluate('BTCUSDT', sample_series, '1h', portfolio(), RiskConfig()))

        assert signal.confidence == pytest.approx(0.71)
        assert signal.order_type == OrderType.LIMIT
        assert signal.reasoning.volatility_source == 'realized'
        assert signal.reasoning.volatility_level == VolatilityLevel.HIGH
        assert signal.stop_loss_distance == pytest.approx(0.015 * 1.5)

    def test_collaborator_failure_degrades(self, sample_series):
        engine = TradingDecisionEngine(
            sentiment_provider=FailingSentimentProvider(),
            prediction_provider=bullish_prediction(),
            technical_generator=FixedBuyGenerator(),
        )
        analysis = asyncio.run(engine.analyze('BTCUSDT', sample_series, '1h'))

        assert 'sentiment' in analysis.external.failures
        assert analysis.composite.reasoning.sources_used == ('technical', 'prediction')
        # 0.5 + 0.16 buy against 0.15 credited to hold
        assert analysis.composite.direction == SignalDirection.BUY
        assert analysis.composite.confidence == pytest.approx(0.66)

    def test_invalid_config_fatal(self, sample_series):
        engine = TradingDecisionEngine()
        with pytest.raises(ConfigValidationError) as exc_info:
            asyncio.run(engine.evaluate('BTCUSDT', sample_series, '1h', portfolio(),
                                        RiskConfig(max_position_size=0.5, max_total_exposure=1.5)))
        assert len(exc_info.value.violations) == 2
        assert not engine.is_evaluating('BTCUSDT')

    def test_missing_portfolio_rejected(self, sample_series):
        engine = TradingDecisionEngine()
        _, assessment = asyncio.run(engine.evaluate('BTCUSDT', sample_series, '1h', None, RiskConfig()))
        assert assessment.reason == "Portfolio snapshot unavailable"

    def test_deterministic(self, sample_series):
        engine = TradingDecisionEngine(
            sentiment_provider=bullish_sentiment(),
            prediction_provider=bullish_prediction(),
        )
        first = asyncio.run(engine.evaluate('BTCUSDT', sample_series, '1h', portfolio(), RiskConfig()))
        second = asyncio.run(engine.evaluate('BTCUSDT', sample_series, '1h', portfolio(), RiskConfig()))
        assert first[0].to_dict() == second[0].to_dict()
        assert first[1] == second[1]


# ============================================================================
# TEST CONCURRENCY
# ============================================================================

class TestPerSymbolSerialization:

    def test_same_symbol_rejected_while_running(self, sample_series):
        async def scenario():
            provider = GatedSentimentProvider()
            engine = TradingDecisionEngine(sentiment_provider=provider)
            config = RiskConfig()

            first = asyncio.ensure_future(engine.evaluate('BTCUSDT', sample_series, '1h', portfolio(), config))
            await asyncio.sleep(0)
            assert engine.is_evaluating('BTCUSDT')

            with pytest.raises(EvaluationInProgressError, match="BTCUSDT"):
                await engine.evaluate('BTCUSDT', sample_series, '1h', portfolio(), config)

            # other symbols are unaffected
            _, other = await engine.evaluate('ETHUSDT', sample_series, '1h', portfolio(), config)
            assert other.reason == "No actionable signal (HOLD)"

            provider.release.set()
            await first
            return engine

        engine = asyncio.run(scenario())
        assert not engine.is_evaluating('BTCUSDT')


# ============================================================================
# TEST ANALYSIS
# ============================================================================

class TestAnalyze:

    def test_to_dict_is_json_ready(self, sample_series):
        engine = TradingDecisionEngine(prediction_provider=bullish_prediction(VolatilityLevel.MEDIUM))
        analysis = asyncio.run(engine.analyze('BTCUSDT', sample_series, '1h'))
        data = json.loads(json.dumps(analysis.to_dict()))
        assert data['symbol'] == 'BTCUSDT'
        assert data['external']['prediction']['direction'] == 'BUY'
        assert data['realized_volatility'] == pytest.approx(realized_volatility(sample_series.closes, '1h'))
