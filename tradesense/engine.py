"""
Trading Decision Engine

Orchestrates one evaluation:
1. Configuration validation (fatal on violation)
2. Technical analysis (pure, synchronous)
3. Collaborator fan-out (sentiment, prediction) with partial degradation
4. Decision fusion
5. Risk gating and position sizing

Design Principles:
    - Deterministic: same inputs and collaborator responses → same outputs
    - Degrading: any single collaborator may fail without failing the call
    - Serialized per symbol: at most one evaluation of a symbol at a time
"""

from dataclasses import dataclass, replace
from typing import Optional, Set, Tuple
import logging

from tradesense.adapters.cache import ReadingCache
from tradesense.adapters.features import extract_features
from tradesense.adapters.gateway import gather_external_signals
from tradesense.adapters.providers import PredictionProvider, SentimentProvider
from tradesense.adapters.schemas import ExternalSignals
from tradesense.decision.combiner import DecisionCombiner, resolve_volatility
from tradesense.decision.config import FusionConfig
from tradesense.decision.schemas import CompositeSignal
from tradesense.indicators.schemas import PriceSeries
from tradesense.indicators.volatility import classify_volatility, realized_volatility
from tradesense.risk_manager.config import RiskConfig
from tradesense.risk_manager.engine import RiskEvaluator
from tradesense.risk_manager.exceptions import EvaluationInProgressError
from tradesense.risk_manager.schemas import MarketContext, PortfolioSnapshot, RiskAssessment
from tradesense.signal_engine.config import SignalEngineConfig
from tradesense.signal_engine.engine import TechnicalSignalGenerator
from tradesense.signal_engine.schemas import TechnicalVerdict

LOG = logging.getLogger(__name__)


@dataclass
class MarketAnalysis:
    """Signal computation and fusion result, without risk gating"""
    symbol: str
    timeframe: str
    technical: TechnicalVerdict
    external: ExternalSignals
    composite: CompositeSignal
    realized_volatility: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            'symbol': self.symbol,
            'timeframe': self.timeframe,
            'technical': self.technical.to_dict(),
            'external': self.external.to_dict(),
            'composite': self.composite.to_dict(),
            'realized_volatility': self.realized_volatility,
        }


class TradingDecisionEngine:
    """
    Trading Decision Engine

    Owns the technical generator, the collaborator providers, an optional
    reading cache and the risk evaluator. Holds no portfolio state.
    """

    def __init__(
        self,
        sentiment_provider: Optional[SentimentProvider] = None,
        prediction_provider: Optional[PredictionProvider] = None,
        cache: Optional[ReadingCache] = None,
        signal_config: Optional[SignalEngineConfig] = None,
        collaborator_timeout: float = 10.0,
        technical_generator: Optional[TechnicalSignalGenerator] = None,
    ):
        """
        Initialize engine.

        Args:
            sentiment_provider: Optional sentiment collaborator
            prediction_provider: Optional prediction collaborator
            cache: Optional read-through cache for collaborator readings
            signal_config: Technical generator configuration
            collaborator_timeout: Per-collaborator timeout in seconds
            technical_generator: Pre-built generator (overrides signal_config)
        """
        self.sentiment_provider = sentiment_provider
        self.prediction_provider = prediction_provider
        self.cache = cache
        self.collaborator_timeout = collaborator_timeout
        self.technical_generator = technical_generator or TechnicalSignalGenerator(signal_config)
        self.risk_evaluator = RiskEvaluator()
        self._in_flight: Set[str] = set()

        LOG.info(
            f"Trading decision engine initialized "
            f"(sentiment={'on' if sentiment_provider else 'off'}, "
            f"prediction={'on' if prediction_provider else 'off'}, "
            f"cache={'on' if cache else 'off'})"
        )

    async def analyze(
        self,
        symbol: str,
        price_series: PriceSeries,
        timeframe: str,
        fusion_config: Optional[FusionConfig] = None,
    ) -> MarketAnalysis:
        """Compute and fuse signals without risk gating"""
        technical = self.technical_generator.generate(price_series)

        features = extract_features(price_series, symbol, timeframe)
        external = await gather_external_signals(
            symbol,
            features,
            sentiment_provider=self.sentiment_provider,
            prediction_provider=self.prediction_provider,
            cache=self.cache,
            timeout=self.collaborator_timeout,
        )

        realized = realized_volatility(price_series.closes, timeframe)
        predicted_level = (external.prediction_reading.volatility_level
                           if external.prediction_reading is not None else None)
        ind = self.technical_generator.config.indicators
        realized_level = classify_volatility(realized, ind.volatility_low, ind.volatility_high)
        level, level_source = resolve_volatility(predicted_level, realized_level)

        composite = DecisionCombiner(fusion_config).combine(
            symbol,
            technical,
            sentiment=external.sentiment,
            prediction=external.prediction,
            volatility_level=level,
            volatility_source=level_source,
            timeframe=timeframe,
        )

        return MarketAnalysis(
            symbol=symbol,
            timeframe=timeframe,
            technical=technical,
            external=external,
            composite=composite,
            realized_volatility=realized,
        )

    async def evaluate(
        self,
        symbol: str,
        price_series: PriceSeries,
        timeframe: str,
        portfolio_snapshot: Optional[PortfolioSnapshot],
        risk_config: RiskConfig,
        market_context: Optional[MarketContext] = None,
    ) -> Tuple[CompositeSignal, RiskAssessment]:
        """
        Produce a risk-gated decision for one symbol.

        Raises:
            ConfigValidationError: risk_config violates its bounds
            EvaluationInProgressError: symbol is already being evaluated
        """
        risk_config.ensure_valid()

        if symbol in self._in_flight:
            raise EvaluationInProgressError(symbol)
        self._in_flight.add(symbol)

        try:
            analysis = await self.analyze(symbol, price_series, timeframe, risk_config.fusion_config())

            context = market_context or MarketContext()
            if context.asset_volatility is None and analysis.realized_volatility is not None:
                context = replace(context, asset_volatility=analysis.realized_volatility)

            assessment = self.risk_evaluator.evaluate(
                symbol,
                analysis.composite,
                portfolio_snapshot,
                risk_config,
                context,
            )
        finally:
            self._in_flight.discard(symbol)

        LOG.info(
            f"{symbol} {timeframe}: {analysis.composite.direction.value} "
            f"conf={analysis.composite.confidence:.3f} approved={assessment.approved} "
            f"({assessment.reason})"
        )
        return analysis.composite, assessment

    def is_evaluating(self, symbol: str) -> bool:
        return symbol in self._in_flight
