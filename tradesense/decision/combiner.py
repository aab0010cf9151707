"""
Decision Combiner

Fuses the technical verdict with the sentiment and prediction signals.

Scoring:
    contribution = strength * source_weight * source_confidence
    per bucket (BUY / SELL / HOLD); the weight of every unavailable source
    is credited to HOLD at half value.

Decision:
    BUY or SELL wins only when its score is strictly above both other
    buckets AND above the activation floor (0.6). Otherwise HOLD, with
    confidence max(hold_score, 0.3). Final confidence is clamped to
    [0.1, 0.95].
"""

from typing import Optional, Tuple
import logging

from tradesense.decision.config import FusionConfig
from tradesense.decision.schemas import CompositeSignal, FusionReasoning, OrderType
from tradesense.indicators.schemas import VolatilityLevel
from tradesense.signal_engine.schemas import (
    BucketScores,
    Signal,
    SignalDirection,
    TechnicalVerdict,
)

LOG = logging.getLogger(__name__)


def resolve_volatility(
    predicted: Optional[VolatilityLevel],
    realized: Optional[VolatilityLevel],
) -> Tuple[VolatilityLevel, str]:
    """Prefer the prediction's level, then realised volatility, then MEDIUM"""
    if predicted is not None:
        return VolatilityLevel(predicted), 'prediction'
    if realized is not None:
        return VolatilityLevel(realized), 'realized'
    return VolatilityLevel.MEDIUM, 'default'


class DecisionCombiner:
    """Weighted multi-source decision combiner"""

    def __init__(self, config: Optional[FusionConfig] = None):
        self.config = config or FusionConfig()
        self.config.validate()

    def combine(
        self,
        symbol: str,
        technical: Optional[TechnicalVerdict],
        sentiment: Optional[Signal] = None,
        prediction: Optional[Signal] = None,
        volatility_level: Optional[VolatilityLevel] = None,
        volatility_source: str = 'prediction',
        timeframe: Optional[str] = None,
    ) -> CompositeSignal:
        """
        Produce the composite decision.

        A technical verdict in which every indicator abstained counts as an
        unavailable source, like a missing sentiment or prediction signal.
        """
        cfg = self.config
        technical_signal = technical.signal if technical is not None and not technical.abstained else None

        sources = (
            ('technical', technical_signal, cfg.technical_weight),
            ('sentiment', sentiment, cfg.sentiment_weight),
            ('prediction', prediction, cfg.prediction_weight),
        )

        buy = sell = hold = 0.0
        unused = 0.0
        used = []
        for name, signal, weight in sources:
            if signal is None:
                unused += weight
                continue
            used.append(name)
            contribution = signal.strength * weight * signal.confidence
            if signal.bucket == SignalDirection.BUY:
                buy += contribution
            elif signal.bucket == SignalDirection.SELL:
                sell += contribution
            else:
                hold += contribution
        hold += unused * cfg.unavailable_hold_factor

        scores = BucketScores(buy=buy, sell=sell, hold=hold)

        if buy > sell and buy > hold and buy > cfg.activation_floor:
            direction, score = SignalDirection.BUY, buy
        elif sell > buy and sell > hold and sell > cfg.activation_floor:
            direction, score = SignalDirection.SELL, sell
        else:
            direction, score = SignalDirection.HOLD, max(hold, cfg.hold_confidence_floor)

        confidence = min(max(score, cfg.min_confidence), cfg.max_confidence)

        level, level_source = (None, None)
        order_type = stop_loss = take_profit = None
        if direction != SignalDirection.HOLD:
            if volatility_level is not None:
                level, level_source = VolatilityLevel(volatility_level), volatility_source
            else:
                level, level_source = VolatilityLevel.MEDIUM, 'default'
            order_type, stop_loss, take_profit = self._exits(confidence, level)

        reasoning = FusionReasoning(
            technical_confidence=technical_signal.confidence if technical_signal else None,
            sentiment_confidence=sentiment.confidence if sentiment else None,
            prediction_confidence=prediction.confidence if prediction else None,
            scores=scores,
            unused_weight=unused,
            sources_used=tuple(used),
            volatility_level=level,
            volatility_source=level_source,
        )

        composite = CompositeSignal(
            symbol=symbol,
            timeframe=timeframe,
            direction=direction,
            strength=min(max(scores.get(direction), 0.0), 1.0),
            confidence=confidence,
            reasoning=reasoning,
            order_type=order_type,
            stop_loss_distance=stop_loss,
            take_profit_distance=take_profit,
        )

        LOG.debug(
            f"{symbol}: fused {direction.value} conf={confidence:.3f} "
            f"(buy={buy:.3f} sell={sell:.3f} hold={hold:.3f}, sources={used})"
        )
        return composite

    def _exits(self, confidence: float, level: VolatilityLevel):
        cfg = self.config
        multiplier = cfg.volatility_multipliers[level.value]
        if confidence > cfg.high_confidence_threshold:
            stop_loss = cfg.high_confidence_stop_loss * multiplier
            take_profit = cfg.high_confidence_take_profit * multiplier
        else:
            stop_loss = cfg.stop_loss * multiplier
            take_profit = cfg.take_profit * multiplier
        order_type = OrderType.MARKET if confidence > cfg.market_order_threshold else OrderType.LIMIT
        return order_type, stop_loss, take_profit
