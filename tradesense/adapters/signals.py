"""
Reading → Signal conversion for external collaborators.
"""

from tradesense.adapters.schemas import PredictionDirection, PredictionReading, SentimentReading
from tradesense.signal_engine.schemas import Signal, SignalDirection

SENTIMENT_MIN_CONFIDENCE = 0.5
SENTIMENT_THRESHOLD = 0.6
PREDICTION_MIN_CONFIDENCE = 0.6


def sentiment_to_signal(reading: SentimentReading) -> Signal:
    """
    Map a sentiment reading to a signal.

    confidence < 0.5        -> HOLD, strength 0.2
    score > 0.6             -> BUY,  strength confidence * 0.7
    score < -0.6            -> SELL, strength confidence * 0.7
    otherwise               -> HOLD, strength confidence * 0.4
    """
    meta = {'score': reading.score}
    if reading.confidence < SENTIMENT_MIN_CONFIDENCE:
        return Signal(SignalDirection.HOLD, 0.2, reading.confidence, 'sentiment', 'LOW_CONFIDENCE', meta)
    if reading.score > SENTIMENT_THRESHOLD:
        return Signal(SignalDirection.BUY, reading.confidence * 0.7, reading.confidence, 'sentiment', metadata=meta)
    if reading.score < -SENTIMENT_THRESHOLD:
        return Signal(SignalDirection.SELL, reading.confidence * 0.7, reading.confidence, 'sentiment', metadata=meta)
    return Signal(SignalDirection.HOLD, reading.confidence * 0.4, reading.confidence, 'sentiment', metadata=meta)


def prediction_to_signal(reading: PredictionReading) -> Signal:
    """
    Map a prediction reading to a signal.

    confidence < 0.6        -> HOLD, strength 0.3
    UP                      -> BUY,  strength confidence * 0.8
    DOWN                    -> SELL, strength confidence * 0.8
    NEUTRAL                 -> HOLD, strength confidence * 0.5
    """
    meta = {'volatility_level': reading.volatility_level.value}
    if reading.confidence < PREDICTION_MIN_CONFIDENCE:
        return Signal(SignalDirection.HOLD, 0.3, reading.confidence, 'prediction', 'LOW_CONFIDENCE', meta)
    if reading.direction == PredictionDirection.UP:
        return Signal(SignalDirection.BUY, reading.confidence * 0.8, reading.confidence, 'prediction', metadata=meta)
    if reading.direction == PredictionDirection.DOWN:
        return Signal(SignalDirection.SELL, reading.confidence * 0.8, reading.confidence, 'prediction', metadata=meta)
    return Signal(SignalDirection.HOLD, reading.confidence * 0.5, reading.confidence, 'prediction', metadata=meta)
