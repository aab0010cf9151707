"""
Signal Quality

score = 0.4 * composite + 0.3 * technical + 0.2 * sentiment + 0.1 * prediction
(confidences; unavailable sources contribute nothing), capped at 1.0.
"""

from tradesense.decision.schemas import CompositeSignal
from tradesense.risk_manager.schemas import SignalQuality

WEIGHTS = (
    ('Confidence', 0.4),
    ('Technical', 0.3),
    ('Sentiment', 0.2),
    ('Prediction', 0.1),
)


def assess_signal_quality(composite: CompositeSignal) -> SignalQuality:
    reasoning = composite.reasoning
    values = (
        composite.confidence,
        reasoning.technical_confidence,
        reasoning.sentiment_confidence,
        reasoning.prediction_confidence,
    )

    score = 0.0
    factors = []
    for (name, weight), value in zip(WEIGHTS, values):
        if value is None:
            continue
        score += value * weight
        factors.append(f"{name}: {value * 100:.1f}%")

    score = min(score, 1.0)
    if score >= 0.7:
        recommendation = 'HIGH'
    elif score >= 0.6:
        recommendation = 'MEDIUM'
    else:
        recommendation = 'LOW'

    return SignalQuality(score=score, factors=tuple(factors), recommendation=recommendation)
