"""
Collaborator fan-out with partial degradation.

Sentiment and prediction are fetched concurrently. Each source fails
independently: an exception, a timeout or a reading that violates the
contract marks that source unavailable and the others carry on.
"""

from typing import Any, Optional
import asyncio
import logging

from tradesense.adapters.cache import ReadingCache
from tradesense.adapters.providers import PredictionProvider, SentimentProvider
from tradesense.adapters.schemas import (
    ExternalSignals,
    MarketFeatures,
    PredictionReading,
    SentimentReading,
)
from tradesense.adapters.signals import prediction_to_signal, sentiment_to_signal

LOG = logging.getLogger(__name__)


def _coerce(value: Any, reading_type):
    if isinstance(value, reading_type):
        return value
    if isinstance(value, dict):
        return reading_type.from_dict(value)
    raise TypeError(f"Expected {reading_type.__name__}, got {type(value).__name__}")


async def _guarded(source: str, symbol: str, fetch, reading_type,
                   cache: Optional[ReadingCache], timeout: float, failures: dict):
    async def load():
        return _coerce(await fetch(), reading_type)

    try:
        if cache is not None:
            coro = cache.get_or_fetch(source, symbol, load)
        else:
            coro = load()
        return await asyncio.wait_for(coro, timeout=timeout)
    except asyncio.TimeoutError:
        failures[source] = f"timeout after {timeout}s"
        LOG.warning(f"{source} provider timed out for {symbol} after {timeout}s")
    except (KeyError, TypeError, ValueError) as e:
        failures[source] = f"invalid reading: {e}"
        LOG.warning(f"{source} provider returned an invalid reading for {symbol}: {e}")
    except Exception as e:
        failures[source] = f"{type(e).__name__}: {e}"
        LOG.warning(f"{source} provider failed for {symbol}: {e}")
    return None


async def gather_external_signals(
    symbol: str,
    features: MarketFeatures,
    sentiment_provider: Optional[SentimentProvider] = None,
    prediction_provider: Optional[PredictionProvider] = None,
    cache: Optional[ReadingCache] = None,
    timeout: float = 10.0,
) -> ExternalSignals:
    """
    Fetch both collaborators concurrently and convert their readings.

    Unconfigured providers are simply absent; they are not failures.
    """
    failures: dict = {}

    async def sentiment():
        if sentiment_provider is None:
            return None
        return await _guarded('sentiment', symbol, lambda: sentiment_provider.get(symbol),
                              SentimentReading, cache, timeout, failures)

    async def prediction():
        if prediction_provider is None:
            return None
        return await _guarded('prediction', symbol, lambda: prediction_provider.get(features, symbol),
                              PredictionReading, cache, timeout, failures)

    sentiment_reading, prediction_reading = await asyncio.gather(sentiment(), prediction())

    return ExternalSignals(
        sentiment_reading=sentiment_reading,
        prediction_reading=prediction_reading,
        sentiment=sentiment_to_signal(sentiment_reading) if sentiment_reading else None,
        prediction=prediction_to_signal(prediction_reading) if prediction_reading else None,
        failures=dict(sorted(failures.items())),
    )
