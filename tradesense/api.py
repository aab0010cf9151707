"""
TradeSense REST API

FastAPI interface for the trading decision engine.
"""

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field
from typing import Optional, Dict, List, Any
from datetime import datetime
import logging

import numpy as np

from tradesense.adapters.providers import MomentumPredictionProvider
from tradesense.engine import TradingDecisionEngine
from tradesense.indicators.moving_averages import as_array
from tradesense.indicators.oscillators import calculate_cci, calculate_stochastic, calculate_williams_r
from tradesense.indicators.schemas import PriceSeries
from tradesense.indicators.volatility import calculate_atr, realized_volatility
from tradesense.risk_manager.config import RiskConfig
from tradesense.risk_manager.exceptions import ConfigValidationError, EvaluationInProgressError
from tradesense.risk_manager.schemas import (
    MarketConditions,
    MarketContext,
    PortfolioSnapshot,
    TradeStatistics,
)

LOG = logging.getLogger(__name__)


# ========================================
# REQUEST/RESPONSE SCHEMAS
# ========================================

class BarModel(BaseModel):
    """Single OHLCV bar"""
    timestamp: datetime
    open: float = Field(..., gt=0.0)
    high: float = Field(..., gt=0.0)
    low: float = Field(..., gt=0.0)
    close: float = Field(..., gt=0.0)
    volume: float = Field(0.0, ge=0.0)


class MarketConditionsModel(BaseModel):
    volatility: float = Field(0.2, ge=0.0)
    major_events: List[str] = Field(default_factory=list)
    is_market_hours: bool = True
    liquidity_score: float = Field(0.8, ge=0.0, le=1.0)


class TradeStatisticsModel(BaseModel):
    win_rate: float = Field(..., ge=0.0, le=1.0)
    avg_win: float = Field(..., gt=0.0)
    avg_loss: float = Field(..., gt=0.0)


class MarketContextModel(BaseModel):
    """Optional caller-supplied market context"""
    market_conditions: Optional[MarketConditionsModel] = None
    asset_volatility: Optional[float] = Field(None, ge=0.0)
    sector_map: Dict[str, str] = Field(default_factory=dict)
    correlations: Dict[str, float] = Field(default_factory=dict)
    trade_statistics: Optional[TradeStatisticsModel] = None


class IndicatorRequest(BaseModel):
    """Compute indicators and the technical verdict for a series"""
    bars: List[BarModel]
    timeframe: str = Field("1h", description="Bar timeframe (1m, 5m, 15m, 1h, 4h, 1d, 1w)")


class EvaluateRequest(BaseModel):
    """Full decision request"""
    symbol: str = Field(..., description="Trading symbol (e.g., BTCUSDT)")
    timeframe: str = Field("1h", description="Bar timeframe")
    bars: List[BarModel]
    portfolio: Optional[Dict[str, Any]] = Field(None, description="Portfolio snapshot")
    risk_config: Optional[Dict[str, Any]] = Field(None, description="Risk setting overrides")
    market_context: Optional[MarketContextModel] = None


class EvaluateResponse(BaseModel):
    signal: dict
    assessment: dict
    risk_config_hash: str
    timestamp: str


# ========================================
# API INITIALIZATION
# ========================================

app = FastAPI(
    title="TradeSense API",
    description="Risk-gated trading decision core",
    version="1.0.0",
)

# Global engine instance
_engine: Optional[TradingDecisionEngine] = None
_risk_config: Optional[RiskConfig] = None


def get_engine() -> TradingDecisionEngine:
    """Get or create engine instance"""
    global _engine
    if _engine is None:
        _engine = TradingDecisionEngine(prediction_provider=MomentumPredictionProvider())
        LOG.info("Trading decision engine initialized for API")
    return _engine


def get_risk_config() -> RiskConfig:
    """Default risk configuration, read from the environment once"""
    global _risk_config
    if _risk_config is None:
        _risk_config = RiskConfig.from_env()
    return _risk_config


def _series(bars: List[BarModel]) -> PriceSeries:
    try:
        return PriceSeries.from_records(bar.model_dump() for bar in bars)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


def _context(model: Optional[MarketContextModel]) -> Optional[MarketContext]:
    if model is None:
        return None
    conditions = None
    if model.market_conditions is not None:
        mc = model.market_conditions
        conditions = MarketConditions(
            volatility=mc.volatility,
            major_events=tuple(mc.major_events),
            is_market_hours=mc.is_market_hours,
            liquidity_score=mc.liquidity_score,
        )
    stats = None
    if model.trade_statistics is not None:
        stats = TradeStatistics(**model.trade_statistics.model_dump())
    return MarketContext(
        market_conditions=conditions,
        asset_volatility=model.asset_volatility,
        sector_map=dict(model.sector_map),
        correlations=dict(model.correlations),
        trade_statistics=stats,
    )


def _latest(values) -> Optional[float]:
    arr = as_array(values)
    return float(arr[-1]) if len(arr) else None


# ========================================
# ENDPOINTS
# ========================================

@app.get("/health")
async def health_check():
    """API status and risk evaluator counters"""
    engine = get_engine()
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "risk_evaluator": engine.risk_evaluator.get_health_status(),
        "signal_config_hash": engine.technical_generator.config_hash,
    }


@app.get("/config")
async def get_config():
    """Default risk configuration and technical generator settings"""
    engine = get_engine()
    risk_config = get_risk_config()
    return {
        "risk_config": risk_config.to_dict(),
        "risk_config_hash": risk_config.get_config_hash(),
        "risk_config_violations": risk_config.validate(),
        "signal_config": engine.technical_generator.config.to_dict(),
        "signal_config_hash": engine.technical_generator.config_hash,
        "engine_version": "1.0.0",
    }


@app.post("/indicators")
async def compute_indicators(request: IndicatorRequest):
    """
    Compute the technical verdict and the raw indicator snapshot.

    No collaborators and no risk gating are involved.
    """
    series = _series(request.bars)
    engine = get_engine()
    ind = engine.technical_generator.config.indicators

    verdict = engine.technical_generator.generate(series)

    stochastic = calculate_stochastic(series.highs, series.lows, series.closes,
                                      ind.stochastic_k, ind.stochastic_d)
    oscillators = {
        'stochastic': None if stochastic.empty else {
            k: (None if np.isnan(v) else float(v)) for k, v in stochastic.iloc[-1].items()
        },
        'williams_r': _latest(calculate_williams_r(series.highs, series.lows, series.closes, ind.williams_period)),
        'cci': _latest(calculate_cci(series.highs, series.lows, series.closes, ind.cci_period)),
        'atr': _latest(calculate_atr(series.highs, series.lows, series.closes, ind.atr_period)),
        'realized_volatility': realized_volatility(series.closes, request.timeframe),
    }

    result = verdict.to_dict()
    result['oscillators'] = oscillators
    result['bars'] = len(series)
    return result


@app.post("/evaluate", response_model=EvaluateResponse)
async def evaluate(request: EvaluateRequest):
    """
    Produce a risk-gated trading decision.

    Returns:
        Composite signal and risk assessment
    """
    series = _series(request.bars)

    try:
        if request.risk_config:
            risk_config = RiskConfig.from_dict({**get_risk_config().to_dict(), **request.risk_config})
        else:
            risk_config = get_risk_config()
        snapshot = PortfolioSnapshot.from_dict(request.portfolio) if request.portfolio is not None else None

        signal, assessment = await get_engine().evaluate(
            request.symbol,
            series,
            request.timeframe,
            snapshot,
            risk_config,
            _context(request.market_context),
        )
    except ConfigValidationError as e:
        raise HTTPException(status_code=422, detail={"violations": e.violations})
    except EvaluationInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (KeyError, ValueError) as e:
        raise HTTPException(status_code=422, detail=f"Invalid request: {e}")

    return EvaluateResponse(
        signal=signal.to_dict(),
        assessment=assessment.to_dict(),
        risk_config_hash=risk_config.get_config_hash(),
        timestamp=datetime.utcnow().isoformat(),
    )
