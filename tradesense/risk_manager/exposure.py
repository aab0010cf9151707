"""
Portfolio Exposure

Derives fractional exposure (total, per asset, per sector) from a
portfolio snapshot and checks it against configured caps.
"""

from typing import Dict, Optional
import logging

import pandas as pd

from tradesense.risk_manager.config import RiskConfig
from tradesense.risk_manager.schemas import ExposureCheck, PortfolioExposure, PortfolioSnapshot

LOG = logging.getLogger(__name__)


def account_value(snapshot: PortfolioSnapshot, config: RiskConfig) -> float:
    """
    Total account value in quote currency.

    Quote-currency balances count at face value; other currencies use the
    snapshot's conversion rates and are skipped (with a warning) when no
    rate is available. Floored at `min_account_value`.
    """
    total = 0.0
    for venue in sorted(snapshot.accounts):
        for balance in snapshot.accounts[venue].balances:
            if balance.currency in config.quote_currencies:
                total += balance.total
                continue
            rate = snapshot.conversion_rates.get(balance.currency)
            if rate is None:
                LOG.warning(f"No conversion rate for {balance.currency} on {venue}; balance ignored")
                continue
            total += balance.total * rate
    return max(total, config.min_account_value)


def compute_exposure(
    snapshot: PortfolioSnapshot,
    config: RiskConfig,
    sector_map: Optional[Dict[str, str]] = None,
) -> PortfolioExposure:
    """Aggregate position values across venues into fractional exposure"""
    sector_map = sector_map or {}
    value = account_value(snapshot, config)

    rows = [
        {'venue': venue, 'symbol': pos.symbol, 'value': pos.value,
         'sector': sector_map.get(pos.symbol)}
        for venue in sorted(snapshot.accounts)
        for pos in snapshot.accounts[venue].positions
    ]
    if not rows:
        return PortfolioExposure(0.0, {}, {}, value, {})

    df = pd.DataFrame(rows)
    by_symbol = df.groupby('symbol')['value'].sum()
    by_sector = df.dropna(subset=['sector']).groupby('sector')['value'].sum()

    return PortfolioExposure(
        total_fraction=float(df['value'].sum() / value),
        by_asset={k: float(v / value) for k, v in by_symbol.items()},
        by_sector={k: float(v / value) for k, v in by_sector.items()},
        account_value=value,
        position_values={k: float(v) for k, v in by_symbol.items()},
    )


def _pct(value: float) -> str:
    return f"{value * 100:.1f}%"


def check_exposure(
    symbol: str,
    exposure: PortfolioExposure,
    config: RiskConfig,
    sector: Optional[str] = None,
) -> ExposureCheck:
    """
    Reject when a cap is already reached.

    Order: total, single asset (max_position_size), sector.
    """
    if exposure.total_fraction >= config.max_total_exposure:
        return ExposureCheck(
            allowed=False,
            exposure=exposure,
            reason=(f"Total portfolio exposure ({_pct(exposure.total_fraction)}) "
                    f"exceeds limit ({_pct(config.max_total_exposure)})"),
        )

    asset = exposure.by_asset.get(symbol, 0.0)
    if asset >= config.max_position_size:
        return ExposureCheck(
            allowed=False,
            exposure=exposure,
            reason=(f"Exposure to {symbol} ({_pct(asset)}) exceeds single asset "
                    f"limit ({_pct(config.max_position_size)})"),
        )

    if sector:
        sector_fraction = exposure.by_sector.get(sector, 0.0)
        if sector_fraction >= config.max_sector_exposure:
            return ExposureCheck(
                allowed=False,
                exposure=exposure,
                reason=(f"Exposure to {sector} sector ({_pct(sector_fraction)}) "
                        f"exceeds limit ({_pct(config.max_sector_exposure)})"),
            )

    return ExposureCheck(allowed=True, exposure=exposure)
