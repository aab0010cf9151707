"""
Venue Availability

A venue is approved when it supports the symbol, is healthy and is not
HIGH / EXTREME risk. Status overrides in the market context take
precedence over the snapshot's account flags.
"""

from typing import FrozenSet, Mapping
import logging

from tradesense.risk_manager.schemas import PortfolioSnapshot, RiskLevel, VenueStatus

LOG = logging.getLogger(__name__)

BLOCKING_LEVELS = (RiskLevel.HIGH, RiskLevel.EXTREME)


def approved_venues(
    symbol: str,
    snapshot: PortfolioSnapshot,
    overrides: Mapping[str, VenueStatus],
) -> FrozenSet[str]:
    approved = set()
    for venue in sorted(snapshot.accounts):
        account = snapshot.accounts[venue]
        status = overrides.get(venue)
        if status is None:
            status = VenueStatus(
                healthy=account.healthy,
                risk_level=account.risk_level,
                supports_symbol=account.supports(symbol),
            )

        if not status.supports_symbol:
            continue
        if not status.healthy:
            LOG.warning(f"Venue {venue} failed health check: {status.reason or 'unhealthy'}")
            continue
        if status.risk_level in BLOCKING_LEVELS:
            LOG.debug(f"Venue {venue} skipped for {symbol}: risk {status.risk_level.value}")
            continue
        approved.add(venue)
    return frozenset(approved)
