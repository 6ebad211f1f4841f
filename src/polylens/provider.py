"""Market snapshot provider boundary.

The scanner and analyzer never fetch anything. Callers that want fresher
prices pass a provider to refresh_cluster / refresh_strategy before scanning
or analyzing. A provider is any callable taking market ids and returning
the current Market snapshots.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Iterable

from polylens.models.cluster import MarketCluster
from polylens.models.market import Market
from polylens.models.strategy import Strategy

logger = logging.getLogger(__name__)

MarketProvider = Callable[[list[str]], list[Market]]


class StaticMarketProvider:
    """마켓 id 기준 고정 스냅샷 제공."""

    def __init__(self, markets: Iterable[Market] = ()):
        self._markets: dict[str, Market] = {}
        for market in markets:
            self._markets[market.id] = market

    def __call__(self, market_ids: list[str]) -> list[Market]:
        return [self._markets[mid] for mid in market_ids if mid in self._markets]

    def __len__(self) -> int:
        return len(self._markets)


def _fetch(provider: MarketProvider, market_ids: list[str]) -> dict[str, Market]:
    unique_ids = list(dict.fromkeys(market_ids))
    fresh = {m.id: m for m in provider(unique_ids)}
    missing = [mid for mid in unique_ids if mid not in fresh]
    if missing:
        logger.warning(
            "Provider returned no snapshot for %d market(s), keeping previous: %s",
            len(missing), ", ".join(missing),
        )
    return fresh


def refresh_cluster(cluster: MarketCluster, provider: MarketProvider) -> MarketCluster:
    """Copy of ``cluster`` with every market replaced by its fresh snapshot."""
    fresh = _fetch(provider, cluster.market_ids())
    markets = [fresh.get(m.id, m) for m in cluster.markets]
    return replace(cluster, markets=markets)


def refresh_strategy(strategy: Strategy, provider: MarketProvider) -> Strategy:
    """Copy of ``strategy`` whose positions see fresh market snapshots.

    Stake and entry price are untouched: only the prices used for scenario
    probabilities change.
    """
    fresh = _fetch(provider, [p.market.id for p in strategy.positions])
    positions = [
        replace(p, market=fresh.get(p.market.id, p.market)) for p in strategy.positions
    ]
    return replace(strategy, positions=positions)
