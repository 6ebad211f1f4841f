"""Run every enabled rule over a MarketCluster and rank the flags."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone

from polylens.config import ScannerConfig
from polylens.models.cluster import ClusterType, MarketCluster
from polylens.models.flag import RuleType, ScannerFlag, ScannerResult
from polylens.scanner.rules import (
    check_arbitrage_bundles,
    check_sum_to_one,
    check_threshold_consistency,
)

logger = logging.getLogger(__name__)

SUM_TO_ONE_CLUSTER_TYPES = (ClusterType.MUTUAL_EXCLUSIVE, ClusterType.CUSTOM)


def rank_flags(flags: list[ScannerFlag]) -> list[ScannerFlag]:
    """Severity score descending. Stable, so equal scores keep rule order.

    Returns a new list.
    """
    return sorted(flags, key=lambda f: f.severity_score, reverse=True)


def scan_cluster(
    cluster: MarketCluster,
    config: ScannerConfig | None = None,
) -> ScannerResult:
    """클러스터 1회 스캔: sum-to-one → threshold → arbitrage 후 정렬."""
    if config is None:
        config = ScannerConfig()

    started = time.perf_counter()
    flags: list[ScannerFlag] = []
    checks_performed = 0
    markets = cluster.markets

    if (
        config.is_enabled(RuleType.SUM_TO_ONE)
        and cluster.cluster_type in SUM_TO_ONE_CLUSTER_TYPES
    ):
        checks_performed += 1
        flag = check_sum_to_one(markets, config.sum_to_one_threshold)
        if flag is not None:
            flags.append(flag)

    if (
        config.is_enabled(RuleType.THRESHOLD_CONSISTENCY)
        and cluster.cluster_type == ClusterType.THRESHOLD
        and cluster.threshold_config is not None
    ):
        checks_performed += 1
        flag = check_threshold_consistency(
            markets, cluster.threshold_config.thresholds, config.threshold_margin
        )
        if flag is not None:
            flags.append(flag)

    if config.is_enabled(RuleType.ARBITRAGE_BUNDLE):
        checks_performed += 1
        flag = check_arbitrage_bundles(markets, config.min_arbitrage_profit)
        if flag is not None:
            flags.append(flag)

    ranked = rank_flags(flags)
    duration_ms = (time.perf_counter() - started) * 1000.0

    logger.info(
        "Scanned cluster %s (%s, %d markets): %d check(s), %d flag(s) in %.2fms",
        cluster.id or cluster.name, cluster.cluster_type.value, len(markets),
        checks_performed, len(ranked), duration_ms,
    )

    return ScannerResult(
        cluster=cluster,
        flags=ranked,
        scanned_at=datetime.now(tz=timezone.utc),
        scan_duration=duration_ms,
        checks_performed=checks_performed,
    )
