"""Scanner rule checks over the markets of one cluster.

Each check is a total function over already-typed markets: it returns a
ScannerFlag when the rule is violated and None otherwise. Missing prices
read as 0.5 (see Market.yes_price / no_price).

Severity scores use round-half-up so 0.5 boundaries always round the same
way: round(x) = floor(x + 0.5).
"""

from __future__ import annotations

import logging
import math
import uuid
from typing import Optional, Protocol

from polylens.config import (
    DEFAULT_MIN_ARBITRAGE_PROFIT,
    DEFAULT_SUM_TO_ONE_THRESHOLD,
    DEFAULT_THRESHOLD_MARGIN,
)
from polylens.models.flag import RuleType, ScannerFlag, Severity, SuggestedTrade
from polylens.models.market import Market

logger = logging.getLogger(__name__)

# 편차 × 가중치 → 0–100 심각도 점수
SUM_TO_ONE_SEVERITY_WEIGHT = 500      # 0.2 deviation = 100
THRESHOLD_SEVERITY_WEIGHT = 300
ARBITRAGE_SEVERITY_WEIGHT = 500

# 균등 평균(1/n)보다 이만큼 높으면 "high"
PEER_OVERPRICE_RATIO = 1.1


class _Threshold(Protocol):
    market_id: str
    value: float


def _new_flag_id() -> str:
    return f"flag-{uuid.uuid4().hex[:12]}"


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def severity_score(deviation: float, weight: float) -> int:
    """편차를 0–100 점수로 변환."""
    return min(100, round_half_up(deviation * weight))


# ---------------------------------------------------------------------------
# Sum-to-one
# ---------------------------------------------------------------------------


def check_sum_to_one(
    markets: list[Market],
    threshold: float = DEFAULT_SUM_TO_ONE_THRESHOLD,
) -> Optional[ScannerFlag]:
    """Mutually exclusive outcomes: YES prices should sum to 1.

    Needs at least two markets. Each market gets a suggested trade: NO when
    its price is more than 10% above the uniform average 1/n, YES otherwise,
    weighted by its distance from that average.
    """
    if len(markets) < 2:
        return None

    probabilities = [m.yes_price for m in markets]
    total = sum(probabilities)
    deviation = abs(total - 1)

    if deviation <= threshold:
        return None

    score = severity_score(deviation, SUM_TO_ONE_SEVERITY_WEIGHT)
    overpriced = total > 1
    avg_price = 1 / len(markets)

    trades: list[SuggestedTrade] = []
    for market, price in zip(markets, probabilities):
        high = price > avg_price * PEER_OVERPRICE_RATIO
        trades.append(
            SuggestedTrade(
                market_id=market.id,
                market_question=market.question,
                side="NO" if high else "YES",
                suggested_stake=abs(price - avg_price),
                reason=(
                    f"Price {price * 100:.1f}% appears "
                    f"{'high' if high else 'low'} relative to peers"
                ),
            )
        )

    magnitude = "significant" if deviation > 0.1 else "minor"
    direction = "overpricing" if overpriced else "underpricing"

    logger.debug(
        "sum_to_one: Σ=%.4f deviation=%.4f score=%d over %d markets",
        total, deviation, score, len(markets),
    )

    return ScannerFlag(
        id=_new_flag_id(),
        rule_type=RuleType.SUM_TO_ONE,
        severity=Severity.from_score(score),
        severity_score=score,
        title=(
            "Mutually Exclusive Outcomes Overpriced"
            if overpriced
            else "Mutually Exclusive Outcomes Underpriced"
        ),
        explanation=(
            f"These markets represent mutually exclusive outcomes but their "
            f"probabilities sum to {total * 100:.1f}% instead of 100%. This "
            f"{magnitude} {direction} suggests potential inefficiency."
        ),
        affected_markets=list(markets),
        suggested_trades=trades,
        potential_profit=deviation * 100,
        confidence=min(95, 70 + score / 5),
    )


# ---------------------------------------------------------------------------
# Threshold consistency
# ---------------------------------------------------------------------------


def check_threshold_consistency(
    markets: list[Market],
    thresholds: list[_Threshold],
    margin: float = DEFAULT_THRESHOLD_MARGIN,
) -> Optional[ScannerFlag]:
    """P(X > t) must be non-increasing in t.

    Thresholds are sorted ascending; every adjacent pair where the higher
    cutoff is priced above the lower one by more than ``margin`` is a
    violation. All violations collapse into a single flag whose score is
    driven by the largest one.
    """
    if len(thresholds) < 2:
        return None

    by_id: dict[str, Market] = {}
    for market in markets:
        by_id.setdefault(market.id, market)

    ordered = sorted(thresholds, key=lambda t: t.value)

    violations: list[tuple[Market, Market, float]] = []  # (lower, higher, deviation)
    for lower, higher in zip(ordered, ordered[1:]):
        lower_market = by_id.get(lower.market_id)
        higher_market = by_id.get(higher.market_id)
        if lower_market is None or higher_market is None:
            continue

        lower_prob = lower_market.yes_price
        higher_prob = higher_market.yes_price
        if higher_prob > lower_prob + margin:
            violations.append((lower_market, higher_market, higher_prob - lower_prob))

    if not violations:
        return None

    max_deviation = max(v[2] for v in violations)
    score = severity_score(max_deviation, THRESHOLD_SEVERITY_WEIGHT)

    affected: list[Market] = []
    trades: list[SuggestedTrade] = []
    for lower_market, higher_market, _ in violations:
        for market in (lower_market, higher_market):
            if all(market is not seen for seen in affected):
                affected.append(market)
        trades.append(
            SuggestedTrade(
                market_id=higher_market.id,
                market_question=higher_market.question,
                side="NO",
                suggested_stake=1,
                reason="Higher threshold has higher probability than it should",
            )
        )
        trades.append(
            SuggestedTrade(
                market_id=lower_market.id,
                market_question=lower_market.question,
                side="YES",
                suggested_stake=1,
                reason="Lower threshold may be underpriced relative to higher",
            )
        )

    logger.debug(
        "threshold_consistency: %d violation(s), max deviation=%.4f score=%d",
        len(violations), max_deviation, score,
    )

    return ScannerFlag(
        id=_new_flag_id(),
        rule_type=RuleType.THRESHOLD_CONSISTENCY,
        severity=Severity.from_score(score),
        severity_score=score,
        title="Threshold Inconsistency Detected",
        explanation=(
            f"Found {len(violations)} case(s) where a higher threshold has higher "
            f"probability than a lower threshold. This violates logical consistency "
            f"- for example, P(X > 100) should never exceed P(X > 80)."
        ),
        affected_markets=affected,
        suggested_trades=trades,
        potential_profit=max_deviation * 50,
        confidence=85,
    )


# ---------------------------------------------------------------------------
# Arbitrage bundle
# ---------------------------------------------------------------------------


def check_arbitrage_bundles(
    markets: list[Market],
    min_profit: float = DEFAULT_MIN_ARBITRAGE_PROFIT,
) -> Optional[ScannerFlag]:
    """YES + NO of one market against the guaranteed $1 payout.

    Markets are visited in input order and the first qualifying market
    wins: later mispriced markets in the same call are not reported.
    """
    for market in markets:
        yes_price = market.yes_price
        no_price = market.no_price
        total_cost = yes_price + no_price

        if total_cost < 1 - min_profit:
            profit_margin = (1 - total_cost) / total_cost
            score = severity_score(profit_margin, ARBITRAGE_SEVERITY_WEIGHT)
            logger.debug(
                "arbitrage_bundle: %s underpriced, cost=%.4f margin=%.4f",
                market.id, total_cost, profit_margin,
            )
            return ScannerFlag(
                id=_new_flag_id(),
                rule_type=RuleType.ARBITRAGE_BUNDLE,
                severity=Severity.from_score(score),
                severity_score=score,
                title="Risk-Free Arbitrage Opportunity",
                explanation=(
                    f"Buying both YES ({yes_price * 100:.1f}¢) and NO "
                    f"({no_price * 100:.1f}¢) costs {total_cost * 100:.1f}¢ but "
                    f"guarantees $1 payout. This {profit_margin * 100:.1f}% return "
                    f"is effectively risk-free."
                ),
                affected_markets=[market],
                suggested_trades=[
                    SuggestedTrade(market.id, market.question, "YES", 1,
                                   "Part of arbitrage bundle"),
                    SuggestedTrade(market.id, market.question, "NO", 1,
                                   "Part of arbitrage bundle"),
                ],
                potential_profit=profit_margin * 100,
                confidence=95,
            )

        if total_cost > 1 + min_profit:
            profit_margin = total_cost - 1
            score = severity_score(profit_margin, ARBITRAGE_SEVERITY_WEIGHT)
            logger.debug(
                "arbitrage_bundle: %s overpriced, cost=%.4f excess=%.4f",
                market.id, total_cost, profit_margin,
            )
            return ScannerFlag(
                id=_new_flag_id(),
                rule_type=RuleType.ARBITRAGE_BUNDLE,
                severity=Severity.from_score(score),
                severity_score=score,
                title="Overpriced Outcomes Detected",
                explanation=(
                    f"YES ({yes_price * 100:.1f}¢) + NO ({no_price * 100:.1f}¢) = "
                    f"{total_cost * 100:.1f}¢, exceeding $1. If you could sell both, "
                    f"you'd profit {profit_margin * 100:.1f}¢ per share."
                ),
                affected_markets=[market],
                suggested_trades=[
                    SuggestedTrade(
                        market.id,
                        market.question,
                        "NO" if yes_price > no_price else "YES",
                        1,
                        "The less expensive side may be underpriced",
                    ),
                ],
                potential_profit=profit_margin * 50,
                confidence=75,
            )

    return None
