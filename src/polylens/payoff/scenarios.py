"""Joint resolution scenarios for a set of positions.

Every distinct market resolves independently, so N markets give 2^N
scenarios. Scenario i assigns YES to market j exactly when bit j of i is
set, with markets numbered in order of first appearance.
"""

from __future__ import annotations

import logging

from polylens.config import MAX_SCENARIO_MARKETS
from polylens.models.market import Market
from polylens.models.strategy import OutcomeScenario, Position, Side
from polylens.payoff.formula import calculate_position_resolution_payoff

logger = logging.getLogger(__name__)


class ScenarioLimitError(ValueError):
    """Too many distinct markets to enumerate every joint outcome."""

    def __init__(self, market_count: int, limit: int):
        self.market_count = market_count
        self.limit = limit
        super().__init__(
            f"{market_count} distinct markets would need 2^{market_count} "
            f"scenarios; the limit is {limit} markets"
        )


def distinct_markets(positions: list[Position]) -> list[Market]:
    """마켓 id별 Market 하나. 첫 포지션 우선, 등장 순서 유지."""
    seen: dict[str, Market] = {}
    for position in positions:
        seen.setdefault(position.market.id, position.market)
    return list(seen.values())


def generate_outcome_scenarios(
    positions: list[Position],
    max_markets: int = MAX_SCENARIO_MARKETS,
) -> list[OutcomeScenario]:
    """Enumerate all 2^N joint outcomes with their payoff and probability.

    Probability multiplies each distinct market's current YES price (or its
    complement) once, however many positions share that market.

    Raises:
        ScenarioLimitError: more than ``max_markets`` distinct markets.
    """
    markets = distinct_markets(positions)
    n = len(markets)
    if n > max_markets:
        raise ScenarioLimitError(n, max_markets)

    yes_prices = [m.yes_price for m in markets]
    market_ids = [m.id for m in markets]

    scenarios: list[OutcomeScenario] = []
    for i in range(2 ** n):
        outcomes: dict[str, Side] = {}
        probability = 1.0
        for j, market_id in enumerate(market_ids):
            if i & (1 << j):
                outcomes[market_id] = Side.YES
                probability *= yes_prices[j]
            else:
                outcomes[market_id] = Side.NO
                probability *= 1 - yes_prices[j]

        payoff = 0.0
        for position in positions:
            payoff += calculate_position_resolution_payoff(
                position, outcomes[position.market.id]
            )

        scenarios.append(
            OutcomeScenario(
                id=f"scenario-{i}",
                outcomes=outcomes,
                probability=probability,
                payoff=payoff,
            )
        )

    logger.debug("Enumerated %d scenario(s) over %d market(s)", len(scenarios), n)
    return scenarios
