"""Shared test fixtures for polylens."""

from __future__ import annotations

import pytest

from polylens.models.cluster import ClusterType, MarketCluster
from polylens.models.market import Market, MarketOutcome
from polylens.models.strategy import Position, Side, Strategy


def _market(
    market_id: str = "mkt_1",
    yes_price: float | None = 0.5,
    no_price: float | None = None,
    question: str = "Will BTC be above $100k?",
    category: str = "crypto",
) -> Market:
    """Binary market. no_price defaults to 1 − yes_price."""
    if no_price is None and yes_price is not None:
        no_price = 1 - yes_price
    return Market(
        id=market_id,
        question=question,
        category=category,
        end_date="2026-12-31T00:00:00Z",
        volume=10000.0,
        liquidity=5000.0,
        outcomes=[
            MarketOutcome(id=f"{market_id}-yes", name="Yes", price=yes_price),
            MarketOutcome(id=f"{market_id}-no", name="No", price=no_price),
        ],
    )


def _position(
    market: Market,
    side: Side = Side.YES,
    stake: float = 100.0,
    entry_price: float = 0.6,
    position_id: str | None = None,
) -> Position:
    position = Position(market=market, side=side, stake=stake, entry_price=entry_price)
    if position_id is not None:
        position.id = position_id
    return position


@pytest.fixture
def btc_market() -> Market:
    """YES 0.60 / NO 0.40, fairly priced."""
    return _market("btc_100k", yes_price=0.60, no_price=0.40)


@pytest.fixture
def election_markets() -> list[Market]:
    """Three mutually exclusive candidates summing to 1.2 (overpriced)."""
    return [
        _market("cand_a", 0.4, question="Will Alice win the election?", category="politics"),
        _market("cand_b", 0.4, question="Will Bob win the election?", category="politics"),
        _market("cand_c", 0.4, question="Will Carol win the election?", category="politics"),
    ]


@pytest.fixture
def election_cluster(election_markets) -> MarketCluster:
    return MarketCluster(
        id="cluster_election",
        name="Election winner",
        markets=election_markets,
        cluster_type=ClusterType.MUTUAL_EXCLUSIVE,
    )


@pytest.fixture
def yes_position(btc_market) -> Position:
    """YES, stake 100 at 0.6: +66.67 on YES, −100 on NO."""
    return _position(btc_market, Side.YES, 100.0, 0.6, position_id="pos_yes")


@pytest.fixture
def simple_strategy(yes_position) -> Strategy:
    return Strategy(positions=[yes_position], discount_rate=0.10, name="BTC long")


@pytest.fixture
def cluster_dict() -> dict:
    """Cluster payload as the CLI reads it from disk."""
    return {
        "id": "cluster_election",
        "name": "Election winner",
        "clusterType": "mutual_exclusive",
        "markets": [
            {
                "id": mid,
                "question": f"Will {name} win the election?",
                "category": "politics",
                "endDate": "2026-11-03T00:00:00Z",
                "outcomes": [
                    {"id": f"{mid}-yes", "name": "Yes", "price": 0.4},
                    {"id": f"{mid}-no", "name": "No", "price": 0.6},
                ],
            }
            for mid, name in (("cand_a", "Alice"), ("cand_b", "Bob"), ("cand_c", "Carol"))
        ],
    }


@pytest.fixture
def strategy_dict() -> dict:
    return {
        "name": "BTC long",
        "discountRate": 0.10,
        "positions": [
            {
                "id": "pos_yes",
                "side": "yes",
                "stake": 100,
                "entryPrice": 0.6,
                "market": {
                    "id": "btc_100k",
                    "question": "Will BTC be above $100k?",
                    "category": "crypto",
                    "outcomes": [
                        {"id": "btc-yes", "name": "Yes", "price": 0.6},
                        {"id": "btc-no", "name": "No", "price": 0.4},
                    ],
                },
            }
        ],
    }
