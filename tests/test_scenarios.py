"""Tests for joint outcome scenario enumeration."""

from __future__ import annotations

import pytest

from polylens.config import MAX_SCENARIO_MARKETS
from polylens.models.market import Market, MarketOutcome
from polylens.models.strategy import Position, Side
from polylens.payoff.scenarios import (
    ScenarioLimitError,
    distinct_markets,
    generate_outcome_scenarios,
)


def _market(market_id: str, yes_price: float | None) -> Market:
    return Market(
        id=market_id,
        question=f"Question {market_id}?",
        category="other",
        end_date="",
        volume=0.0,
        liquidity=0.0,
        outcomes=[
            MarketOutcome(f"{market_id}-y", "Yes", yes_price),
            MarketOutcome(f"{market_id}-n", "No", None if yes_price is None else 1 - yes_price),
        ],
    )


def _pos(market: Market, side: Side, stake: float, entry_price: float) -> Position:
    return Position(market=market, side=side, stake=stake, entry_price=entry_price)


@pytest.fixture
def two_market_positions() -> list[Position]:
    """YES A 100 @ 0.6 (A priced 0.6) and NO B 50 @ 0.3 (B priced 0.3)."""
    return [
        _pos(_market("A", 0.6), Side.YES, 100, 0.6),
        _pos(_market("B", 0.3), Side.NO, 50, 0.3),
    ]


class TestGenerateOutcomeScenarios:
    def test_count_and_ids(self, two_market_positions):
        scenarios = generate_outcome_scenarios(two_market_positions)
        assert [s.id for s in scenarios] == [f"scenario-{i}" for i in range(4)]

    def test_bitmask_assignment(self, two_market_positions):
        """Bit j of the index set → market j resolves YES."""
        outcomes = [s.outcomes for s in generate_outcome_scenarios(two_market_positions)]
        assert outcomes == [
            {"A": Side.NO, "B": Side.NO},
            {"A": Side.YES, "B": Side.NO},
            {"A": Side.NO, "B": Side.YES},
            {"A": Side.YES, "B": Side.YES},
        ]

    def test_payoffs(self, two_market_positions):
        no_leg = 50 * (1 / 0.7 - 1)
        yes_leg = 100 * (1 / 0.6 - 1)
        payoffs = [s.payoff for s in generate_outcome_scenarios(two_market_positions)]
        assert payoffs == [
            pytest.approx(-100 + no_leg),
            pytest.approx(yes_leg + no_leg),
            pytest.approx(-150),
            pytest.approx(yes_leg - 50),
        ]

    def test_probabilities(self, two_market_positions):
        probs = [s.probability for s in generate_outcome_scenarios(two_market_positions)]
        assert probs == [
            pytest.approx(0.28),
            pytest.approx(0.42),
            pytest.approx(0.12),
            pytest.approx(0.18),
        ]
        assert sum(probs) == pytest.approx(1.0)

    def test_shared_market_counted_once(self):
        """Two positions on one market → 2 scenarios, probability not squared."""
        market = _market("A", 0.6)
        positions = [
            _pos(market, Side.YES, 100, 0.6),
            _pos(market, Side.NO, 40, 0.6),
        ]
        scenarios = generate_outcome_scenarios(positions)
        assert len(scenarios) == 2
        assert [s.probability for s in scenarios] == [pytest.approx(0.4), pytest.approx(0.6)]
        # A resolves NO: YES leg loses 100, NO leg wins 40 × (1/0.4 − 1) = 60
        assert scenarios[0].payoff == pytest.approx(-40)

    def test_first_appearance_order(self):
        a, b = _market("A", 0.5), _market("B", 0.5)
        positions = [_pos(b, Side.YES, 10, 0.5), _pos(a, Side.YES, 10, 0.5), _pos(b, Side.NO, 10, 0.5)]
        assert [m.id for m in distinct_markets(positions)] == ["B", "A"]
        scenario_1 = generate_outcome_scenarios(positions)[1]
        assert scenario_1.outcomes == {"B": Side.YES, "A": Side.NO}

    def test_missing_price_neutral(self):
        positions = [_pos(_market("A", None), Side.YES, 10, 0.5)]
        probs = [s.probability for s in generate_outcome_scenarios(positions)]
        assert probs == [0.5, 0.5]

    def test_no_positions_single_empty_scenario(self):
        scenarios = generate_outcome_scenarios([])
        assert len(scenarios) == 1
        assert scenarios[0].outcomes == {}
        assert scenarios[0].probability == 1.0
        assert scenarios[0].payoff == 0

    def test_to_dict(self, two_market_positions):
        data = generate_outcome_scenarios(two_market_positions)[1].to_dict()
        assert data["id"] == "scenario-1"
        assert data["outcomes"] == {"A": "YES", "B": "NO"}


class TestScenarioLimit:
    def test_default_limit(self):
        assert MAX_SCENARIO_MARKETS == 20

    def test_over_limit_raises(self):
        positions = [_pos(_market(f"m{i}", 0.5), Side.YES, 1, 0.5) for i in range(3)]
        with pytest.raises(ScenarioLimitError) as exc_info:
            generate_outcome_scenarios(positions, max_markets=2)
        assert exc_info.value.market_count == 3
        assert exc_info.value.limit == 2

    def test_is_value_error(self):
        positions = [_pos(_market(f"m{i}", 0.5), Side.YES, 1, 0.5) for i in range(21)]
        with pytest.raises(ValueError):
            generate_outcome_scenarios(positions)

    def test_at_limit_ok(self):
        positions = [_pos(_market(f"m{i}", 0.5), Side.YES, 1, 0.5) for i in range(3)]
        assert len(generate_outcome_scenarios(positions, max_markets=3)) == 8
