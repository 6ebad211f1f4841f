"""Tests for per-position payoff arithmetic."""

from __future__ import annotations

import pytest

from polylens.models.market import Market, MarketOutcome
from polylens.models.strategy import Position, Side
from polylens.payoff.formula import (
    aggregate_payoff,
    calculate_position_payoff,
    calculate_position_resolution_payoff,
)


def _position(side: Side = Side.YES, stake: float = 100.0, entry_price: float = 0.6) -> Position:
    market = Market(
        id="mkt_1",
        question="Will BTC be above $100k?",
        category="crypto",
        end_date="",
        volume=0.0,
        liquidity=0.0,
        outcomes=[MarketOutcome("y", "Yes", 0.6), MarketOutcome("n", "No", 0.4)],
    )
    return Position(market=market, side=side, stake=stake, entry_price=entry_price)


class TestPositionPayoff:
    def test_yes_at_certainty(self):
        """YES 100 @ 0.6 → +66.67 at p=1."""
        assert calculate_position_payoff(_position(), 1.0) == pytest.approx(66.6667, rel=1e-4)

    def test_yes_at_zero(self):
        assert calculate_position_payoff(_position(), 0.0) == pytest.approx(-100)

    def test_even_odds_break_even(self):
        pos = _position(entry_price=0.5)
        assert calculate_position_payoff(pos, 0.5) == pytest.approx(0)

    def test_no_position_mirrors(self):
        """NO @ entry 0.6 pays at 0.4: +150 at p=0, −100 at p=1."""
        pos = _position(side=Side.NO)
        assert calculate_position_payoff(pos, 0.0) == pytest.approx(150)
        assert calculate_position_payoff(pos, 1.0) == pytest.approx(-100)

    def test_linear_in_probability(self):
        pos = _position()
        mid = calculate_position_payoff(pos, 0.5)
        ends = (calculate_position_payoff(pos, 0.0) + calculate_position_payoff(pos, 1.0)) / 2
        assert mid == pytest.approx(ends)

    def test_zero_entry_price_raises(self):
        with pytest.raises(ZeroDivisionError):
            calculate_position_payoff(_position(entry_price=0.0), 0.5)


class TestResolutionPayoff:
    def test_yes_wins(self):
        assert calculate_position_resolution_payoff(_position(), Side.YES) == pytest.approx(66.6667, rel=1e-4)

    def test_yes_loses(self):
        assert calculate_position_resolution_payoff(_position(), Side.NO) == pytest.approx(-100)

    def test_no_wins(self):
        """NO entry 0.6 resolving NO = 150."""
        pos = _position(side=Side.NO)
        assert calculate_position_resolution_payoff(pos, Side.NO) == pytest.approx(150)

    def test_no_loses(self):
        pos = _position(side=Side.NO)
        assert calculate_position_resolution_payoff(pos, Side.YES) == pytest.approx(-100)

    def test_matches_payoff_at_extremes(self):
        for side in (Side.YES, Side.NO):
            pos = _position(side=side)
            assert calculate_position_resolution_payoff(pos, Side.YES) == pytest.approx(
                calculate_position_payoff(pos, 1.0)
            )
            assert calculate_position_resolution_payoff(pos, Side.NO) == pytest.approx(
                calculate_position_payoff(pos, 0.0)
            )


class TestAggregatePayoff:
    def test_empty(self):
        assert aggregate_payoff([], 0.3) == 0

    def test_hedged_pair_is_flat(self):
        """YES + NO at 0.5 with equal stakes cancel at every probability."""
        positions = [
            _position(Side.YES, 100, 0.5),
            _position(Side.NO, 100, 0.5),
        ]
        for p in (0.0, 0.25, 0.5, 1.0):
            assert aggregate_payoff(positions, p) == pytest.approx(0)

    def test_sum_of_positions(self):
        positions = [_position(Side.YES, 100, 0.6), _position(Side.NO, 50, 0.3)]
        expected = sum(calculate_position_payoff(p, 0.7) for p in positions)
        assert aggregate_payoff(positions, 0.7) == pytest.approx(expected)
