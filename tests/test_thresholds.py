"""Tests for threshold extraction and cluster type detection."""

from __future__ import annotations

import pytest

from polylens.models.cluster import ClusterType
from polylens.models.market import Market, MarketOutcome
from polylens.scanner.cluster_type import (
    detect_cluster_type,
    has_number,
    question_prefix,
    shares_question_prefix,
)
from polylens.scanner.thresholds import (
    build_threshold_config,
    extract_threshold,
    extract_thresholds,
    parse_magnitude,
)


def _market(question: str, market_id: str = "m1", category: str = "crypto") -> Market:
    return Market(
        id=market_id,
        question=question,
        category=category,
        end_date="",
        volume=0.0,
        liquidity=0.0,
        outcomes=[
            MarketOutcome(f"{market_id}-y", "Yes", 0.5),
            MarketOutcome(f"{market_id}-n", "No", 0.5),
        ],
    )


# ---------------------------------------------------------------------------
# parse_magnitude / extract_threshold
# ---------------------------------------------------------------------------


class TestParseMagnitude:
    @pytest.mark.parametrize(
        "token, expected",
        [
            ("50,000", 50000.0),
            ("$50,000", 50000.0),
            ("2.5k", 2500.0),
            ("100K", 100000.0),
            ("5m", 5e6),
            ("$1b", 1e9),
            ("42", 42.0),
        ],
    )
    def test_tokens(self, token, expected):
        assert parse_magnitude(token) == pytest.approx(expected)


class TestExtractThreshold:
    def test_above_dollar_amount(self):
        t = extract_threshold(_market("Will Bitcoin be above $50,000?"))
        assert t.operator == ">"
        assert t.value == pytest.approx(50000)
        assert t.market_id == "m1"

    def test_below_with_suffix(self):
        t = extract_threshold(_market("Will ETH drop below 2.5k?"))
        assert t.operator == "<"
        assert t.value == pytest.approx(2500)

    @pytest.mark.parametrize(
        "question, operator",
        [
            ("Will GDP growth exceed 3%?", ">"),
            ("Will the index close over 5000?", ">"),
            ("Will turnout be greater than 60%?", ">"),
            ("Will inflation come in under 2%?", "<"),
            ("Will the spread be less than 10?", "<"),
            ("Rate > 5?", ">"),
            ("Rate < 5?", "<"),
        ],
    )
    def test_keywords(self, question, operator):
        assert extract_threshold(_market(question)).operator == operator

    def test_case_insensitive(self):
        t = extract_threshold(_market("WILL BTC CLOSE ABOVE 5M?"))
        assert t.operator == ">"
        assert t.value == pytest.approx(5e6)

    def test_first_clause_only(self):
        t = extract_threshold(_market("Will BTC be above $90k before it falls under $80k?"))
        assert t.operator == ">"
        assert t.value == pytest.approx(90000)

    def test_no_clause(self):
        assert extract_threshold(_market("Who will win the election?")) is None


class TestExtractThresholds:
    def test_no_clause_empty(self):
        assert extract_thresholds([_market("Who will win the election?")]) == []

    def test_skips_markets_without_clause(self):
        markets = [
            _market("Will BTC be above $80k?", "btc_80"),
            _market("Who wins?", "other"),
            _market("Will BTC be above $100k?", "btc_100"),
        ]
        found = extract_thresholds(markets)
        assert [t.market_id for t in found] == ["btc_80", "btc_100"]
        assert [t.value for t in found] == [pytest.approx(80000), pytest.approx(100000)]

    def test_build_threshold_config(self):
        markets = [
            _market("Will BTC be above $80k?", "btc_80"),
            _market("Will BTC be above $100k?", "btc_100"),
        ]
        config = build_threshold_config("BTC price", markets)
        assert config.variable == "BTC price"
        assert [t.market_id for t in config.thresholds] == ["btc_80", "btc_100"]
        assert all(t.operator == ">" for t in config.thresholds)


# ---------------------------------------------------------------------------
# Cluster type detection
# ---------------------------------------------------------------------------


class TestQuestionPrefix:
    def test_first_three_words(self):
        assert question_prefix("Will Bitcoin be above $100k?") == "Will Bitcoin be"

    def test_short_question(self):
        assert question_prefix("Recession?") == "Recession?"

    def test_shared(self):
        markets = [
            _market("Will Bitcoin be above $80k?", "a"),
            _market("Will Bitcoin be above $100k?", "b"),
        ]
        assert shares_question_prefix(markets) is True

    def test_case_sensitive(self):
        markets = [
            _market("Will Bitcoin be above $80k?", "a"),
            _market("will bitcoin be above $100k?", "b"),
        ]
        assert shares_question_prefix(markets) is False

    def test_has_number(self):
        assert has_number("Will BTC hit $100k?")
        assert not has_number("Will Alice win?")


class TestDetectClusterType:
    def test_single_market_custom(self):
        assert detect_cluster_type([_market("Will BTC be above $100k?")]) == ClusterType.CUSTOM

    def test_empty_custom(self):
        assert detect_cluster_type([]) == ClusterType.CUSTOM

    def test_threshold(self):
        markets = [
            _market("Will Bitcoin be above $80k?", "a"),
            _market("Will Bitcoin be above $100k?", "b"),
        ]
        assert detect_cluster_type(markets) == ClusterType.THRESHOLD

    def test_numbers_without_shared_prefix(self):
        """Same category, numbers but no common prefix → mutually exclusive."""
        markets = [
            _market("Will Bitcoin be above $80k?", "a"),
            _market("Does ETH reach $5k?", "b"),
        ]
        assert detect_cluster_type(markets) == ClusterType.MUTUAL_EXCLUSIVE

    def test_same_category_mutual_exclusive(self, election_markets):
        assert detect_cluster_type(election_markets) == ClusterType.MUTUAL_EXCLUSIVE

    def test_too_many_for_mutual_exclusive(self):
        markets = [_market(f"Will candidate {c} win?", c, "politics") for c in "ABCDEF"]
        assert detect_cluster_type(markets) == ClusterType.CORRELATED

    def test_mixed_categories_correlated(self):
        markets = [
            _market("Will Alice win?", "a", "politics"),
            _market("Will the Lakers win?", "b", "sports"),
        ]
        assert detect_cluster_type(markets) == ClusterType.CORRELATED
