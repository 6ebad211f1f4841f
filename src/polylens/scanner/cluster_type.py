"""Heuristic classification of a market set into a ClusterType."""

from __future__ import annotations

import re

from polylens.models.cluster import ClusterType
from polylens.models.market import Market
from polylens.scanner.thresholds import NUMBER_TOKEN

NUMBER_PATTERN = re.compile(NUMBER_TOKEN)

PREFIX_WORDS = 3
MAX_EXCLUSIVE_MARKETS = 5


def question_prefix(question: str, words: int = PREFIX_WORDS) -> str:
    return " ".join(question.split(" ")[:words])


def shares_question_prefix(markets: list[Market], words: int = PREFIX_WORDS) -> bool:
    """True when every question starts with the same first words.

    Literal, case-sensitive comparison: "Will Bitcoin be" and "will bitcoin be"
    differ.
    """
    prefixes = [question_prefix(m.question, words) for m in markets]
    return all(p == prefixes[0] for p in prefixes)


def has_number(question: str) -> bool:
    return NUMBER_PATTERN.search(question) is not None


def detect_cluster_type(markets: list[Market]) -> ClusterType:
    """Threshold if all questions carry a number and share a prefix,
    mutually exclusive if they share a category (≤5 markets), else correlated.
    Fewer than two markets is always custom.
    """
    if len(markets) < 2:
        return ClusterType.CUSTOM

    if all(has_number(m.question) for m in markets) and shares_question_prefix(markets):
        return ClusterType.THRESHOLD

    first_category = markets[0].category
    same_category = all(m.category == first_category for m in markets)
    if same_category and len(markets) <= MAX_EXCLUSIVE_MARKETS:
        return ClusterType.MUTUAL_EXCLUSIVE

    return ClusterType.CORRELATED
