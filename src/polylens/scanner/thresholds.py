"""Numeric threshold extraction from market questions.

"Will Bitcoin be above $50,000?" → (">", 50000.0)
"Will ETH drop below 2.5k?"      → ("<", 2500.0)

Only the first comparison clause of a question is used. A question such as
"Will BTC be above $90k before it falls under $80k?" yields (">", 90000)
and the second clause is ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from polylens.models.cluster import ThresholdConfig, ThresholdMarket
from polylens.models.market import Market

# 통화-숫자 토큰 (클러스터 타입 감지와 공유): "$50,000", "2.5k", "1b"
NUMBER_TOKEN = r"\$?\d+[,.]?\d*[kKmMbB]?"

THRESHOLD_PATTERN = re.compile(
    r"(above|below|over|under|greater than|less than|exceed|exceeds|>|<)"
    r"\s*\$?(\d+[,.]?\d*[kKmMbB]?)",
    re.IGNORECASE,
)

GREATER_KEYWORDS = frozenset({"above", "over", "greater than", "exceed", "exceeds", ">"})

MAGNITUDE = {"k": 1e3, "m": 1e6, "b": 1e9}


@dataclass
class ExtractedThreshold:
    market_id: str
    operator: str  # ">" | "<"
    value: float

    def to_threshold_market(self) -> ThresholdMarket:
        return ThresholdMarket(
            market_id=self.market_id, operator=self.operator, value=self.value
        )


def parse_magnitude(token: str) -> float:
    """"50,000" → 50000.0, "2.5k" → 2500.0, "$1b" → 1e9."""
    token = token.lstrip("$")
    multiplier = 1.0
    suffix = token[-1:].lower()
    if suffix in MAGNITUDE:
        multiplier = MAGNITUDE[suffix]
        token = token[:-1]
    return float(token.replace(",", "")) * multiplier


def extract_threshold(market: Market) -> ExtractedThreshold | None:
    """마켓 질문의 첫 번째 비교 구문. 없으면 None."""
    match = THRESHOLD_PATTERN.search(market.question)
    if match is None:
        return None
    keyword = match.group(1).lower()
    operator = ">" if keyword in GREATER_KEYWORDS else "<"
    return ExtractedThreshold(
        market_id=market.id,
        operator=operator,
        value=parse_magnitude(match.group(2)),
    )


def extract_thresholds(markets: list[Market]) -> list[ExtractedThreshold]:
    """임계값이 있는 마켓만 추출. 비교 구문 없는 마켓은 스킵."""
    thresholds: list[ExtractedThreshold] = []
    for market in markets:
        threshold = extract_threshold(market)
        if threshold is not None:
            thresholds.append(threshold)
    return thresholds


def build_threshold_config(variable: str, markets: list[Market]) -> ThresholdConfig:
    """ThresholdConfig for a cluster assembled from free-text questions."""
    return ThresholdConfig(
        variable=variable,
        thresholds=[t.to_threshold_market() for t in extract_thresholds(markets)],
    )
