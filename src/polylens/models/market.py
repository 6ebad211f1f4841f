"""Market and MarketOutcome data models."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)

# 가격 누락 시 사용하는 중립 가격
NEUTRAL_PRICE = 0.5

# 태그와 카테고리가 모두 없을 때 쓰는 키워드 분류
CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "crypto": ("bitcoin", "crypto", "eth", "btc"),
    "politics": (
        "trump", "election", "president", "congress",
        "senate", "governor", "macron", "starmer",
    ),
    "sports": ("nba", "nfl", "mlb", "soccer", "super bowl", "championship"),
    "economy": (
        "gdp", "inflation", "fed", "interest rate",
        "recession", "doge", "budget", "spending",
    ),
    "world": ("war", "ukraine", "russia", "nato", "china", "military"),
}


def _to_float(value, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _parse_json_list(value) -> list | None:
    """Gamma returns list fields as JSON strings; accept both forms."""
    if value is None:
        return None
    if isinstance(value, list):
        return value
    try:
        parsed = json.loads(value)
    except (json.JSONDecodeError, TypeError):
        return None
    return parsed if isinstance(parsed, list) else None


def classify_category(question: str, event_title: str = "") -> str:
    """Keyword category for a question. "other" when nothing matches."""
    question_lower = question.lower()
    title_lower = event_title.lower()
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(k in question_lower for k in keywords):
            return category
        # Only crypto looks at the event title as well
        if category == "crypto" and any(k in title_lower for k in ("bitcoin", "crypto")):
            return category
    return "other"


@dataclass
class MarketOutcome:
    """One side of a binary market. price=None means the feed had no price."""

    id: str
    name: str
    price: Optional[float]
    price_change_24h: float = 0.0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "price_change_24h": self.price_change_24h,
        }

    @classmethod
    def from_dict(cls, data: dict) -> MarketOutcome:
        price = data.get("price")
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            price=None if price is None else float(price),
            price_change_24h=_to_float(
                data.get("price_change_24h", data.get("priceChange24h", 0.0))
            ),
        )


@dataclass
class Market:
    """A binary prediction market snapshot. outcomes[0] is YES, outcomes[1] is NO."""

    id: str
    question: str
    category: str
    end_date: str
    volume: float
    liquidity: float
    outcomes: list[MarketOutcome]
    slug: str = ""
    active: bool = True
    closed: bool = False
    resolved: bool = False
    description: str = ""
    tags: list[str] = field(default_factory=list)

    def _price(self, index: int) -> float:
        if len(self.outcomes) <= index:
            return NEUTRAL_PRICE
        price = self.outcomes[index].price
        return NEUTRAL_PRICE if price is None else price

    @property
    def yes_price(self) -> float:
        """YES 가격. 누락 시 중립 0.5."""
        return self._price(0)

    @property
    def no_price(self) -> float:
        """NO 가격. 누락 시 중립 0.5."""
        return self._price(1)

    @property
    def total_cost(self) -> float:
        """양쪽 1주씩 매수 비용."""
        return self.yes_price + self.no_price

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "question": self.question,
            "category": self.category,
            "end_date": self.end_date,
            "volume": self.volume,
            "liquidity": self.liquidity,
            "outcomes": [o.to_dict() for o in self.outcomes],
            "slug": self.slug,
            "active": self.active,
            "closed": self.closed,
            "resolved": self.resolved,
            "description": self.description,
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Market:
        """Build from a plain dict (snake_case or the app's camelCase keys).

        Raises KeyError when id or question is missing.
        """
        return cls(
            id=str(data["id"]),
            question=data["question"],
            category=data.get("category", "other"),
            end_date=data.get("end_date", data.get("endDate", "")),
            volume=_to_float(data.get("volume", 0)),
            liquidity=_to_float(data.get("liquidity", 0)),
            outcomes=[MarketOutcome.from_dict(o) for o in data.get("outcomes", [])],
            slug=data.get("slug", ""),
            active=bool(data.get("active", True)),
            closed=bool(data.get("closed", False)),
            resolved=bool(data.get("resolved", False)),
            description=data.get("description") or "",
            tags=list(data.get("tags") or []),
        )

    @staticmethod
    def from_gamma_response(
        raw_mkt: dict,
        event_title: str | None = None,
        event_tags: list[dict] | None = None,
    ) -> Optional[Market]:
        """Gamma API raw market dict → Market. None when there is no question.

        Broken outcome payloads degrade to a neutral 0.5/0.5 pair rather
        than dropping the market.
        """
        question = raw_mkt.get("question")
        if not question:
            return None

        market_id = str(raw_mkt.get("id") or raw_mkt.get("conditionId") or "")

        names = _parse_json_list(raw_mkt.get("outcomes") or '["Yes", "No"]')
        prices = _parse_json_list(raw_mkt.get("outcomePrices") or "[0.5, 0.5]")
        token_ids = _parse_json_list(raw_mkt.get("clobTokenIds")) or []
        change = _to_float(raw_mkt.get("oneDayPriceChange"), 0.0)

        if names is None or prices is None:
            logger.debug("Unparseable outcomes for market %s, using neutral prices", market_id)
            outcomes = [
                MarketOutcome(f"{market_id}-0", "Yes", NEUTRAL_PRICE),
                MarketOutcome(f"{market_id}-1", "No", NEUTRAL_PRICE),
            ]
        else:
            outcomes = []
            for i, name in enumerate(names):
                price = _to_float(prices[i], NEUTRAL_PRICE) if i < len(prices) else NEUTRAL_PRICE
                outcomes.append(
                    MarketOutcome(
                        id=str(token_ids[i]) if i < len(token_ids) else f"{market_id}-{i}",
                        name=str(name),
                        price=price,
                        price_change_24h=change if i == 0 else -change,
                    )
                )

        # 카테고리: 이벤트 태그 우선, 그다음 Gamma category, 마지막으로 키워드
        category = raw_mkt.get("category") or "other"
        if event_tags:
            category = str(event_tags[0].get("label", category)).lower()
        if category == "other":
            category = classify_category(question, event_title or "")

        active = bool(raw_mkt.get("active", True))
        closed = bool(raw_mkt.get("closed", False))

        return Market(
            id=market_id,
            question=question,
            category=category,
            end_date=raw_mkt.get("endDate", ""),
            volume=_to_float(raw_mkt.get("volume"), 0.0),
            liquidity=_to_float(raw_mkt.get("liquidity"), 0.0),
            outcomes=outcomes,
            slug=raw_mkt.get("slug", ""),
            active=active,
            closed=closed,
            resolved=closed and not active,
            description=raw_mkt.get("description") or "",
            tags=[str(t.get("label", "")) for t in (event_tags or [])],
        )
