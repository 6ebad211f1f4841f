"""Position, Strategy and payoff-analysis result models."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum

from polylens.models.market import Market

DEFAULT_DISCOUNT_RATE = 0.10


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class Side(Enum):
    """Binary outcome side: both a position side and a resolution outcome."""

    YES = "YES"
    NO = "NO"


@dataclass
class Position:
    """A stake on one side of one market.

    entry_price is the market's YES price at entry, whichever side was
    bought. It must lie strictly inside (0, 1) and is not clamped: 0 or 1
    makes the payoff formulas divide by zero.
    """

    market: Market
    side: Side
    stake: float
    entry_price: float
    id: str = field(default_factory=lambda: _new_id("pos"))
    added_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    @classmethod
    def open(cls, market: Market, side: Side, stake: float) -> Position:
        """Open at the market's current price.

        entry_price is the YES-side price for both sides; a NO position is
        valued at 1 - entry_price by the payoff formulas.
        """
        return cls(market=market, side=side, stake=stake, entry_price=market.yes_price)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "market": self.market.to_dict(),
            "side": self.side.value,
            "stake": self.stake,
            "entry_price": self.entry_price,
            "added_at": self.added_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Position:
        market = Market.from_dict(data["market"])
        side = Side(str(data["side"]).upper())
        stake = float(data["stake"])
        entry = data.get("entry_price", data.get("entryPrice"))
        if entry is None:
            position = cls.open(market, side, stake)
        else:
            position = cls(market=market, side=side, stake=stake, entry_price=float(entry))
        if data.get("id"):
            position.id = str(data["id"])
        return position


@dataclass
class Strategy:
    """An ordered set of positions plus the annual rate used for discounting.

    Edits return new Strategy values; analysis never mutates a strategy.
    """

    positions: list[Position] = field(default_factory=list)
    discount_rate: float = DEFAULT_DISCOUNT_RATE
    name: str = ""
    id: str = field(default_factory=lambda: _new_id("strategy"))

    @property
    def total_stake(self) -> float:
        return sum(p.stake for p in self.positions)

    def with_position(self, position: Position) -> Strategy:
        return replace(self, positions=[*self.positions, position])

    def without_position(self, position_id: str) -> Strategy:
        return replace(
            self, positions=[p for p in self.positions if p.id != position_id]
        )

    def with_discount_rate(self, rate: float) -> Strategy:
        return replace(self, positions=list(self.positions), discount_rate=rate)

    @classmethod
    def from_dict(cls, data: dict) -> Strategy:
        rate = data.get("discount_rate", data.get("discountRate"))
        strategy = cls(
            positions=[Position.from_dict(p) for p in data.get("positions", [])],
            discount_rate=DEFAULT_DISCOUNT_RATE if rate is None else float(rate),
            name=data.get("name", ""),
        )
        if data.get("id"):
            strategy.id = str(data["id"])
        return strategy


# ---------------------------------------------------------------------------
# Analysis results
# ---------------------------------------------------------------------------


@dataclass
class PayoffPoint:
    probability: float
    payoff: float
    percent_return: float

    def to_dict(self) -> dict:
        return {
            "probability": self.probability,
            "payoff": self.payoff,
            "percent_return": self.percent_return,
        }


@dataclass
class PayoffSurfacePoint:
    probability: float
    days_to_resolution: float
    payoff: float  # discounted
    percent_return: float

    def to_dict(self) -> dict:
        return {
            "probability": self.probability,
            "days_to_resolution": self.days_to_resolution,
            "payoff": self.payoff,
            "percent_return": self.percent_return,
        }


@dataclass
class PayoffSurface:
    """Probability × days grid of discounted payoffs.

    expected_value averages the zero-day row only; time_weighted_ev averages
    every cell. They are different statistics.
    """

    points: list[PayoffSurfacePoint]
    min_payoff: float
    max_payoff: float
    expected_value: float
    time_weighted_ev: float

    @classmethod
    def empty(cls) -> PayoffSurface:
        return cls(points=[], min_payoff=0.0, max_payoff=0.0,
                   expected_value=0.0, time_weighted_ev=0.0)

    def to_dict(self) -> dict:
        return {
            "points": [p.to_dict() for p in self.points],
            "min_payoff": self.min_payoff,
            "max_payoff": self.max_payoff,
            "expected_value": self.expected_value,
            "time_weighted_ev": self.time_weighted_ev,
        }


@dataclass
class OutcomeScenario:
    """One joint YES/NO resolution of every distinct market in a strategy."""

    id: str
    outcomes: dict[str, Side]  # 마켓 id → 정산 결과
    probability: float
    payoff: float

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "outcomes": {k: v.value for k, v in self.outcomes.items()},
            "probability": self.probability,
            "payoff": self.payoff,
        }


@dataclass
class StrategyAnalysis:
    total_stake: float
    expected_payoff: float
    expected_return: float  # % of total stake
    max_profit: float
    max_loss: float
    break_even_probability: float
    scenarios: list[OutcomeScenario]
    payoff_curve: list[PayoffPoint]
    payoff_surface: PayoffSurface

    def to_dict(self) -> dict:
        return {
            "total_stake": self.total_stake,
            "expected_payoff": self.expected_payoff,
            "expected_return": self.expected_return,
            "max_profit": self.max_profit,
            "max_loss": self.max_loss,
            "break_even_probability": self.break_even_probability,
            "scenarios": [s.to_dict() for s in self.scenarios],
            "payoff_curve": [p.to_dict() for p in self.payoff_curve],
            "payoff_surface": self.payoff_surface.to_dict(),
        }
