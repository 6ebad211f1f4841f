"""MarketCluster, ClusterType and threshold configuration models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from polylens.models.market import Market


class ClusterType(Enum):
    """How the markets of a cluster relate to each other."""

    MUTUAL_EXCLUSIVE = "mutual_exclusive"  # 하나만 YES: Σ YES = 1
    THRESHOLD = "threshold"                # P(X > t) non-increasing in t
    CORRELATED = "correlated"
    CUSTOM = "custom"


VALID_OPERATORS = (">", "<", ">=", "<=")


@dataclass
class ThresholdMarket:
    """A market's numeric cutoff, e.g. "BTC above $100k" → (">", 100000)."""

    market_id: str
    operator: str
    value: float

    def __post_init__(self):
        if self.operator not in VALID_OPERATORS:
            raise ValueError(f"Invalid threshold operator: {self.operator!r}")

    def to_dict(self) -> dict:
        return {
            "market_id": self.market_id,
            "operator": self.operator,
            "value": self.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ThresholdMarket:
        return cls(
            market_id=str(data.get("market_id", data.get("marketId"))),
            operator=data["operator"],
            value=float(data["value"]),
        )


@dataclass
class ThresholdConfig:
    """The variable a threshold cluster is cut on, plus each market's cutoff."""

    variable: str
    thresholds: list[ThresholdMarket] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "variable": self.variable,
            "thresholds": [t.to_dict() for t in self.thresholds],
        }

    @classmethod
    def from_dict(cls, data: dict) -> ThresholdConfig:
        return cls(
            variable=data.get("variable", ""),
            thresholds=[ThresholdMarket.from_dict(t) for t in data.get("thresholds", [])],
        )


@dataclass
class MarketCluster:
    """호출자가 묶은 관련 마켓 그룹. 함께 스캔됨."""

    id: str
    name: str
    markets: list[Market]
    cluster_type: ClusterType = ClusterType.CUSTOM
    threshold_config: Optional[ThresholdConfig] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    def market_ids(self) -> list[str]:
        return [m.id for m in self.markets]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "markets": [m.to_dict() for m in self.markets],
            "cluster_type": self.cluster_type.value,
            "threshold_config": (
                self.threshold_config.to_dict() if self.threshold_config else None
            ),
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> MarketCluster:
        """Build from a plain dict. Raises KeyError/ValueError on malformed input."""
        cluster_type = data.get("cluster_type", data.get("clusterType", "custom"))
        threshold_raw = data.get("threshold_config", data.get("thresholdConfig"))
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            markets=[Market.from_dict(m) for m in data["markets"]],
            cluster_type=ClusterType(cluster_type),
            threshold_config=(
                ThresholdConfig.from_dict(threshold_raw) if threshold_raw else None
            ),
        )
