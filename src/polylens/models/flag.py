"""ScannerFlag, SuggestedTrade and ScannerResult models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Optional

from polylens.models.market import Market

if TYPE_CHECKING:
    from polylens.models.cluster import MarketCluster


class RuleType(Enum):
    """Scanner rule that produced a flag."""

    SUM_TO_ONE = "sum_to_one"                        # 상호배타 아웃컴 합 = 1
    THRESHOLD_CONSISTENCY = "threshold_consistency"  # P(X>60) <= P(X>50)
    ARBITRAGE_BUNDLE = "arbitrage_bundle"            # YES + NO ≠ $1.00


class Severity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_score(cls, score: int) -> Severity:
        """0–100 점수 → 등급. 70 이상 high, 40 이상 medium."""
        if score >= 70:
            return cls.HIGH
        if score >= 40:
            return cls.MEDIUM
        return cls.LOW


@dataclass
class SuggestedTrade:
    """A trade idea attached to a flag. suggested_stake is a relative weight, not USD."""

    market_id: str
    market_question: str
    side: str  # "YES" | "NO"
    suggested_stake: float
    reason: str

    def to_dict(self) -> dict:
        return {
            "market_id": self.market_id,
            "market_question": self.market_question,
            "side": self.side,
            "suggested_stake": self.suggested_stake,
            "reason": self.reason,
        }


@dataclass
class ScannerFlag:
    """One detected inefficiency."""

    id: str
    rule_type: RuleType
    severity: Severity
    severity_score: int
    title: str
    explanation: str
    affected_markets: list[Market]
    suggested_trades: list[SuggestedTrade]
    confidence: float
    potential_profit: Optional[float] = None
    detected_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "rule_type": self.rule_type.value,
            "severity": self.severity.value,
            "severity_score": self.severity_score,
            "title": self.title,
            "explanation": self.explanation,
            "affected_markets": [m.id for m in self.affected_markets],
            "suggested_trades": [t.to_dict() for t in self.suggested_trades],
            "potential_profit": self.potential_profit,
            "confidence": self.confidence,
            "detected_at": self.detected_at.isoformat(),
        }


@dataclass
class ScannerResult:
    """Output of one scan_cluster() call."""

    cluster: MarketCluster
    flags: list[ScannerFlag]
    scanned_at: datetime
    scan_duration: float  # ms
    checks_performed: int

    def to_dict(self) -> dict:
        return {
            "cluster_id": self.cluster.id,
            "cluster_name": self.cluster.name,
            "cluster_type": self.cluster.cluster_type.value,
            "flags": [f.to_dict() for f in self.flags],
            "scanned_at": self.scanned_at.isoformat(),
            "scan_duration": self.scan_duration,
            "checks_performed": self.checks_performed,
        }
