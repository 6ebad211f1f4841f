"""Data models for polylens."""

from polylens.models.cluster import (
    ClusterType,
    MarketCluster,
    ThresholdConfig,
    ThresholdMarket,
)
from polylens.models.flag import (
    RuleType,
    ScannerFlag,
    ScannerResult,
    Severity,
    SuggestedTrade,
)
from polylens.models.market import NEUTRAL_PRICE, Market, MarketOutcome
from polylens.models.strategy import (
    OutcomeScenario,
    PayoffPoint,
    PayoffSurface,
    PayoffSurfacePoint,
    Position,
    Side,
    Strategy,
    StrategyAnalysis,
)

__all__ = [
    "NEUTRAL_PRICE",
    "Market",
    "MarketOutcome",
    "ClusterType",
    "MarketCluster",
    "ThresholdConfig",
    "ThresholdMarket",
    "RuleType",
    "Severity",
    "SuggestedTrade",
    "ScannerFlag",
    "ScannerResult",
    "Side",
    "Position",
    "Strategy",
    "PayoffPoint",
    "PayoffSurfacePoint",
    "PayoffSurface",
    "OutcomeScenario",
    "StrategyAnalysis",
]
