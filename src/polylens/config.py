"""Scanner and analysis configuration: documented defaults, env-based overrides."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace

from polylens.models.flag import RuleType

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Scanner defaults
# ---------------------------------------------------------------------------

DEFAULT_SUM_TO_ONE_THRESHOLD = 0.05   # |Σ YES − 1| tolerated before flagging
DEFAULT_THRESHOLD_MARGIN = 0.02       # P(X > high) may exceed P(X > low) by this much
DEFAULT_MIN_ARBITRAGE_PROFIT = 0.01   # YES + NO must clear $1 by at least 1¢

ALL_RULES: tuple[RuleType, ...] = (
    RuleType.SUM_TO_ONE,
    RuleType.THRESHOLD_CONSISTENCY,
    RuleType.ARBITRAGE_BUNDLE,
)

# ---------------------------------------------------------------------------
# Analysis defaults
# ---------------------------------------------------------------------------

DEFAULT_CURVE_STEPS = 50
DEFAULT_PROBABILITY_STEPS = 20
DEFAULT_TIME_STEPS = 10
DEFAULT_MAX_DAYS = 180

# 2^20 시나리오 ≈ 100만 페이오프 합. 이보다 크면 즉시 거부
MAX_SCENARIO_MARKETS = 20


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r (not a number), using %s", name, raw, default)
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r (not an integer), using %s", name, raw, default)
        return default


def parse_rules(raw: str) -> list[RuleType]:
    """Comma-separated rule names → RuleType list. Unknown names raise ValueError."""
    rules: list[RuleType] = []
    for name in raw.split(","):
        name = name.strip()
        if not name:
            continue
        rule = RuleType(name)
        if rule not in rules:
            rules.append(rule)
    return rules


# ---------------------------------------------------------------------------
# ScannerConfig
# ---------------------------------------------------------------------------


@dataclass
class ScannerConfig:
    """Tolerances and rule toggles for one scan call."""

    sum_to_one_threshold: float = DEFAULT_SUM_TO_ONE_THRESHOLD
    threshold_margin: float = DEFAULT_THRESHOLD_MARGIN
    min_arbitrage_profit: float = DEFAULT_MIN_ARBITRAGE_PROFIT
    enabled_rules: list[RuleType] = field(default_factory=lambda: list(ALL_RULES))

    def is_enabled(self, rule: RuleType) -> bool:
        return rule in self.enabled_rules

    def merged(self, overrides: dict | None) -> ScannerConfig:
        """Overlay a partial request payload (camelCase or snake_case keys).

        Keys that are absent or None keep this config's value.
        """
        if not overrides:
            return replace(self, enabled_rules=list(self.enabled_rules))

        def pick(snake: str, camel: str, current):
            value = overrides.get(snake, overrides.get(camel))
            return current if value is None else value

        rules = pick("enabled_rules", "enabledRules", None)
        if rules is None:
            enabled = list(self.enabled_rules)
        else:
            enabled = [r if isinstance(r, RuleType) else RuleType(r) for r in rules]

        return ScannerConfig(
            sum_to_one_threshold=float(
                pick("sum_to_one_threshold", "sumToOneThreshold", self.sum_to_one_threshold)
            ),
            threshold_margin=float(
                pick("threshold_margin", "thresholdMargin", self.threshold_margin)
            ),
            min_arbitrage_profit=float(
                pick("min_arbitrage_profit", "minArbitrageProfit", self.min_arbitrage_profit)
            ),
            enabled_rules=enabled,
        )

    @classmethod
    def from_env(cls) -> ScannerConfig:
        """Load from POLYLENS_* environment variables, documented defaults otherwise."""
        rules_raw = os.environ.get("POLYLENS_ENABLED_RULES", "")
        enabled = parse_rules(rules_raw) if rules_raw.strip() else list(ALL_RULES)

        return cls(
            sum_to_one_threshold=_env_float(
                "POLYLENS_SUM_TO_ONE_THRESHOLD", DEFAULT_SUM_TO_ONE_THRESHOLD
            ),
            threshold_margin=_env_float(
                "POLYLENS_THRESHOLD_MARGIN", DEFAULT_THRESHOLD_MARGIN
            ),
            min_arbitrage_profit=_env_float(
                "POLYLENS_MIN_ARBITRAGE_PROFIT", DEFAULT_MIN_ARBITRAGE_PROFIT
            ),
            enabled_rules=enabled,
        )


# ---------------------------------------------------------------------------
# AnalysisConfig
# ---------------------------------------------------------------------------


@dataclass
class AnalysisConfig:
    """Grid resolution and enumeration ceiling for strategy analysis."""

    curve_steps: int = DEFAULT_CURVE_STEPS
    probability_steps: int = DEFAULT_PROBABILITY_STEPS
    time_steps: int = DEFAULT_TIME_STEPS
    max_days: float = DEFAULT_MAX_DAYS
    max_scenario_markets: int = MAX_SCENARIO_MARKETS

    def __post_init__(self):
        # 스텝 수는 그리드 생성기의 분모
        self.curve_steps = max(self.curve_steps, 1)
        self.probability_steps = max(self.probability_steps, 1)
        self.time_steps = max(self.time_steps, 1)

    @classmethod
    def from_env(cls) -> AnalysisConfig:
        return cls(
            curve_steps=_env_int("POLYLENS_CURVE_STEPS", DEFAULT_CURVE_STEPS),
            probability_steps=_env_int(
                "POLYLENS_PROBABILITY_STEPS", DEFAULT_PROBABILITY_STEPS
            ),
            time_steps=_env_int("POLYLENS_TIME_STEPS", DEFAULT_TIME_STEPS),
            max_days=_env_float("POLYLENS_MAX_DAYS", DEFAULT_MAX_DAYS),
            max_scenario_markets=_env_int(
                "POLYLENS_MAX_SCENARIO_MARKETS", MAX_SCENARIO_MARKETS
            ),
        )
