"""Strategy analysis: payoff curve, probability × time surface, summary stats."""

from __future__ import annotations

import logging

from polylens.config import (
    DEFAULT_CURVE_STEPS,
    DEFAULT_MAX_DAYS,
    DEFAULT_PROBABILITY_STEPS,
    DEFAULT_TIME_STEPS,
    AnalysisConfig,
)
from polylens.models.strategy import (
    DEFAULT_DISCOUNT_RATE,
    PayoffPoint,
    PayoffSurface,
    PayoffSurfacePoint,
    Position,
    Strategy,
    StrategyAnalysis,
)
from polylens.payoff.discounting import apply_time_discount
from polylens.payoff.formula import aggregate_payoff
from polylens.payoff.scenarios import generate_outcome_scenarios

logger = logging.getLogger(__name__)

NO_CROSSING_BREAK_EVEN = 0.5


def _percent_of(payoff: float, total_stake: float) -> float:
    return (payoff / total_stake) * 100 if total_stake > 0 else 0.0


# ---------------------------------------------------------------------------
# Curve & surface
# ---------------------------------------------------------------------------


def generate_payoff_curve(
    positions: list[Position],
    steps: int = DEFAULT_CURVE_STEPS,
) -> list[PayoffPoint]:
    """Aggregate payoff at probabilities 0, 1/steps, …, 1 (steps + 1 points).

    steps below 1 is treated as 1.
    """
    steps = max(steps, 1)
    total_stake = sum(p.stake for p in positions)
    points: list[PayoffPoint] = []
    for i in range(steps + 1):
        probability = i / steps
        payoff = aggregate_payoff(positions, probability)
        points.append(
            PayoffPoint(
                probability=probability,
                payoff=payoff,
                percent_return=_percent_of(payoff, total_stake),
            )
        )
    return points


def generate_payoff_surface(
    positions: list[Position],
    discount_rate: float = DEFAULT_DISCOUNT_RATE,
    probability_steps: int = DEFAULT_PROBABILITY_STEPS,
    time_steps: int = DEFAULT_TIME_STEPS,
    max_days: float = DEFAULT_MAX_DAYS,
) -> PayoffSurface:
    """Discounted payoff over a (probability_steps+1) × (time_steps+1) grid.

    Points are probability-major: all day offsets for probability 0, then
    for 1/probability_steps, and so on. Step counts below 1 are treated
    as 1.
    """
    probability_steps = max(probability_steps, 1)
    time_steps = max(time_steps, 1)
    total_stake = sum(p.stake for p in positions)
    points: list[PayoffSurfacePoint] = []
    min_payoff = float("inf")
    max_payoff = float("-inf")

    for p_step in range(probability_steps + 1):
        probability = p_step / probability_steps
        undiscounted = aggregate_payoff(positions, probability)

        for t_step in range(time_steps + 1):
            days = (t_step / time_steps) * max_days
            payoff = apply_time_discount(undiscounted, days, discount_rate)
            min_payoff = min(min_payoff, payoff)
            max_payoff = max(max_payoff, payoff)
            points.append(
                PayoffSurfacePoint(
                    probability=probability,
                    days_to_resolution=days,
                    payoff=payoff,
                    percent_return=_percent_of(payoff, total_stake),
                )
            )

    # 확률 균등 분포, 오늘 정산 기준
    today = [p.payoff for p in points if p.days_to_resolution == 0]
    expected_value = sum(today) / len(today)
    # 전체 그리드 평균 (모든 기간 동일 가중치)
    time_weighted_ev = sum(p.payoff for p in points) / len(points)

    return PayoffSurface(
        points=points,
        min_payoff=min_payoff,
        max_payoff=max_payoff,
        expected_value=expected_value,
        time_weighted_ev=time_weighted_ev,
    )


# ---------------------------------------------------------------------------
# Break-even
# ---------------------------------------------------------------------------


def find_break_even(curve: list[PayoffPoint]) -> float:
    """Probability of the first zero crossing on the curve.

    Linear interpolation between the two bracketing points; a point that is
    exactly 0 counts as a crossing. 0.5 when the payoff never changes sign.
    """
    for prev, curr in zip(curve, curve[1:]):
        crossed = (prev.payoff <= 0 and curr.payoff >= 0) or (
            prev.payoff >= 0 and curr.payoff <= 0
        )
        if not crossed:
            continue
        span = abs(prev.payoff) + abs(curr.payoff)
        t = abs(prev.payoff) / span if span > 0 else 0.0
        return prev.probability + t * (curr.probability - prev.probability)
    return NO_CROSSING_BREAK_EVEN


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------


def _empty_analysis() -> StrategyAnalysis:
    return StrategyAnalysis(
        total_stake=0.0,
        expected_payoff=0.0,
        expected_return=0.0,
        max_profit=0.0,
        max_loss=0.0,
        break_even_probability=NO_CROSSING_BREAK_EVEN,
        scenarios=[],
        payoff_curve=[],
        payoff_surface=PayoffSurface.empty(),
    )


def analyze_strategy(
    strategy: Strategy,
    config: AnalysisConfig | None = None,
) -> StrategyAnalysis:
    """Full analysis of a strategy. Pure: the strategy is not modified.

    Raises:
        ScenarioLimitError: too many distinct markets to enumerate.
    """
    if config is None:
        config = AnalysisConfig()

    positions = strategy.positions
    if not positions:
        return _empty_analysis()

    total_stake = strategy.total_stake
    scenarios = generate_outcome_scenarios(positions, config.max_scenario_markets)
    curve = generate_payoff_curve(positions, config.curve_steps)
    surface = generate_payoff_surface(
        positions,
        discount_rate=strategy.discount_rate,
        probability_steps=config.probability_steps,
        time_steps=config.time_steps,
        max_days=config.max_days,
    )

    expected_payoff = sum(s.payoff * s.probability for s in scenarios)
    payoffs = [s.payoff for s in scenarios]

    analysis = StrategyAnalysis(
        total_stake=total_stake,
        expected_payoff=expected_payoff,
        expected_return=_percent_of(expected_payoff, total_stake),
        max_profit=max(payoffs),
        max_loss=min(payoffs),
        break_even_probability=find_break_even(curve),
        scenarios=scenarios,
        payoff_curve=curve,
        payoff_surface=surface,
    )

    logger.debug(
        "Analyzed %d position(s): stake=%.2f E[payoff]=%.2f range=[%.2f, %.2f] "
        "break-even=%.3f",
        len(positions), total_stake, expected_payoff,
        analysis.max_loss, analysis.max_profit, analysis.break_even_probability,
    )
    return analysis
