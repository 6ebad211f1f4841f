"""Time-value discounting for capital locked until a market resolves.

The payoff engine uses simple interest (PV = FV / (1 + r·t)); the
continuous and compound variants are here for callers comparing
conventions.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone

from polylens.models.strategy import DEFAULT_DISCOUNT_RATE

DAYS_PER_YEAR = 365


def years_from_days(days: float) -> float:
    return days / DAYS_PER_YEAR


def present_value_simple(future_value: float, annual_rate: float, years: float) -> float:
    return future_value / (1 + annual_rate * years)


def present_value_continuous(future_value: float, annual_rate: float, years: float) -> float:
    return future_value * math.exp(-annual_rate * years)


def present_value_compound(future_value: float, annual_rate: float, years: float) -> float:
    return future_value / (1 + annual_rate) ** years


def apply_time_discount(
    payoff: float,
    days_to_resolution: float,
    annual_rate: float = DEFAULT_DISCOUNT_RATE,
) -> float:
    """Present value of a payoff received ``days_to_resolution`` days from now.

    >>> apply_time_discount(100, 365, 0.10)  # doctest: +ELLIPSIS
    90.909...
    >>> apply_time_discount(100, 0, 0.10)
    100.0
    """
    years = years_from_days(days_to_resolution)
    return payoff / (1 + annual_rate * years)


def calculate_opportunity_cost(
    stake: float,
    days_to_resolution: float,
    annual_rate: float = DEFAULT_DISCOUNT_RATE,
) -> float:
    """포지션에 묶인 기간 동안 stake가 놓친 이자."""
    return stake * annual_rate * years_from_days(days_to_resolution)


def effective_rate(base_annual_rate: float, days_to_resolution: float) -> float:
    """연이율 → 보유 기간 이율."""
    return base_annual_rate * years_from_days(days_to_resolution)


def time_adjusted_ev(
    possible_payoffs: list[tuple[float, float]],
    days_to_resolution: float,
    annual_rate: float = DEFAULT_DISCOUNT_RATE,
) -> float:
    """Probability-weighted payoff, then discounted.

    Args:
        possible_payoffs: (payoff, probability) pairs.
    """
    ev = 0.0
    for payoff, probability in possible_payoffs:
        ev += payoff * probability
    return present_value_simple(ev, annual_rate, years_from_days(days_to_resolution))


def breakeven_rate(
    expected_payoff: float,
    current_cost: float,
    days_to_resolution: float,
) -> float:
    """Discount rate at which ``expected_payoff`` is worth exactly ``current_cost``.

    inf when the payoff never covers the cost; 0 for same-day resolution.
    """
    if expected_payoff <= current_cost:
        return math.inf
    years = years_from_days(days_to_resolution)
    if years == 0:
        return 0.0
    return (expected_payoff / current_cost - 1) / years


def position_sharpe(
    expected_return: float,
    volatility: float,
    risk_free_rate: float = 0.05,
) -> float:
    if volatility == 0:
        return 0.0
    return (expected_return - risk_free_rate) / volatility


def days_until(end_date: datetime | str, now: datetime | None = None) -> int:
    """Whole days (rounded up) until ``end_date``; 0 once it has passed.

    Naive datetimes are taken as UTC.
    """
    if isinstance(end_date, str):
        end_date = datetime.fromisoformat(end_date.replace("Z", "+00:00"))
    if end_date.tzinfo is None:
        end_date = end_date.replace(tzinfo=timezone.utc)
    if now is None:
        now = datetime.now(tz=timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    seconds = (end_date - now).total_seconds()
    return max(0, math.ceil(seconds / 86400))


def format_duration(days: float) -> str:
    """3 → "3 days", 14 → "2 weeks", 400 → "1 year"."""
    if days < 1:
        return "Today"
    if days == 1:
        return "1 day"
    if days < 7:
        return f"{days:g} days"
    if days < 30:
        weeks = int(days // 7)
        return "1 week" if weeks == 1 else f"{weeks} weeks"
    if days < 365:
        months = int(days // 30)
        return "1 month" if months == 1 else f"{months} months"
    years = int(days // 365)
    return "1 year" if years == 1 else f"{years} years"
