"""Per-position payoff arithmetic.

A YES position with stake s bought at price p pays s·(1/p − 1) if the
market resolves YES and loses s if it resolves NO. A NO position is the
mirror image, priced at 1 − entry_price.

Entry prices of exactly 0 or 1 are outside the domain; the formulas divide
by them and the resulting ZeroDivisionError is the caller's problem.
"""

from __future__ import annotations

from polylens.models.strategy import Position, Side


def _legs(position: Position) -> tuple[float, float]:
    """(YES 정산 시 페이오프, NO 정산 시 페이오프)."""
    stake = position.stake
    if position.side == Side.YES:
        return stake * (1 / position.entry_price - 1), -stake
    no_price = 1 - position.entry_price
    return -stake, stake * (1 / no_price - 1)


def calculate_position_payoff(position: Position, probability: float) -> float:
    """Payoff at a hypothetical YES probability in [0, 1].

    Not a resolution: a probability-weighted blend of the two legs, used as
    the value of exiting before the market resolves.
    """
    yes_leg, no_leg = _legs(position)
    return probability * yes_leg + (1 - probability) * no_leg


def calculate_position_resolution_payoff(position: Position, outcome: Side) -> float:
    """Payoff when the market actually resolves to ``outcome``."""
    yes_leg, no_leg = _legs(position)
    return yes_leg if outcome == Side.YES else no_leg


def aggregate_payoff(positions: list[Position], probability: float) -> float:
    """모든 포지션의 calculate_position_payoff 합."""
    total = 0.0
    for position in positions:
        total += calculate_position_payoff(position, probability)
    return total
