from __future__ import annotations

from arb_scan.models import CrossVenueArbitrageOpportunity, StakeAllocation


def calculate_optimal_stakes(
    bankroll: float,
    opportunity: CrossVenueArbitrageOpportunity,
) -> StakeAllocation:
    """Split ``bankroll`` across both venues so the payoff is equal either way.

    The cheaper venue's Yes is bought; the other venue's stake is sized by
    ``other_yes / (1 - cheap_yes)`` relative to it.
    """
    if bankroll < 0:
        raise ValueError(f"bankroll must be non-negative, got {bankroll}")

    a = opportunity.venue_a_yes_price
    b = opportunity.venue_b_yes_price
    if a < b:
        ratio = b / (1 - a)
        venue_b_stake = bankroll * ratio / (1 + ratio)
        venue_a_stake = bankroll - venue_b_stake
    else:
        ratio = a / (1 - b)
        venue_a_stake = bankroll * ratio / (1 + ratio)
        venue_b_stake = bankroll - venue_a_stake

    return StakeAllocation(
        venue_a_stake=venue_a_stake,
        venue_b_stake=venue_b_stake,
        total_profit=bankroll * opportunity.profit_after_fees / 100,
    )
