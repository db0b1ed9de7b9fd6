from __future__ import annotations

import logging
from typing import Sequence

from arb_scan.config import FeeSettings
from arb_scan.event_pairs import EventPair
from arb_scan.matching import match_markets
from arb_scan.models import CrossVenueArbitrageOpportunity, MarketSnapshot, MatchedEvent

LOGGER = logging.getLogger(__name__)


def net_edge(venue_a_yes: float, venue_b_yes: float, fees: FeeSettings) -> float:
    """Net fee-adjusted edge per $1 of payout, as a fraction.

    The cheaper Yes is bought and the other venue's Yes is effectively sold.
    Venue A charges on winnings, venue B on the position it holds.
    """
    fee_a = fees.venue_a_winnings_fee
    fee_b = fees.venue_b_position_fee
    if venue_a_yes < venue_b_yes:
        gross = (1 - venue_a_yes) - venue_b_yes
        return gross - (1 - venue_a_yes) * fee_a - venue_b_yes * fee_b
    gross = (1 - venue_b_yes) - venue_a_yes
    return gross - (1 - venue_b_yes) * fee_b - venue_a_yes * fee_a


def calculate_arbitrage(
    event: MatchedEvent,
    fees: FeeSettings | None = None,
) -> CrossVenueArbitrageOpportunity | None:
    if event.venue_a is None or event.venue_b is None:
        return None

    fees = fees or FeeSettings()
    a = event.venue_a.yes_price
    b = event.venue_b.yes_price
    net = net_edge(a, b, fees)
    if net <= 0:
        return None

    return CrossVenueArbitrageOpportunity(
        event_name=event.event_name,
        venue_a_yes_price=a,
        venue_b_yes_price=b,
        spread=abs(a - b) * 100,
        profit_after_fees=net * 100,
        venue_a_url=event.venue_a.url,
        venue_b_url=event.venue_b.url,
        venue_a_id=event.venue_a.id,
        venue_b_id=event.venue_b.id,
    )


def find_cross_venue_opportunities(
    venue_a: Sequence[MarketSnapshot],
    venue_b: Sequence[MarketSnapshot],
    pairs: Sequence[EventPair] = (),
    fees: FeeSettings | None = None,
) -> tuple[list[MatchedEvent], list[CrossVenueArbitrageOpportunity]]:
    matched = match_markets(venue_a, venue_b, pairs)
    opportunities: list[CrossVenueArbitrageOpportunity] = []
    for event in matched:
        opportunity = calculate_arbitrage(event, fees)
        if opportunity is not None:
            opportunities.append(opportunity)

    opportunities.sort(key=lambda opp: opp.profit_after_fees, reverse=True)
    LOGGER.info(
        "cross-venue scan: %d matched events, %d profitable",
        len(matched),
        len(opportunities),
    )
    return matched, opportunities
