from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Sequence

from arb_scan.models import CrossVenueArbitrageOpportunity, MatchedEvent, Opportunity


def _timestamp(now: datetime | None) -> str:
    return (now or datetime.now(timezone.utc)).isoformat()


def build_cross_venue_report(
    opportunities: Sequence[CrossVenueArbitrageOpportunity],
    venue_a_count: int,
    venue_b_count: int,
    matched: Sequence[MatchedEvent],
    now: datetime | None = None,
) -> Dict[str, Any]:
    return {
        "opportunities": [opp.to_payload() for opp in opportunities],
        "timestamp": _timestamp(now),
        "polymarketCount": venue_a_count,
        "kalshiCount": venue_b_count,
        "matchedCount": len(matched),
    }


def build_single_venue_report(
    opportunities: Sequence[Opportunity],
    market_count: int,
    now: datetime | None = None,
) -> Dict[str, Any]:
    return {
        "opportunities": [opp.to_payload() for opp in opportunities],
        "timestamp": _timestamp(now),
        "marketCount": market_count,
        "opportunityCount": len(opportunities),
    }


def build_error_report(message: str) -> Dict[str, Any]:
    return {"error": message, "opportunities": []}
