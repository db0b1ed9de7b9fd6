from __future__ import annotations

import logging
from typing import Sequence

from arb_scan.event_pairs import EventPair
from arb_scan.models import MarketSnapshot, MatchedEvent

LOGGER = logging.getLogger(__name__)

FUZZY_PREFIX_CHARS = 20


def match_markets(
    venue_a: Sequence[MarketSnapshot],
    venue_b: Sequence[MarketSnapshot],
    pairs: Sequence[EventPair] = (),
) -> list[MatchedEvent]:
    """Pair snapshots describing the same event across two venues.

    Table pairs come first, in table order. Snapshots not claimed by the
    table are then paired by question text, in venue-A order.
    """
    a_by_id = _index_by_id(venue_a)
    b_by_id = _index_by_id(venue_b)

    matched: list[MatchedEvent] = []
    consumed_a: set[str] = set()
    consumed_b: set[str] = set()

    for pair in pairs:
        snap_a = a_by_id.get(pair.venue_a_id) if pair.venue_a_id else None
        snap_b = b_by_id.get(pair.venue_b_id) if pair.venue_b_id else None
        if snap_a is None and snap_b is None:
            LOGGER.debug("event pair %r resolved on neither venue", pair.event_name)
            continue
        if snap_a is not None:
            consumed_a.add(snap_a.id)
        if snap_b is not None:
            consumed_b.add(snap_b.id)
        matched.append(
            MatchedEvent(
                id=f"{pair.venue_a_id or ''}-{pair.venue_b_id or ''}",
                event_name=pair.event_name,
                venue_a=snap_a,
                venue_b=snap_b,
            )
        )

    candidates_b = [
        (snap, normalize_question(snap.question))
        for snap in venue_b
        if snap.id not in consumed_b
    ]
    exact_count = len(matched)

    for snap_a in venue_a:
        if snap_a.id in consumed_a:
            continue
        text_a = normalize_question(snap_a.question)
        if not text_a:
            continue
        for snap_b, text_b in candidates_b:
            if text_b and questions_match(text_a, text_b):
                matched.append(
                    MatchedEvent(
                        id=f"{snap_a.id}-{snap_b.id}",
                        event_name=snap_a.question,
                        venue_a=snap_a,
                        venue_b=snap_b,
                    )
                )
                break

    LOGGER.debug(
        "matched %d events (%d from table, %d by question text)",
        len(matched),
        exact_count,
        len(matched) - exact_count,
    )
    return matched


def normalize_question(text: str) -> str:
    return (text or "").lower().strip()


def questions_match(left: str, right: str) -> bool:
    """Heuristic text match on normalized questions.

    Equal strings match, as does either string's first 20 characters
    appearing inside the other. Generic titles sharing a long prefix will
    match even when they describe different events.
    """
    if left == right:
        return True
    return left[:FUZZY_PREFIX_CHARS] in right or right[:FUZZY_PREFIX_CHARS] in left


def _index_by_id(snapshots: Sequence[MarketSnapshot]) -> dict[str, MarketSnapshot]:
    index: dict[str, MarketSnapshot] = {}
    for snap in snapshots:
        index.setdefault(snap.id, snap)
    return index
