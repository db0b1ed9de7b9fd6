from __future__ import annotations

import csv
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class EventPair:
    """One row of the event-pair table.

    Either id may be ``None``; the matcher emits the event as long as one
    side resolves against the fetched snapshots.
    """

    event_name: str
    venue_a_id: str | None = None
    venue_b_id: str | None = None


def load_event_pairs(path: str | None) -> list[EventPair]:
    if not path:
        return []

    file_path = Path(path)
    if not file_path.exists():
        return []

    pairs: list[EventPair] = []
    with file_path.open("r", encoding="utf-8", newline="") as handle:
        reader = csv.DictReader(handle)
        for idx, row in enumerate(reader, start=1):
            pair = _row_to_pair(row, idx)
            if pair is not None:
                pairs.append(pair)
    return pairs


def _row_to_pair(row: dict[str, str], idx: int) -> EventPair | None:
    venue_a_id = _pick_ref(
        row,
        keys=[
            "venue_a_id",
            "polymarket_market_id",
            "polymarket_slug",
        ],
    )
    venue_b_id = _pick_ref(
        row,
        keys=[
            "venue_b_id",
            "kalshi_market_id",
            "kalshi_ticker",
            "kalshi_event_ticker",
        ],
    )

    # A row naming no market on either venue can never resolve.
    if venue_a_id is None and venue_b_id is None:
        return None

    event_name = (row.get("event_name") or row.get("name") or f"event_{idx}").strip()
    return EventPair(event_name=event_name, venue_a_id=venue_a_id, venue_b_id=venue_b_id)


def _pick_ref(row: dict[str, str], keys: list[str]) -> str | None:
    for key in keys:
        value = (row.get(key) or "").strip()
        if value:
            return value
    return None
