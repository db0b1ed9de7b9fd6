"""Raw order-book payload normalization.

Venue books arrive in one of two level encodings::

    {"bids": [["0.40", "100"], ...], "asks": [["0.42", "50"], ...]}
    {"bids": [{"price": "0.40", "size": "100"}, ...], "asks": [...]}

``normalize_order_book`` parses the top level of each side into a
``BookLevel`` and builds one canonical ``OrderBookSnapshot`` from the two.
Anything it does not recognize yields ``None``; it never raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from arb_scan.models import OrderBookSnapshot

LOGGER = logging.getLogger(__name__)


class LevelEncoding(str, Enum):
    PAIR = "pair"
    PRICED = "priced"


@dataclass(frozen=True)
class BookLevel:
    price: float
    size: float
    encoding: LevelEncoding


def normalize_order_book(payload: Any) -> OrderBookSnapshot | None:
    if not isinstance(payload, dict):
        return None

    bid = _top_level(payload.get("bids"))
    ask = _top_level(payload.get("asks"))
    if bid is None or ask is None:
        return None

    if bid.price > ask.price:
        LOGGER.debug("discarding crossed book bid=%s ask=%s", bid.price, ask.price)
        return None

    return build_snapshot(bid.price, ask.price, bid.size, ask.size)


def build_snapshot(
    best_bid: float,
    best_ask: float,
    bid_size: float,
    ask_size: float,
    derived: bool = False,
) -> OrderBookSnapshot | None:
    mid_price = (best_bid + best_ask) / 2
    if mid_price <= 0:
        return None
    spread = best_ask - best_bid
    return OrderBookSnapshot(
        best_bid=best_bid,
        best_ask=best_ask,
        bid_size=bid_size,
        ask_size=ask_size,
        mid_price=mid_price,
        spread=spread,
        spread_percent=spread / mid_price * 100,
        derived=derived,
    )


def derive_no_book(yes_book: OrderBookSnapshot) -> OrderBookSnapshot | None:
    """Approximate the No-side book from the Yes side.

    A No bid is the mirror of a Yes ask (``1 - yes_ask``) and vice versa, so
    sizes swap sides as well. The result is flagged ``derived``.
    """
    return build_snapshot(
        best_bid=1.0 - yes_book.best_ask,
        best_ask=1.0 - yes_book.best_bid,
        bid_size=yes_book.ask_size,
        ask_size=yes_book.bid_size,
        derived=True,
    )


def parse_level(level: Any) -> BookLevel | None:
    if isinstance(level, (list, tuple)):
        if len(level) != 2:
            return None
        price = _to_number(level[0])
        if price is None:
            return None
        return BookLevel(price=price, size=_to_size(level[1]), encoding=LevelEncoding.PAIR)

    if isinstance(level, dict) and "price" in level:
        price = _to_number(level.get("price"))
        if price is None:
            return None
        raw_size = level.get("size") or level.get("quantity") or 0
        return BookLevel(price=price, size=_to_size(raw_size), encoding=LevelEncoding.PRICED)

    return None


def _top_level(levels: Any) -> BookLevel | None:
    if not isinstance(levels, (list, tuple)) or not levels:
        return None
    return parse_level(levels[0])


def _to_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return None
    if numeric != numeric or numeric < 0:
        return None
    return numeric


def _to_size(value: Any) -> float:
    numeric = _to_number(value)
    return 0.0 if numeric is None else numeric
