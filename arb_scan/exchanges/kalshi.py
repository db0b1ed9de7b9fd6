from __future__ import annotations

import logging
from typing import Any

import httpx

from arb_scan.config import KalshiSettings
from arb_scan.models import MarketSnapshot, Venue

from .base import ExchangeAdapter

LOGGER = logging.getLogger(__name__)

MARKET_URL = "https://kalshi.com/markets/{ticker}"


class KalshiAdapter(ExchangeAdapter):
    venue = Venue.KALSHI

    def __init__(self, settings: KalshiSettings, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._client = client or httpx.AsyncClient(
            base_url=settings.api_base_url.rstrip("/"),
            timeout=settings.timeout_seconds,
        )

    async def fetch_market_snapshots(self) -> list[MarketSnapshot]:
        params: dict[str, Any] = {"status": "open", "limit": self._settings.market_limit}
        response = await self._client.get("/markets", params=params)
        response.raise_for_status()
        payload = response.json()
        markets = payload.get("markets") if isinstance(payload, dict) else payload
        if not isinstance(markets, list):
            return []

        by_event: dict[str, MarketSnapshot] = {}
        for item in markets:
            if not isinstance(item, dict):
                continue
            snapshot = self.market_to_snapshot(item)
            if snapshot is None:
                continue
            current = by_event.get(snapshot.id)
            if current is None or (snapshot.volume or 0.0) > (current.volume or 0.0):
                by_event[snapshot.id] = snapshot
        snapshots = list(by_event.values())
        LOGGER.info("kalshi: %d snapshots from %d markets", len(snapshots), len(markets))
        return snapshots

    @classmethod
    def market_to_snapshot(cls, market: dict[str, Any]) -> MarketSnapshot | None:
        """Convert one ``/markets`` entry; only open markets with positive prices survive.

        The snapshot id is the ``event_ticker`` so the event-pair table can
        name events rather than individual strikes. Every strike of a
        multi-market event shares that id; ``fetch_market_snapshots`` keeps
        the highest-volume strike per event.
        """
        status = str(market.get("status") or "").strip().lower()
        if status not in {"open", "active"}:
            return None

        yes_bid = cls._to_price(market.get("yes_bid"))
        yes_ask = cls._to_price(market.get("yes_ask"))
        if yes_bid and yes_ask:
            yes_price = (yes_bid + yes_ask) / 2
        else:
            yes_price = cls._to_price(market.get("last_price")) or 0.5

        no_bid = cls._to_price(market.get("no_bid"))
        no_ask = cls._to_price(market.get("no_ask"))
        if no_bid and no_ask:
            no_price = (no_bid + no_ask) / 2
        else:
            no_price = 1 - yes_price

        if yes_price <= 0 or no_price <= 0:
            return None

        ticker = str(market.get("ticker") or "").strip()
        market_id = str(market.get("event_ticker") or ticker).strip()
        if not market_id:
            return None

        spread = yes_ask - yes_bid if yes_bid and yes_ask else None
        return MarketSnapshot(
            id=market_id,
            question=str(market.get("title") or market.get("subtitle") or ""),
            yes_price=yes_price,
            no_price=no_price,
            url=MARKET_URL.format(ticker=ticker or market_id),
            venue=Venue.KALSHI,
            volume=cls._to_size(market.get("volume")),
            liquidity=cls._to_size(market.get("open_interest")),
            spread=spread,
        )

    @staticmethod
    def _to_price(value: Any) -> float | None:
        """Integer quotes are cents; floats at or below 1 are already dollars."""
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, int):
            numeric = float(value)
            if numeric < 0:
                return None
            if numeric <= 100:
                return numeric / 100.0
            for scale in (10_000.0, 1_000_000.0):
                candidate = numeric / scale
                if candidate <= 1.0:
                    return candidate
            return None
        try:
            numeric = float(value)
        except (TypeError, ValueError):
            return None
        if numeric < 0:
            return None
        if numeric <= 1:
            return numeric
        for scale in (100.0, 10_000.0, 1_000_000.0):
            candidate = numeric / scale
            if candidate <= 1.0:
                return candidate
        return None

    @staticmethod
    def _to_size(value: Any) -> float:
        try:
            return max(0.0, float(value))
        except (TypeError, ValueError):
            return 0.0

    async def aclose(self) -> None:
        await self._client.aclose()
