from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from arb_scan.config import PolymarketSettings
from arb_scan.models import MarketSnapshot, Venue

from .base import ExchangeAdapter

LOGGER = logging.getLogger(__name__)

EVENT_URL = "https://polymarket.com/event/{slug}"


class PolymarketAdapter(ExchangeAdapter):
    venue = Venue.POLYMARKET

    def __init__(
        self,
        settings: PolymarketSettings,
        gamma_client: httpx.AsyncClient | None = None,
        clob_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._gamma = gamma_client or httpx.AsyncClient(
            base_url=settings.gamma_base_url.rstrip("/"),
            timeout=settings.timeout_seconds,
        )
        self._clob = clob_client or httpx.AsyncClient(
            base_url=settings.clob_base_url.rstrip("/"),
            timeout=settings.timeout_seconds,
        )

    async def fetch_market_snapshots(self) -> list[MarketSnapshot]:
        params = {
            "active": "true",
            "closed": "false",
            "limit": self._settings.market_limit,
        }
        response = await self._gamma.get("/markets", params=params)
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, list):
            LOGGER.warning("polymarket /markets returned %s, expected a list", type(payload).__name__)
            return []

        snapshots: list[MarketSnapshot] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            snapshot = self._to_snapshot(item)
            if snapshot is not None:
                snapshots.append(snapshot)
        LOGGER.info("polymarket: %d snapshots from %d markets", len(snapshots), len(payload))
        return snapshots

    async def fetch_order_book(self, token_id: str) -> Any:
        response = await self._clob.get("/book", params={"token_id": token_id})
        if response.status_code == 404:
            LOGGER.debug("polymarket has no book for token %s", token_id)
            return None
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            return payload
        # CLOB levels arrive in no particular order; the normalizer reads level 0 as best.
        return {
            **payload,
            "bids": self._sort_levels(payload.get("bids"), descending=True),
            "asks": self._sort_levels(payload.get("asks"), descending=False),
        }

    @classmethod
    def _sort_levels(cls, levels: Any, descending: bool) -> Any:
        if not isinstance(levels, list):
            return levels
        priced: list[tuple[float, Any]] = []
        for level in levels:
            if isinstance(level, dict):
                price = cls._to_price(level.get("price"))
            elif isinstance(level, (list, tuple)) and level:
                price = cls._to_price(level[0])
            else:
                price = None
            if price is not None:
                priced.append((price, level))
        priced.sort(key=lambda item: item[0], reverse=descending)
        return [level for _, level in priced]

    def _to_snapshot(self, market: dict[str, Any]) -> MarketSnapshot | None:
        market_id = self._market_identifier(market)
        if not market_id:
            return None

        outcomes = [str(label).strip().lower() for label in self._parse_json_array(market.get("outcomes"))]
        prices = self._parse_json_array(market.get("outcomePrices"))
        token_ids = [str(value).strip() for value in self._parse_json_array(market.get("clobTokenIds"))]

        yes_idx, no_idx = self._resolve_yes_no_indices(outcomes)
        if len(prices) != 2:
            return None
        yes_price = self._to_price(prices[yes_idx])
        no_price = self._to_price(prices[no_idx])
        if yes_price is None or no_price is None:
            return None

        token_id = token_ids[yes_idx] if len(token_ids) == 2 and token_ids[yes_idx] else None
        no_token_id = token_ids[no_idx] if len(token_ids) == 2 and token_ids[no_idx] else None

        best_bid = self._to_price(market.get("bestBid"))
        best_ask = self._to_price(market.get("bestAsk"))
        spread = best_ask - best_bid if best_bid is not None and best_ask is not None else None

        slug = str(market.get("slug") or "").strip()
        return MarketSnapshot(
            id=market_id,
            question=str(market.get("question") or market.get("title") or ""),
            yes_price=yes_price,
            no_price=no_price,
            url=EVENT_URL.format(slug=slug or market_id),
            venue=Venue.POLYMARKET,
            volume=self._to_size(market.get("volume") or market.get("volumeNum") or 0.0),
            liquidity=self._to_size(market.get("liquidity") or market.get("liquidityNum") or 0.0),
            token_id=token_id,
            no_token_id=no_token_id,
            spread=spread,
        )

    @staticmethod
    def _market_identifier(market: dict[str, Any]) -> str:
        # Slugs first: the event-pair table is keyed by them.
        return str(
            market.get("slug")
            or market.get("conditionId")
            or market.get("id")
            or ""
        ).strip()

    @staticmethod
    def _resolve_yes_no_indices(outcome_labels: list[str]) -> tuple[int, int]:
        if len(outcome_labels) == 2 and outcome_labels[0] == "no" and outcome_labels[1] == "yes":
            return 1, 0
        return 0, 1

    @staticmethod
    def _parse_json_array(value: Any) -> list[Any]:
        if isinstance(value, list):
            return value
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
            except json.JSONDecodeError:
                return []
            return parsed if isinstance(parsed, list) else []
        return []

    @staticmethod
    def _to_price(value: Any) -> float | None:
        try:
            numeric = float(value)
        except (TypeError, ValueError):
            return None
        if numeric < 0 or numeric > 1:
            return None
        return numeric

    @staticmethod
    def _to_size(value: Any) -> float:
        try:
            return max(0.0, float(value))
        except (TypeError, ValueError):
            return 0.0

    async def aclose(self) -> None:
        await self._gamma.aclose()
        await self._clob.aclose()
