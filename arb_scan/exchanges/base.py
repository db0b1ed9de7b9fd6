from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from arb_scan.models import MarketSnapshot, Venue


class ExchangeAdapter(ABC):
    venue: Venue

    @abstractmethod
    async def fetch_market_snapshots(self) -> list[MarketSnapshot]:
        raise NotImplementedError

    async def fetch_order_book(self, token_id: str) -> Any:
        """Raw order-book payload for one outcome token, or None if the venue has none."""
        return None

    async def aclose(self) -> None:
        return None
