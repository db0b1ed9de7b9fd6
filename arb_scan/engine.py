from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Sequence

from arb_scan.config import AppSettings
from arb_scan.models import MarketSnapshot, Opportunity, OrderBookSnapshot, Strategy
from arb_scan.orderbook import derive_no_book, normalize_order_book
from arb_scan.strategy import MarketContext, evaluate_market, volume_ranks

LOGGER = logging.getLogger(__name__)

BookSource = Callable[[str], Awaitable[Any]]


async def find_single_venue_opportunities(
    markets: Sequence[MarketSnapshot],
    fetch_order_book: BookSource,
    settings: AppSettings | None = None,
    strategies: Sequence[Strategy] | None = None,
) -> list[Opportunity]:
    """Run every strategy over every market and rank the results.

    Markets are processed ``batch_size`` at a time with a pause between
    batches. Within a batch each market's books are fetched concurrently.
    A market whose fetch or evaluation fails contributes nothing.
    """
    settings = settings or AppSettings()
    batch_size = max(1, settings.engine.batch_size)
    ranks = volume_ranks(markets)
    market_count = len(markets)

    async def _run(market: MarketSnapshot) -> list[Opportunity]:
        return await _evaluate_one(
            market,
            fetch_order_book,
            settings,
            volume_rank=ranks[market.id],
            market_count=market_count,
            strategies=strategies,
        )

    eligible = [market for market in markets if market.token_id]
    skipped = len(markets) - len(eligible)
    if skipped:
        LOGGER.debug("skipping %d markets without a token id", skipped)

    opportunities: list[Opportunity] = []
    for start in range(0, len(eligible), batch_size):
        batch = eligible[start : start + batch_size]
        results = await asyncio.gather(*(_run(market) for market in batch), return_exceptions=True)
        for market, result in zip(batch, results):
            if isinstance(result, BaseException):
                LOGGER.warning("strategy evaluation failed for %s: %s", market.id, result)
                continue
            opportunities.extend(result)

        if start + batch_size < len(eligible) and settings.engine.batch_delay_seconds > 0:
            await asyncio.sleep(settings.engine.batch_delay_seconds)

    opportunities.sort(key=lambda opp: opp.profit_percent, reverse=True)
    LOGGER.info(
        "single-venue scan: %d markets, %d evaluated, %d opportunities",
        len(markets),
        len(eligible),
        len(opportunities),
    )
    return opportunities


async def load_books(
    market: MarketSnapshot,
    fetch_order_book: BookSource,
) -> tuple[OrderBookSnapshot, OrderBookSnapshot] | None:
    """Fetch and normalize the Yes book, and the No book when the market has one.

    Without a usable No-side book the No side is derived from the Yes side.
    """
    if not market.token_id:
        return None

    if market.no_token_id:
        yes_raw, no_raw = await asyncio.gather(
            fetch_order_book(market.token_id),
            fetch_order_book(market.no_token_id),
        )
    else:
        yes_raw, no_raw = await fetch_order_book(market.token_id), None

    yes_book = normalize_order_book(yes_raw)
    if yes_book is None:
        return None

    no_book = normalize_order_book(no_raw) if no_raw is not None else None
    if no_book is None:
        no_book = derive_no_book(yes_book)
    if no_book is None:
        return None
    return yes_book, no_book


async def _evaluate_one(
    market: MarketSnapshot,
    fetch_order_book: BookSource,
    settings: AppSettings,
    volume_rank: int,
    market_count: int,
    strategies: Sequence[Strategy] | None,
) -> list[Opportunity]:
    books = await load_books(market, fetch_order_book)
    if books is None:
        LOGGER.debug("no usable order book for %s", market.id)
        return []

    yes_book, no_book = books
    ctx = MarketContext(
        market=market,
        yes_book=yes_book,
        no_book=no_book,
        volume_rank=volume_rank,
        market_count=market_count,
        fee=settings.fees.single_venue_fee,
        settings=settings.strategy,
    )
    return evaluate_market(ctx, strategies)
