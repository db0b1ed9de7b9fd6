from __future__ import annotations

import asyncio
from dataclasses import replace

import pytest

from arb_scan.config import AppSettings, EngineSettings
from arb_scan.engine import find_single_venue_opportunities, load_books
from arb_scan.models import MarketSnapshot, Strategy, Venue


def _market(
    market_id: str,
    volume: float = 60000.0,
    liquidity: float = 5000.0,
    token_id: str | None = "auto",
    no_token_id: str | None = None,
) -> MarketSnapshot:
    return MarketSnapshot(
        id=market_id,
        question=f"Question {market_id}?",
        yes_price=0.5,
        no_price=0.5,
        url=f"https://polymarket.com/event/{market_id}",
        venue=Venue.POLYMARKET,
        volume=volume,
        liquidity=liquidity,
        token_id=f"{market_id}-yes" if token_id == "auto" else token_id,
        no_token_id=no_token_id,
    )


def _raw(bid: str, ask: str, bid_size: str = "100", ask_size: str = "100") -> dict:
    return {"bids": [[bid, bid_size]], "asks": [[ask, ask_size]]}


class _BookSource:
    def __init__(self, books: dict, failing: set[str] | None = None) -> None:
        self.books = books
        self.failing = failing or set()
        self.calls: list[str] = []

    async def __call__(self, token_id: str):
        self.calls.append(token_id)
        if token_id in self.failing:
            raise RuntimeError(f"upstream failure for {token_id}")
        return self.books.get(token_id)


def _settings(batch_size: int = 10, delay: float = 0.0) -> AppSettings:
    return replace(AppSettings(), engine=EngineSettings(batch_size=batch_size, batch_delay_seconds=delay))


def test_results_are_sorted_by_profit_percent() -> None:
    markets = [_market("a"), _market("b"), _market("c")]
    source = _BookSource(
        {
            "a-yes": _raw("0.79", "0.81"),
            "b-yes": _raw("0.40", "0.45"),
            "c-yes": _raw("0.10", "0.14"),
        }
    )

    results = asyncio.run(find_single_venue_opportunities(markets, source, _settings()))

    assert results
    percents = [opp.profit_percent for opp in results]
    assert percents == sorted(percents, reverse=True)
    assert {opp.market_id for opp in results} == {"a", "b", "c"}


def test_failing_market_is_isolated() -> None:
    markets = [_market("good"), _market("bad")]
    source = _BookSource({"good-yes": _raw("0.79", "0.81")}, failing={"bad-yes"})

    results = asyncio.run(find_single_venue_opportunities(markets, source, _settings()))

    assert results
    assert {opp.market_id for opp in results} == {"good"}


def test_markets_without_token_or_book_are_skipped() -> None:
    markets = [_market("no-token", token_id=None), _market("empty"), _market("ok")]
    source = _BookSource({"empty-yes": {"bids": [], "asks": []}, "ok-yes": _raw("0.79", "0.81")})

    results = asyncio.run(find_single_venue_opportunities(markets, source, _settings()))

    assert None not in source.calls
    assert {opp.market_id for opp in results} == {"ok"}


def test_illiquid_markets_produce_nothing() -> None:
    markets = [_market("thin", liquidity=10.0)]
    source = _BookSource({"thin-yes": _raw("0.10", "0.14")})

    assert asyncio.run(find_single_venue_opportunities(markets, source, _settings())) == []


def test_batches_pause_between_groups_only(monkeypatch) -> None:
    delays: list[float] = []

    async def _fake_sleep(seconds: float) -> None:
        delays.append(seconds)

    monkeypatch.setattr("arb_scan.engine.asyncio.sleep", _fake_sleep)
    markets = [_market(f"m{i}") for i in range(25)]
    source = _BookSource({f"m{i}-yes": _raw("0.79", "0.81") for i in range(25)})

    asyncio.run(find_single_venue_opportunities(markets, source, _settings(batch_size=10, delay=0.1)))

    assert delays == [0.1, 0.1]
    assert len(source.calls) == 25


def test_real_no_book_preferred_over_derived() -> None:
    markets = [_market("real", no_token_id="real-no"), _market("derived")]
    source = _BookSource(
        {
            "real-yes": _raw("0.79", "0.81"),
            "real-no": _raw("0.18", "0.20"),
            "derived-yes": _raw("0.79", "0.81"),
        }
    )

    results = asyncio.run(find_single_venue_opportunities(markets, source, _settings()))

    by_market = {opp.market_id: opp for opp in results if opp.strategy == Strategy.VOLUME_MOMENTUM}
    assert by_market["real"].no_side_derived is False
    assert by_market["real"].sell_price == pytest.approx(0.18)
    assert by_market["derived"].no_side_derived is True
    assert by_market["derived"].sell_price == pytest.approx(0.19)


def test_unusable_no_book_falls_back_to_derived() -> None:
    market = _market("x", no_token_id="x-no")
    source = _BookSource({"x-yes": _raw("0.40", "0.42"), "x-no": {"bids": [], "asks": []}})

    books = asyncio.run(load_books(market, source))

    assert books is not None
    yes_book, no_book = books
    assert no_book.derived is True
    assert no_book.best_bid == pytest.approx(0.58)


def test_volume_rank_uses_the_whole_batch() -> None:
    markets = [_market(f"m{i}", volume=10000.0 + i) for i in range(20)]
    source = _BookSource({f"m{i}-yes": _raw("0.79", "0.81") for i in range(20)})

    results = asyncio.run(find_single_venue_opportunities(markets, source, _settings()))

    spikes = sorted(opp.market_id for opp in results if opp.strategy == Strategy.VOLUME_SPIKE)
    assert spikes == ["m18", "m19"]


def test_strategy_filter_is_honored() -> None:
    source = _BookSource({"a-yes": _raw("0.79", "0.81")})

    results = asyncio.run(
        find_single_venue_opportunities([_market("a")], source, _settings(), strategies=[Strategy.MEAN_REVERSION])
    )

    assert [opp.strategy for opp in results] == [Strategy.MEAN_REVERSION]
