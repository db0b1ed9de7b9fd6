from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from typing import Any, Dict, Sequence

from arb_scan.arbitrage import calculate_arbitrage, find_cross_venue_opportunities
from arb_scan.config import AppSettings, load_settings
from arb_scan.engine import find_single_venue_opportunities
from arb_scan.event_pairs import load_event_pairs
from arb_scan.exchanges import KalshiAdapter, PolymarketAdapter
from arb_scan.logging_setup import configure_logging
from arb_scan.models import MarketSnapshot, MatchedEvent, Venue
from arb_scan.report import build_cross_venue_report, build_error_report, build_single_venue_report
from arb_scan.sizing import calculate_optimal_stakes

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Binary prediction-market opportunity scanner",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser(
        "cross",
        help="Match Polymarket and Kalshi markets and report fee-adjusted arbitrage",
    )

    single = subparsers.add_parser(
        "single",
        help="Run the single-venue strategies over Polymarket order books",
    )
    single.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Override the number of markets fetched",
    )

    stakes = subparsers.add_parser(
        "stakes",
        help="Split a bankroll across both venues for a hypothetical price pair",
    )
    stakes.add_argument("--bankroll", type=float, default=None, help="Bankroll in USD")
    stakes.add_argument("--venue-a-price", type=float, required=True, help="Polymarket Yes price")
    stakes.add_argument("--venue-b-price", type=float, required=True, help="Kalshi Yes price")
    return parser.parse_args(argv)


async def run_cross(settings: AppSettings) -> Dict[str, Any]:
    pairs = load_event_pairs(settings.event_pairs_path)
    polymarket = PolymarketAdapter(settings.polymarket)
    kalshi = KalshiAdapter(settings.kalshi)
    try:
        venue_a, venue_b = await asyncio.gather(
            polymarket.fetch_market_snapshots(),
            kalshi.fetch_market_snapshots(),
        )
    finally:
        await asyncio.gather(polymarket.aclose(), kalshi.aclose())

    matched, opportunities = find_cross_venue_opportunities(venue_a, venue_b, pairs, settings.fees)
    return build_cross_venue_report(opportunities, len(venue_a), len(venue_b), matched)


async def run_single(settings: AppSettings) -> Dict[str, Any]:
    polymarket = PolymarketAdapter(settings.polymarket)
    try:
        markets = await polymarket.fetch_market_snapshots()
        opportunities = await find_single_venue_opportunities(
            markets,
            polymarket.fetch_order_book,
            settings,
        )
    finally:
        await polymarket.aclose()
    return build_single_venue_report(opportunities, len(markets))


def run_stakes(settings: AppSettings, bankroll: float, venue_a_price: float, venue_b_price: float) -> Dict[str, Any]:
    event = MatchedEvent(
        id="cli-cli",
        event_name="hypothetical",
        venue_a=MarketSnapshot(
            id="cli",
            question="hypothetical",
            yes_price=venue_a_price,
            no_price=1 - venue_a_price,
            url="",
            venue=Venue.POLYMARKET,
        ),
        venue_b=MarketSnapshot(
            id="cli",
            question="hypothetical",
            yes_price=venue_b_price,
            no_price=1 - venue_b_price,
            url="",
            venue=Venue.KALSHI,
        ),
    )
    opportunity = calculate_arbitrage(event, settings.fees)
    if opportunity is None:
        return build_error_report("no profitable arbitrage at these prices after fees")

    allocation = calculate_optimal_stakes(bankroll, opportunity)
    return {
        "opportunity": opportunity.to_payload(),
        "bankroll": bankroll,
        **allocation.to_payload(),
    }


async def _run(args: argparse.Namespace, settings: AppSettings) -> Dict[str, Any]:
    if args.command == "cross":
        return await run_cross(settings)
    if args.command == "single":
        return await run_single(settings)
    bankroll = args.bankroll if args.bankroll is not None else settings.default_bankroll_usd
    return run_stakes(settings, bankroll, args.venue_a_price, args.venue_b_price)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    settings = load_settings()
    configure_logging(settings.log_level)

    if getattr(args, "limit", None) is not None:
        settings = replace(settings, polymarket=replace(settings.polymarket, market_limit=args.limit))

    try:
        report = asyncio.run(_run(args, settings))
    except Exception as exc:
        LOGGER.exception("%s scan failed", args.command)
        report = build_error_report(str(exc))

    print(json.dumps(report, indent=2))
    return 1 if "error" in report else 0


if __name__ == "__main__":
    sys.exit(main())
