"""Single-venue strategy evaluators.

Each evaluator looks at one market's Yes and No books and returns at most
one ``Opportunity``. Evaluators are pure; batch-level inputs such as the
market's volume rank are computed once by the engine and handed in through
``MarketContext``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from arb_scan.config import StrategySettings
from arb_scan.models import MarketSnapshot, Opportunity, OrderBookSnapshot, Side, Strategy

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarketContext:
    market: MarketSnapshot
    yes_book: OrderBookSnapshot
    no_book: OrderBookSnapshot
    volume_rank: int
    market_count: int
    fee: float = 0.02
    settings: StrategySettings = field(default_factory=StrategySettings)

    @property
    def volume(self) -> float:
        return self.market.volume or 0.0

    @property
    def liquidity(self) -> float:
        return self.market.liquidity or 0.0

    @property
    def yes_no_sum(self) -> float:
        return self.yes_book.mid_price + self.no_book.mid_price


Evaluator = Callable[[MarketContext], Optional[Opportunity]]


def volume_ranks(markets: Sequence[MarketSnapshot]) -> dict[str, int]:
    """1-based rank of each market id by descending volume.

    Ties keep input order. A repeated id keeps its first (best) rank.
    """
    ordered = sorted(markets, key=lambda market: market.volume or 0.0, reverse=True)
    ranks: dict[str, int] = {}
    for idx, market in enumerate(ordered, start=1):
        ranks.setdefault(market.id, idx)
    return ranks


def evaluate_spread_trading(ctx: MarketContext) -> Opportunity | None:
    settings = ctx.settings
    if ctx.liquidity < settings.min_liquidity:
        return None

    use_yes = ctx.yes_book.spread_percent >= ctx.no_book.spread_percent
    book = ctx.yes_book if use_yes else ctx.no_book
    if book.spread_percent < settings.min_spread_percent or book.best_bid <= 0:
        return None

    gross = book.spread
    net = gross - book.best_bid * ctx.fee - book.best_ask * ctx.fee
    profit_percent = net / book.best_bid * 100
    if profit_percent < settings.min_profit_percent:
        return None

    side = Side.YES if use_yes else Side.NO
    return _build(
        ctx,
        strategy=Strategy.SPREAD_TRADING,
        id_prefix="spread",
        spread=book.spread,
        spread_percent=book.spread_percent,
        estimated_profit=gross,
        profit_after_fees=net,
        profit_percent=profit_percent,
        buy_side=side,
        sell_side=side,
        buy_price=book.best_bid,
        sell_price=book.best_ask,
        recommended_size=min(book.bid_size, book.ask_size) * 0.1,
    )


def evaluate_market_making(ctx: MarketContext) -> Opportunity | None:
    # Quotes both sides of the same book, so the edge is the spread trade's.
    opportunity = evaluate_spread_trading(ctx)
    if opportunity is None:
        return None
    return _build(
        ctx,
        strategy=Strategy.MARKET_MAKING,
        id_prefix="market-making",
        spread=opportunity.spread,
        spread_percent=opportunity.spread_percent,
        estimated_profit=opportunity.estimated_profit,
        profit_after_fees=opportunity.profit_after_fees,
        profit_percent=opportunity.profit_percent,
        buy_side=opportunity.buy_side,
        sell_side=opportunity.sell_side,
        buy_price=opportunity.buy_price,
        sell_price=opportunity.sell_price,
        recommended_size=opportunity.recommended_size,
    )


def evaluate_yes_no_arbitrage(ctx: MarketContext) -> Opportunity | None:
    settings = ctx.settings
    if ctx.liquidity < settings.min_liquidity:
        return None

    yes, no = ctx.yes_book, ctx.no_book
    total = ctx.yes_no_sum
    gap = abs(1.0 - total)
    if gap < settings.min_arbitrage_gap:
        return None

    if total < 1.0:
        # Buy both outcomes; exactly one pays out 1.
        cost = yes.best_ask + no.best_ask
        if cost <= 0:
            return None
        gross = 1.0 - cost
        net = gross - ctx.fee
        profit_percent = net / cost * 100
        buy_price, sell_price = yes.best_ask, no.best_ask
    else:
        # Sell both outcomes; exactly one must be paid out.
        receive = yes.best_bid + no.best_bid
        gross = receive - 1.0
        net = gross - receive * ctx.fee
        profit_percent = net * 100
        buy_price, sell_price = yes.best_bid, no.best_bid

    if profit_percent < settings.min_profit_percent:
        return None

    combined_spread = yes.spread + no.spread
    return _build(
        ctx,
        strategy=Strategy.YES_NO_ARBITRAGE,
        id_prefix="arbitrage",
        spread=combined_spread,
        spread_percent=combined_spread / total * 100,
        estimated_profit=gross,
        profit_after_fees=net,
        profit_percent=profit_percent,
        buy_side=Side.YES,
        sell_side=Side.NO,
        buy_price=buy_price,
        sell_price=sell_price,
        recommended_size=min(yes.bid_size, yes.ask_size, no.bid_size, no.ask_size) * 0.1,
    )


def evaluate_volatility_breakout(ctx: MarketContext) -> Opportunity | None:
    settings = ctx.settings
    if ctx.volume < settings.min_volume or ctx.liquidity < settings.min_liquidity:
        return None

    volatility = ctx.yes_book.spread_percent / 100
    if volatility < settings.min_volatility:
        return None

    deviation = abs(ctx.yes_book.mid_price - 0.5)
    if not (deviation > settings.breakout_min_deviation and volatility > settings.breakout_volatility):
        return None

    buy_yes = ctx.yes_book.mid_price < 0.5
    return _directional(
        ctx,
        strategy=Strategy.VOLATILITY_BREAKOUT,
        id_prefix="volatility-breakout",
        buy_yes=buy_yes,
        expected_move=volatility * 0.5,
        size_fraction=0.1,
        volatility=volatility,
        price_change=deviation,
        momentum=1.0 if buy_yes else -1.0,
    )


def evaluate_volume_momentum(ctx: MarketContext) -> Opportunity | None:
    settings = ctx.settings
    if ctx.volume < settings.high_volume_threshold or ctx.liquidity < settings.min_liquidity:
        return None

    momentum = abs(ctx.yes_book.mid_price - 0.5) * 2
    if momentum < settings.min_momentum:
        return None
    if ctx.yes_book.spread_percent > settings.momentum_max_spread_percent:
        return None

    buy_yes = ctx.yes_book.mid_price > 0.5
    return _directional(
        ctx,
        strategy=Strategy.VOLUME_MOMENTUM,
        id_prefix="volume-momentum",
        buy_yes=buy_yes,
        expected_move=momentum * 0.3,
        size_fraction=0.15,
        price_change=momentum,
        momentum=momentum if buy_yes else -momentum,
    )


def evaluate_mean_reversion(ctx: MarketContext) -> Opportunity | None:
    settings = ctx.settings
    if ctx.volume < settings.high_volume_threshold or ctx.liquidity < settings.min_liquidity:
        return None

    deviation = abs(ctx.yes_book.mid_price - 0.5)
    if deviation < settings.min_reversion_deviation:
        return None

    buy_yes = ctx.yes_book.mid_price < 0.5
    return _directional(
        ctx,
        strategy=Strategy.MEAN_REVERSION,
        id_prefix="mean-reversion",
        buy_yes=buy_yes,
        expected_move=deviation * 0.4,
        size_fraction=0.12,
        price_change=-deviation,
        momentum=1.0 if buy_yes else -1.0,
    )


def evaluate_volatility_expansion(ctx: MarketContext) -> Opportunity | None:
    settings = ctx.settings
    if ctx.volume < settings.min_volume or ctx.liquidity < settings.min_liquidity:
        return None

    volatility = ctx.yes_book.spread_percent / 100
    if volatility < settings.expansion_min_volatility:
        return None

    buy_yes = ctx.yes_book.spread > ctx.no_book.spread
    return _directional(
        ctx,
        strategy=Strategy.VOLATILITY_EXPANSION,
        id_prefix="volatility-expansion",
        buy_yes=buy_yes,
        expected_move=volatility * 0.3,
        size_fraction=0.1,
        volatility=volatility,
        price_change=volatility,
        momentum=1.0 if buy_yes else -1.0,
    )


def evaluate_volume_spike(ctx: MarketContext) -> Opportunity | None:
    settings = ctx.settings
    if ctx.volume < settings.min_volume or ctx.liquidity < settings.min_liquidity:
        return None

    cutoff = max(1, int(ctx.market_count * settings.spike_top_fraction))
    if ctx.volume_rank > cutoff:
        return None
    if ctx.yes_book.spread_percent > settings.spike_max_spread_percent:
        return None

    buy_yes = ctx.yes_book.mid_price > 0.5
    price_momentum = abs(ctx.yes_book.mid_price - 0.5) * 2
    return _directional(
        ctx,
        strategy=Strategy.VOLUME_SPIKE,
        id_prefix="volume-spike",
        buy_yes=buy_yes,
        expected_move=price_momentum * 0.25,
        size_fraction=0.2,
        price_change=price_momentum,
        momentum=price_momentum if buy_yes else -price_momentum,
    )


STRATEGY_EVALUATORS: dict[Strategy, Evaluator] = {
    Strategy.SPREAD_TRADING: evaluate_spread_trading,
    Strategy.YES_NO_ARBITRAGE: evaluate_yes_no_arbitrage,
    Strategy.MARKET_MAKING: evaluate_market_making,
    Strategy.VOLATILITY_BREAKOUT: evaluate_volatility_breakout,
    Strategy.VOLUME_MOMENTUM: evaluate_volume_momentum,
    Strategy.MEAN_REVERSION: evaluate_mean_reversion,
    Strategy.VOLATILITY_EXPANSION: evaluate_volatility_expansion,
    Strategy.VOLUME_SPIKE: evaluate_volume_spike,
}


def evaluate_market(
    ctx: MarketContext,
    strategies: Sequence[Strategy] | None = None,
) -> list[Opportunity]:
    selected = list(strategies) if strategies is not None else list(Strategy)
    opportunities: list[Opportunity] = []
    for strategy in selected:
        opportunity = STRATEGY_EVALUATORS[strategy](ctx)
        if opportunity is not None:
            opportunities.append(opportunity)
    if opportunities:
        LOGGER.debug(
            "market %s: %s",
            ctx.market.id,
            ", ".join(opp.strategy.value for opp in opportunities),
        )
    return opportunities


def _directional(
    ctx: MarketContext,
    strategy: Strategy,
    id_prefix: str,
    buy_yes: bool,
    expected_move: float,
    size_fraction: float,
    price_change: float,
    momentum: float,
    volatility: float | None = None,
) -> Opportunity | None:
    yes, no = ctx.yes_book, ctx.no_book
    buy_price = yes.best_ask if buy_yes else no.best_ask
    sell_price = no.best_bid if buy_yes else yes.best_bid
    if buy_price <= 0:
        return None

    gross = expected_move
    net = gross - (1 + expected_move) * ctx.fee
    profit_percent = net / buy_price * 100
    if profit_percent < ctx.settings.min_profit_percent:
        return None

    return _build(
        ctx,
        strategy=strategy,
        id_prefix=id_prefix,
        spread=yes.spread,
        spread_percent=yes.spread_percent,
        estimated_profit=gross,
        profit_after_fees=net,
        profit_percent=profit_percent,
        buy_side=Side.YES if buy_yes else Side.NO,
        sell_side=Side.NO if buy_yes else Side.YES,
        buy_price=buy_price,
        sell_price=sell_price,
        recommended_size=min(yes.ask_size, no.ask_size) * size_fraction,
        volatility=volatility,
        volume_24h=ctx.volume,
        volume_rank=ctx.volume_rank,
        price_change=price_change,
        momentum=momentum,
    )


def _build(
    ctx: MarketContext,
    strategy: Strategy,
    id_prefix: str,
    spread: float,
    spread_percent: float,
    estimated_profit: float,
    profit_after_fees: float,
    profit_percent: float,
    buy_side: Side,
    sell_side: Side,
    buy_price: float,
    sell_price: float,
    recommended_size: float,
    **extra: float | int | None,
) -> Opportunity:
    market = ctx.market
    total = ctx.yes_no_sum
    return Opportunity(
        id=f"{id_prefix}-{market.id}",
        strategy=strategy,
        event_name=market.question,
        market_id=market.id,
        token_id=market.token_id,
        url=market.url,
        yes_bid=ctx.yes_book.best_bid,
        yes_ask=ctx.yes_book.best_ask,
        no_bid=ctx.no_book.best_bid,
        no_ask=ctx.no_book.best_ask,
        yes_mid_price=ctx.yes_book.mid_price,
        no_mid_price=ctx.no_book.mid_price,
        spread=spread,
        spread_percent=spread_percent,
        yes_no_sum=total,
        arbitrage_gap=abs(1.0 - total),
        estimated_profit=estimated_profit,
        profit_after_fees=profit_after_fees,
        profit_percent=profit_percent,
        liquidity=ctx.liquidity,
        volume=ctx.volume,
        min_liquidity=ctx.liquidity >= ctx.settings.min_liquidity,
        buy_side=buy_side,
        sell_side=sell_side,
        buy_price=buy_price,
        sell_price=sell_price,
        recommended_size=recommended_size,
        no_side_derived=ctx.no_book.derived,
        **extra,
    )
