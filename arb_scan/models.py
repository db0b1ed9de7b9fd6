from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class Venue(str, Enum):
    POLYMARKET = "polymarket"
    KALSHI = "kalshi"


class Side(str, Enum):
    YES = "yes"
    NO = "no"


class Strategy(str, Enum):
    SPREAD_TRADING = "spread_trading"
    YES_NO_ARBITRAGE = "yes_no_arbitrage"
    MARKET_MAKING = "market_making"
    VOLATILITY_BREAKOUT = "volatility_breakout"
    VOLUME_MOMENTUM = "volume_momentum"
    MEAN_REVERSION = "mean_reversion"
    VOLATILITY_EXPANSION = "volatility_expansion"
    VOLUME_SPIKE = "volume_spike"


@dataclass(frozen=True)
class MarketSnapshot:
    id: str
    question: str
    yes_price: float
    no_price: float
    url: str
    venue: Venue
    volume: float | None = None
    liquidity: float | None = None
    token_id: str | None = None
    no_token_id: str | None = None
    spread: float | None = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "question": self.question,
            "yesPrice": self.yes_price,
            "noPrice": self.no_price,
            "volume": self.volume,
            "liquidity": self.liquidity,
            "url": self.url,
            "platform": self.venue.value,
            "tokenId": self.token_id,
            "spread": self.spread,
        }


@dataclass(frozen=True)
class OrderBookSnapshot:
    """Top-of-book view of one outcome token.

    ``derived`` marks a book synthesized from the opposite outcome
    (``1 - price``) rather than read from a real order book.
    """

    best_bid: float
    best_ask: float
    bid_size: float
    ask_size: float
    mid_price: float
    spread: float
    spread_percent: float
    derived: bool = False


@dataclass(frozen=True)
class MatchedEvent:
    id: str
    event_name: str
    venue_a: MarketSnapshot | None
    venue_b: MarketSnapshot | None

    @property
    def is_complete(self) -> bool:
        return self.venue_a is not None and self.venue_b is not None


@dataclass(frozen=True)
class CrossVenueArbitrageOpportunity:
    """Fee-adjusted cross-venue setup. ``spread`` and ``profit_after_fees`` are percentages."""

    event_name: str
    venue_a_yes_price: float
    venue_b_yes_price: float
    spread: float
    profit_after_fees: float
    venue_a_url: str
    venue_b_url: str
    venue_a_id: str
    venue_b_id: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            "eventName": self.event_name,
            "polymarketYesPrice": self.venue_a_yes_price,
            "kalshiYesPrice": self.venue_b_yes_price,
            "spread": self.spread,
            "profitAfterFees": self.profit_after_fees,
            "polymarketUrl": self.venue_a_url,
            "kalshiUrl": self.venue_b_url,
            "polymarketId": self.venue_a_id,
            "kalshiId": self.venue_b_id,
        }


@dataclass(frozen=True)
class StakeAllocation:
    venue_a_stake: float
    venue_b_stake: float
    total_profit: float

    def to_payload(self) -> Dict[str, Any]:
        return {
            "polymarketStake": self.venue_a_stake,
            "kalshiStake": self.venue_b_stake,
            "totalProfit": self.total_profit,
        }


@dataclass(frozen=True)
class Opportunity:
    id: str
    strategy: Strategy
    event_name: str
    market_id: str
    url: str
    yes_bid: float
    yes_ask: float
    no_bid: float
    no_ask: float
    yes_mid_price: float
    no_mid_price: float
    spread: float
    spread_percent: float
    yes_no_sum: float
    arbitrage_gap: float
    estimated_profit: float
    profit_after_fees: float
    profit_percent: float
    liquidity: float
    volume: float
    min_liquidity: bool
    buy_side: Side
    sell_side: Side
    buy_price: float
    sell_price: float
    recommended_size: float
    token_id: str | None = None
    volatility: float | None = None
    volume_24h: float | None = None
    volume_rank: int | None = None
    price_change: float | None = None
    momentum: float | None = None
    no_side_derived: bool = False

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "strategy": self.strategy.value,
            "eventName": self.event_name,
            "marketId": self.market_id,
            "tokenId": self.token_id,
            "url": self.url,
            "yesBid": self.yes_bid,
            "yesAsk": self.yes_ask,
            "noBid": self.no_bid,
            "noAsk": self.no_ask,
            "yesMidPrice": self.yes_mid_price,
            "noMidPrice": self.no_mid_price,
            "spread": self.spread,
            "spreadPercent": self.spread_percent,
            "yesNoSum": self.yes_no_sum,
            "arbitrageGap": self.arbitrage_gap,
            "estimatedProfit": self.estimated_profit,
            "profitAfterFees": self.profit_after_fees,
            "profitPercent": self.profit_percent,
            "liquidity": self.liquidity,
            "volume": self.volume,
            "minLiquidity": self.min_liquidity,
            "buySide": self.buy_side.value,
            "sellSide": self.sell_side.value,
            "buyPrice": self.buy_price,
            "sellPrice": self.sell_price,
            "recommendedSize": self.recommended_size,
            "noSideDerived": self.no_side_derived,
        }
        optional = {
            "volatility": self.volatility,
            "volume24h": self.volume_24h,
            "volumeRank": self.volume_rank,
            "priceChange": self.price_change,
            "momentum": self.momentum,
        }
        payload.update({key: value for key, value in optional.items() if value is not None})
        return payload
