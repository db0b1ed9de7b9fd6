from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_EVENT_PAIRS_PATH = str(Path(__file__).resolve().parent / "config" / "event_pairs.csv")


def _as_float(value: str | None, default: float) -> float:
    if value is None or not value.strip():
        return default
    return float(value)


def _as_int(value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    return int(value)


def _as_path(value: str | None, default: str) -> str:
    if value is None or not value.strip():
        return default
    return str(Path(value.strip()).expanduser())


@dataclass(frozen=True)
class FeeSettings:
    # Venue A (Polymarket) charges on winnings, venue B (Kalshi) on the position.
    venue_a_winnings_fee: float = 0.02
    venue_b_position_fee: float = 0.007
    # Fee applied by the single-venue strategies.
    single_venue_fee: float = 0.02


@dataclass(frozen=True)
class StrategySettings:
    min_liquidity: float = 1000.0
    min_spread_percent: float = 0.5
    min_profit_percent: float = 0.3
    min_arbitrage_gap: float = 0.005
    min_volume: float = 5000.0
    high_volume_threshold: float = 50000.0
    min_volatility: float = 0.05
    breakout_volatility: float = 0.10
    breakout_min_deviation: float = 0.3
    min_momentum: float = 0.3
    momentum_max_spread_percent: float = 5.0
    min_reversion_deviation: float = 0.15
    expansion_min_volatility: float = 0.08
    spike_top_fraction: float = 0.1
    spike_max_spread_percent: float = 10.0


@dataclass(frozen=True)
class EngineSettings:
    batch_size: int = 10
    batch_delay_seconds: float = 0.1


@dataclass(frozen=True)
class PolymarketSettings:
    gamma_base_url: str = "https://gamma-api.polymarket.com"
    clob_base_url: str = "https://clob.polymarket.com"
    market_limit: int = 100
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class KalshiSettings:
    api_base_url: str = "https://api.elections.kalshi.com/trade-api/v2"
    market_limit: int = 200
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class AppSettings:
    log_level: str = "INFO"
    event_pairs_path: str = DEFAULT_EVENT_PAIRS_PATH
    default_bankroll_usd: float = 1000.0
    fees: FeeSettings = field(default_factory=FeeSettings)
    strategy: StrategySettings = field(default_factory=StrategySettings)
    engine: EngineSettings = field(default_factory=EngineSettings)
    polymarket: PolymarketSettings = field(default_factory=PolymarketSettings)
    kalshi: KalshiSettings = field(default_factory=KalshiSettings)


def load_settings() -> AppSettings:
    load_dotenv(override=False)

    fees = FeeSettings(
        venue_a_winnings_fee=_as_float(os.getenv("ARB_POLYMARKET_WINNINGS_FEE"), 0.02),
        venue_b_position_fee=_as_float(os.getenv("ARB_KALSHI_POSITION_FEE"), 0.007),
        single_venue_fee=_as_float(os.getenv("ARB_SINGLE_VENUE_FEE"), 0.02),
    )

    strategy = StrategySettings(
        min_liquidity=_as_float(os.getenv("ARB_MIN_LIQUIDITY"), 1000.0),
        min_spread_percent=_as_float(os.getenv("ARB_MIN_SPREAD_PERCENT"), 0.5),
        min_profit_percent=_as_float(os.getenv("ARB_MIN_PROFIT_PERCENT"), 0.3),
        min_arbitrage_gap=_as_float(os.getenv("ARB_MIN_ARBITRAGE_GAP"), 0.005),
        min_volume=_as_float(os.getenv("ARB_MIN_VOLUME"), 5000.0),
        high_volume_threshold=_as_float(os.getenv("ARB_HIGH_VOLUME_THRESHOLD"), 50000.0),
        min_volatility=_as_float(os.getenv("ARB_MIN_VOLATILITY"), 0.05),
        breakout_volatility=_as_float(os.getenv("ARB_BREAKOUT_VOLATILITY"), 0.10),
        breakout_min_deviation=_as_float(os.getenv("ARB_BREAKOUT_MIN_DEVIATION"), 0.3),
        min_momentum=_as_float(os.getenv("ARB_MIN_MOMENTUM"), 0.3),
        momentum_max_spread_percent=_as_float(os.getenv("ARB_MOMENTUM_MAX_SPREAD_PERCENT"), 5.0),
        min_reversion_deviation=_as_float(os.getenv("ARB_MIN_REVERSION_DEVIATION"), 0.15),
        expansion_min_volatility=_as_float(os.getenv("ARB_EXPANSION_MIN_VOLATILITY"), 0.08),
        spike_top_fraction=_as_float(os.getenv("ARB_SPIKE_TOP_FRACTION"), 0.1),
        spike_max_spread_percent=_as_float(os.getenv("ARB_SPIKE_MAX_SPREAD_PERCENT"), 10.0),
    )

    engine = EngineSettings(
        batch_size=max(1, _as_int(os.getenv("ARB_BATCH_SIZE"), 10)),
        batch_delay_seconds=max(0.0, _as_float(os.getenv("ARB_BATCH_DELAY_SECONDS"), 0.1)),
    )

    polymarket = PolymarketSettings(
        gamma_base_url=os.getenv("POLYMARKET_GAMMA_BASE_URL", "https://gamma-api.polymarket.com"),
        clob_base_url=os.getenv("POLYMARKET_CLOB_BASE_URL", "https://clob.polymarket.com"),
        market_limit=_as_int(os.getenv("POLYMARKET_MARKET_LIMIT"), 100),
        timeout_seconds=_as_float(os.getenv("POLYMARKET_TIMEOUT_SECONDS"), 10.0),
    )

    kalshi = KalshiSettings(
        api_base_url=os.getenv("KALSHI_API_BASE_URL", "https://api.elections.kalshi.com/trade-api/v2"),
        market_limit=_as_int(os.getenv("KALSHI_MARKET_LIMIT"), 200),
        timeout_seconds=_as_float(os.getenv("KALSHI_TIMEOUT_SECONDS"), 10.0),
    )

    return AppSettings(
        log_level=os.getenv("ARB_LOG_LEVEL", "INFO"),
        event_pairs_path=_as_path(os.getenv("ARB_EVENT_PAIRS_PATH"), DEFAULT_EVENT_PAIRS_PATH),
        default_bankroll_usd=_as_float(os.getenv("ARB_DEFAULT_BANKROLL_USD"), 1000.0),
        fees=fees,
        strategy=strategy,
        engine=engine,
        polymarket=polymarket,
        kalshi=kalshi,
    )
