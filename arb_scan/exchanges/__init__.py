from .base import ExchangeAdapter
from .kalshi import KalshiAdapter
from .polymarket import PolymarketAdapter

__all__ = ["ExchangeAdapter", "KalshiAdapter", "PolymarketAdapter"]
