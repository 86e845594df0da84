"""Domain primitives and external collaborators used by the trading engine."""

from .errors import TradingError
from .price_oracle import PriceOracle, Quote

__all__ = ["PriceOracle", "Quote", "TradingError"]
