"""Reference stock quotes from Yahoo Finance."""

from decimal import Decimal
from typing import Optional

import yfinance as yf
from pydantic import BaseModel

from ..config.logging import get_logger
from .errors import QuoteUnavailable
from .money import PRICE_QUANTUM

logger = get_logger(__name__)


class Quote(BaseModel):
    """Latest known price for a symbol."""

    symbol: str
    price: Decimal
    previous_close: Optional[Decimal] = None


class PriceOracle:
    """
    Looks up reference prices.

    Trades never consult the oracle; clients use it to pick the price they
    submit with an order.
    """

    def __init__(self):
        self.logger = logger.bind(component="price_oracle")

    def get_quote(self, symbol: str) -> Quote:
        """
        Get the current price and previous close for a symbol.

        Args:
            symbol: Stock symbol (e.g., 'AAPL', 'MSFT')

        Returns:
            Quote rounded to 4 decimal places

        Raises:
            QuoteUnavailable: If the symbol is unknown or the lookup fails
        """
        symbol = symbol.strip().upper()
        try:
            ticker = yf.Ticker(symbol)
            data = ticker.history(period="1d", interval="1m")

            if not data.empty:
                current_price = data["Close"].iloc[-1]  # most recent minute
            else:
                current_price = ticker.fast_info.last_price  # fallback

            closes = ticker.history(period="5d")["Close"].dropna()
            previous_close = closes.iloc[-2] if len(closes) >= 2 else None
        except Exception as e:
            self.logger.warning("Quote lookup failed", symbol=symbol, error=str(e))
            raise QuoteUnavailable(symbol, str(e)) from e

        if current_price is None or current_price != current_price or current_price <= 0:
            raise QuoteUnavailable(symbol, "no price available")

        return Quote(
            symbol=symbol,
            price=Decimal(str(current_price)).quantize(PRICE_QUANTUM),
            previous_close=(
                Decimal(str(previous_close)).quantize(PRICE_QUANTUM)
                if previous_close is not None
                else None
            ),
        )
