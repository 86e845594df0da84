"""Errors raised by the trading engine and its collaborators."""

from typing import Any, Dict, Optional


class TradingError(Exception):
    """Base exception for trading and portfolio operations."""

    code = "trading_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidOrder(TradingError):
    """Malformed symbol, quantity, price or side."""

    code = "invalid_order"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details={"field": field} if field else None)


class AccountNotFound(TradingError):
    code = "account_not_found"

    def __init__(self, account_id: str):
        super().__init__(
            f"Account '{account_id}' not found", details={"account_id": account_id}
        )


class AccountExists(TradingError):
    code = "account_exists"

    def __init__(self, account_id: str):
        super().__init__(
            f"Account '{account_id}' already exists", details={"account_id": account_id}
        )


class InsufficientFunds(TradingError):
    """Buy would cost more than the available cash."""

    code = "insufficient_funds"

    def __init__(self, required, available):
        super().__init__(
            "Insufficient funds",
            details={"required": str(required), "available": str(available)},
        )


class NoPosition(TradingError):
    """Sell of a symbol the account does not hold."""

    code = "no_position"

    def __init__(self, symbol: str):
        super().__init__(f"No position found for {symbol}", details={"symbol": symbol})


class InsufficientShares(TradingError):
    """Sell of more shares than are held."""

    code = "insufficient_shares"

    def __init__(self, symbol: str, held: int, requested: int):
        super().__init__(
            f"Insufficient shares (have {held}, want to sell {requested})",
            details={"symbol": symbol, "held": held, "requested": requested},
        )


class ConcurrencyConflict(TradingError):
    """Write conflict that persisted through every retry."""

    code = "concurrency_conflict"

    def __init__(self, attempts: int):
        super().__init__(
            f"Trade conflicted with concurrent updates after {attempts} attempts",
            details={"attempts": attempts},
        )


class StorageFailure(TradingError):
    """The ledger store is unavailable or failed unexpectedly."""

    code = "storage_failure"

    def __init__(self, operation: str, message: str):
        super().__init__(
            f"Ledger {operation} failed: {message}", details={"operation": operation}
        )


class QuoteUnavailable(TradingError):
    code = "quote_unavailable"

    def __init__(self, symbol: str, message: str):
        super().__init__(
            f"Failed to get price for {symbol}: {message}", details={"symbol": symbol}
        )
