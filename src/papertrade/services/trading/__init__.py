"""Simulated trading and portfolio accounting service module."""

from ...core.errors import (
    AccountExists,
    AccountNotFound,
    ConcurrencyConflict,
    InsufficientFunds,
    InsufficientShares,
    InvalidOrder,
    NoPosition,
    QuoteUnavailable,
    StorageFailure,
    TradingError,
)
from .account_manager import AccountManager
from .leaderboard import LeaderboardManager
from .models import (
    AccountProfile,
    HoldingSnapshot,
    PortfolioSummary,
    RankedEntry,
    TradeRequest,
    TradeResult,
    TradeSide,
    TransactionRecord,
)
from .portfolio_valuator import PortfolioValuator
from .service import TradingService
from .trade_executor import TradeExecutor

__all__ = [
    "TradingService",
    "AccountManager",
    "TradeExecutor",
    "PortfolioValuator",
    "LeaderboardManager",
    # Models
    "AccountProfile",
    "HoldingSnapshot",
    "PortfolioSummary",
    "RankedEntry",
    "TradeRequest",
    "TradeResult",
    "TradeSide",
    "TransactionRecord",
    # Errors
    "TradingError",
    "InvalidOrder",
    "AccountNotFound",
    "AccountExists",
    "InsufficientFunds",
    "NoPosition",
    "InsufficientShares",
    "ConcurrencyConflict",
    "StorageFailure",
    "QuoteUnavailable",
]
