"""Main trading service orchestration."""

from decimal import Decimal
from typing import Any, List, Optional

from ...config.logging import get_logger
from ...config.settings import Settings, get_settings
from ...ormdb.database import LedgerStore
from .account_manager import AccountManager
from .leaderboard import LeaderboardManager
from .models import (
    AccountProfile,
    HoldingSnapshot,
    PortfolioSummary,
    RankedEntry,
    TradeResult,
    TransactionRecord,
)
from .portfolio_valuator import PortfolioValuator
from .trade_executor import TradeExecutor

logger = get_logger(__name__)


class TradingService:
    """Service for simulated trading and portfolio accounting."""

    def __init__(self, store: LedgerStore, settings: Optional[Settings] = None):
        self.logger = logger.bind(service="trading_service")
        self.settings = settings or get_settings()
        self.store = store

        # Initialize component managers
        self.account_manager = AccountManager(
            store, self.settings.default_starting_balance
        )
        self.trade_executor = TradeExecutor(
            store,
            commission=self.settings.commission_per_trade,
            max_retries=self.settings.trade_max_retries,
            retry_backoff_ms=self.settings.trade_retry_backoff_ms,
        )
        self.portfolio_valuator = PortfolioValuator(store)
        self.leaderboard_manager = LeaderboardManager(store)

    def open_account(
        self, account_id: str, starting_balance: Optional[Decimal] = None
    ) -> AccountProfile:
        """Create a trading account funded with its starting balance."""
        return self.account_manager.open_account(account_id, starting_balance)

    def get_account(self, account_id: str) -> AccountProfile:
        return self.account_manager.get_account(account_id)

    def execute_trade(
        self,
        account_id: str,
        symbol: Any,
        side: Any,
        shares: Any,
        price_per_share: Any,
    ) -> TradeResult:
        """
        Execute a market order at the supplied price.

        Args:
            account_id: Authenticated account identifier
            symbol: Ticker symbol
            side: "buy" or "sell"
            shares: Positive whole number of shares
            price_per_share: Execution price

        Returns:
            TradeResult with execution details
        """
        return self.trade_executor.execute_trade(
            account_id, symbol, side, shares, price_per_share
        )

    def get_portfolio(self, account_id: str) -> List[HoldingSnapshot]:
        """Get an account's holdings ordered by symbol."""
        return self.portfolio_valuator.get_holdings(account_id)

    def get_portfolio_summary(self, account_id: str) -> PortfolioSummary:
        """Get cash, invested value and total return for an account."""
        return self.portfolio_valuator.summarize(account_id)

    def get_transactions(
        self, account_id: str, limit: Optional[int] = None
    ) -> List[TransactionRecord]:
        """Get recent transactions, newest first."""
        if limit is None:
            limit = self.settings.transactions_default_limit
        return self.account_manager.get_transactions(account_id, limit)

    def get_leaderboard(self, limit: Optional[int] = None) -> List[RankedEntry]:
        """Get accounts ranked by total value."""
        if limit is None:
            limit = self.settings.leaderboard_default_limit
        return self.leaderboard_manager.get_leaderboard(limit)
