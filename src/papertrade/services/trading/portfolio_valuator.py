"""Read-only portfolio valuation."""

from decimal import Decimal
from typing import Iterable, List

from sqlalchemy.exc import SQLAlchemyError

from ...config.logging import get_logger
from ...core.errors import AccountNotFound, StorageFailure
from ...ormdb.database import LedgerStore
from ...ormdb.models import Holding
from ...ormdb.repositories import AccountRepository, HoldingRepository
from .models import HoldingSnapshot, PortfolioSummary, return_percent

logger = get_logger(__name__)


def cost_basis_value(holdings: Iterable[Holding]) -> Decimal:
    """Sum of shares * average cost over the given holdings."""
    return sum((h.shares * h.avg_cost for h in holdings), Decimal("0"))


class PortfolioValuator:
    """Summarises an account's cash and positions."""

    def __init__(self, store: LedgerStore):
        self.logger = logger.bind(component="portfolio_valuator")
        self.store = store

    def get_holdings(self, account_id: str) -> List[HoldingSnapshot]:
        """
        Get an account's open positions ordered by symbol.

        Raises:
            AccountNotFound: If the account does not exist
            StorageFailure: If the ledger store cannot be read
        """
        try:
            with self.store.snapshot() as session:
                if not AccountRepository(session).exists(account_id):
                    raise AccountNotFound(account_id)
                holdings = HoldingRepository(session).list_for_account(account_id)
                return [
                    HoldingSnapshot(symbol=h.symbol, shares=h.shares, avg_cost=h.avg_cost)
                    for h in holdings
                ]
        except SQLAlchemyError as e:
            self.logger.error("Failed to read holdings", error=str(e))
            raise StorageFailure("get_holdings", str(e)) from e

    def summarize(self, account_id: str) -> PortfolioSummary:
        """
        Value an account at cost basis.

        Holdings are valued at shares * average cost; no live prices are
        fetched, so current value equals invested value.

        Args:
            account_id: Account identifier

        Returns:
            PortfolioSummary read from a single consistent snapshot

        Raises:
            AccountNotFound: If the account does not exist
            StorageFailure: If the ledger store cannot be read
        """
        try:
            with self.store.snapshot() as session:
                account = AccountRepository(session).get(account_id)
                if account is None:
                    raise AccountNotFound(account_id)
                holdings = HoldingRepository(session).list_for_account(account_id)

                invested = cost_basis_value(holdings)
                current_value = invested
                total_value = account.cash_balance + current_value

                summary = PortfolioSummary(
                    account_id=account.id,  # type: ignore
                    cash_balance=account.cash_balance,  # type: ignore
                    invested=invested,
                    current_value=current_value,
                    total_value=total_value,
                    return_percent=return_percent(total_value, account.starting_balance),  # type: ignore
                    starting_balance=account.starting_balance,  # type: ignore
                    num_positions=len(holdings),
                )
        except SQLAlchemyError as e:
            self.logger.error("Failed to summarise portfolio", error=str(e))
            raise StorageFailure("summarize", str(e)) from e

        self.logger.debug(
            "Portfolio summarised",
            account_id=account_id,
            total_value=str(summary.total_value),
        )
        return summary
