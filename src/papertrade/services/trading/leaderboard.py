"""Leaderboard and account ranking functionality."""

from collections import defaultdict
from decimal import Decimal
from typing import Dict, List

from sqlalchemy.exc import SQLAlchemyError

from ...config.logging import get_logger
from ...core.errors import InvalidOrder, StorageFailure
from ...ormdb.database import LedgerStore
from ...ormdb.repositories import (
    AccountRepository,
    HoldingRepository,
    TransactionRepository,
)
from .models import RankedEntry, return_percent

logger = get_logger(__name__)


class LeaderboardManager:
    """Ranks every account by total value, recomputed on each call."""

    def __init__(self, store: LedgerStore):
        self.logger = logger.bind(component="leaderboard_manager")
        self.store = store

    def get_leaderboard(self, limit: int = 20) -> List[RankedEntry]:
        """
        Get the performance leaderboard.

        Total value is cash plus holdings at cost basis. Accounts with equal
        totals are ordered by account id.

        Args:
            limit: Maximum number of entries to return

        Returns:
            Ranked entries, best first

        Raises:
            InvalidOrder: If limit is negative
            StorageFailure: If the ledger store cannot be read
        """
        if limit < 0:
            raise InvalidOrder("Limit cannot be negative", field="limit")

        try:
            with self.store.snapshot() as session:
                accounts = AccountRepository(session).list_all()

                invested: Dict[str, Decimal] = defaultdict(Decimal)
                for holding in HoldingRepository(session).list_all():
                    invested[holding.account_id] += holding.shares * holding.avg_cost

                trade_counts = TransactionRepository(session).counts_by_account()
        except SQLAlchemyError as e:
            self.logger.error(f"Failed to build leaderboard: {e}")
            raise StorageFailure("get_leaderboard", str(e)) from e

        rows = []
        for account in accounts:
            invested_value = invested[account.id]
            rows.append((account, invested_value, account.cash_balance + invested_value))

        rows.sort(key=lambda row: (-row[2], row[0].id))

        rankings = [
            RankedEntry(
                rank=position,
                account_id=account.id,  # type: ignore
                total_value=total_value,
                cash_balance=account.cash_balance,  # type: ignore
                invested_value=invested_value,
                return_percent=return_percent(total_value, account.starting_balance),  # type: ignore
                trade_count=trade_counts.get(account.id, 0),  # type: ignore
                member_since=account.created_at,  # type: ignore
            )
            for position, (account, invested_value, total_value) in enumerate(rows, start=1)
        ][:limit]

        self.logger.info(f"Generated leaderboard with {len(rankings)} entries")

        return rankings
