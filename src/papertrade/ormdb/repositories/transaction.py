"""Repository for transaction ledger operations."""

from decimal import Decimal
from typing import Dict, List

from sqlalchemy import func, select

from ..models import Transaction
from .base import BaseRepository


class TransactionRepository(BaseRepository):
    """Repository for the append-only transaction ledger."""

    def append(
        self,
        account_id: str,
        symbol: str,
        side: str,
        shares: int,
        price_per_share: Decimal,
        gross_amount: Decimal,
        commission: Decimal,
    ) -> Transaction:
        """
        Record an executed trade.

        The row is flushed so its id is available before the surrounding
        unit of work commits.
        """
        transaction = Transaction(
            account_id=account_id,
            symbol=symbol,
            side=side,
            shares=shares,
            price_per_share=price_per_share,
            gross_amount=gross_amount,
            commission=commission,
        )
        self.session.add(transaction)
        self.session.flush()
        return transaction

    def recent_for_account(self, account_id: str, limit: int = 50) -> List[Transaction]:
        """Get the most recent transactions of an account, newest first."""
        stmt = (
            select(Transaction)
            .where(Transaction.account_id == account_id)
            .order_by(Transaction.timestamp.desc(), Transaction.id.desc())
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars())

    def count_for_account(self, account_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(Transaction)
            .where(Transaction.account_id == account_id)
        )
        return self.session.execute(stmt).scalar_one()

    def counts_by_account(self) -> Dict[str, int]:
        """Get the number of executed trades per account."""
        stmt = select(Transaction.account_id, func.count()).group_by(
            Transaction.account_id
        )
        return {account_id: count for account_id, count in self.session.execute(stmt)}
