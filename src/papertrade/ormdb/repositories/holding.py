"""Repository for holding operations."""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select

from ..models import Holding
from .base import BaseRepository


class HoldingRepository(BaseRepository):
    """Repository for holding operations."""

    def get(self, account_id: str, symbol: str, for_update: bool = False) -> Optional[Holding]:
        """Get the holding for an (account, symbol) pair."""
        stmt = select(Holding).where(
            Holding.account_id == account_id,
            Holding.symbol == symbol,
        )
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()

    def list_for_account(self, account_id: str) -> List[Holding]:
        """Get all holdings of an account ordered by symbol."""
        stmt = (
            select(Holding)
            .where(Holding.account_id == account_id)
            .order_by(Holding.symbol)
        )
        return list(self.session.execute(stmt).scalars())

    def add(self, account_id: str, symbol: str, shares: int, avg_cost: Decimal) -> Holding:
        """Open a new position."""
        holding = Holding(
            account_id=account_id,
            symbol=symbol,
            shares=shares,
            avg_cost=avg_cost,
        )
        self.session.add(holding)
        return holding

    def delete(self, holding: Holding) -> None:
        """Remove a position that has been sold out."""
        self.session.delete(holding)

    def list_all(self) -> List[Holding]:
        """Get every open position across all accounts."""
        stmt = select(Holding).order_by(Holding.account_id, Holding.symbol)
        return list(self.session.execute(stmt).scalars())
