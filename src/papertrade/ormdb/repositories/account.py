"""Repository for account operations."""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select

from ..models import Account
from .base import BaseRepository


class AccountRepository(BaseRepository):
    """Repository for account operations."""

    def get(self, account_id: str, for_update: bool = False) -> Optional[Account]:
        """
        Get an account by id.

        Args:
            account_id: Account identifier
            for_update: Lock the row until the transaction ends

        Returns:
            The account, or None if it does not exist
        """
        stmt = select(Account).where(Account.id == account_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()

    def exists(self, account_id: str) -> bool:
        return self.session.get(Account, account_id) is not None

    def create(self, account_id: str, starting_balance: Decimal) -> Account:
        """Create an account whose cash equals its starting balance."""
        account = Account(
            id=account_id,
            cash_balance=starting_balance,
            starting_balance=starting_balance,
        )
        self.session.add(account)
        self.session.flush()
        return account

    def list_all(self) -> List[Account]:
        """Get every account ordered by id."""
        return list(self.session.execute(select(Account).order_by(Account.id)).scalars())
