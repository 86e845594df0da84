"""Account creation and account-level queries."""

from decimal import Decimal, InvalidOperation
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ...config.logging import get_logger, log_audit_event
from ...core.errors import AccountExists, AccountNotFound, InvalidOrder, StorageFailure
from ...core.money import MAX_AMOUNT, PRICE_QUANTUM
from ...ormdb.database import LedgerStore
from ...ormdb.models import Account
from ...ormdb.repositories import AccountRepository, TransactionRepository
from .models import AccountProfile, TradeSide, TransactionRecord

logger = get_logger(__name__)


def _to_profile(account: Account) -> AccountProfile:
    return AccountProfile(
        account_id=account.id,  # type: ignore
        cash_balance=account.cash_balance,  # type: ignore
        starting_balance=account.starting_balance,  # type: ignore
        created_at=account.created_at,  # type: ignore
    )


class AccountManager:
    """Opens accounts and reads account profiles and trade history."""

    def __init__(self, store: LedgerStore, default_starting_balance: Decimal):
        self.logger = logger.bind(component="account_manager")
        self.store = store
        self.default_starting_balance = default_starting_balance

    def open_account(
        self, account_id: str, starting_balance: Optional[Decimal] = None
    ) -> AccountProfile:
        """
        Create a new trading account.

        Args:
            account_id: Authenticated user identifier
            starting_balance: Initial cash (defaults to the configured balance)

        Returns:
            Profile of the new account

        Raises:
            InvalidOrder: If the id is blank or the balance is not positive
            AccountExists: If the id is already taken
        """
        if not isinstance(account_id, str) or not account_id.strip():
            raise InvalidOrder("Account id is required", field="account_id")
        account_id = account_id.strip()

        if starting_balance is None:
            starting_balance = self.default_starting_balance
        try:
            starting_balance = Decimal(str(starting_balance))
        except InvalidOperation:
            raise InvalidOrder("Invalid starting balance", field="starting_balance")
        if not starting_balance.is_finite() or starting_balance <= 0:
            raise InvalidOrder("Starting balance must be positive", field="starting_balance")
        if starting_balance > MAX_AMOUNT:
            raise InvalidOrder(
                f"Starting balance cannot exceed {MAX_AMOUNT}", field="starting_balance"
            )
        starting_balance = starting_balance.quantize(PRICE_QUANTUM)

        try:
            with self.store.unit_of_work() as session:
                accounts = AccountRepository(session)
                if accounts.exists(account_id):
                    raise AccountExists(account_id)
                profile = _to_profile(accounts.create(account_id, starting_balance))
        except IntegrityError as e:
            # Lost a race with a concurrent open of the same id
            raise AccountExists(account_id) from e
        except SQLAlchemyError as e:
            self.logger.error(f"Failed to open account: {e}")
            raise StorageFailure("open_account", str(e)) from e

        self.logger.info(
            "Opened account",
            account_id=account_id,
            starting_balance=str(starting_balance),
        )
        log_audit_event("account_opened", account_id=account_id)
        return profile

    def get_account(self, account_id: str) -> AccountProfile:
        """
        Get an account's balances.

        Raises:
            AccountNotFound: If the account does not exist
            StorageFailure: If the ledger store cannot be read
        """
        try:
            with self.store.snapshot() as session:
                account = AccountRepository(session).get(account_id)
                if account is None:
                    raise AccountNotFound(account_id)
                return _to_profile(account)
        except SQLAlchemyError as e:
            self.logger.error(f"Failed to read account: {e}")
            raise StorageFailure("get_account", str(e)) from e

    def get_transactions(self, account_id: str, limit: int = 50) -> List[TransactionRecord]:
        """
        Get an account's most recent transactions, newest first.

        Raises:
            InvalidOrder: If limit is negative
            AccountNotFound: If the account does not exist
            StorageFailure: If the ledger store cannot be read
        """
        if limit < 0:
            raise InvalidOrder("Limit cannot be negative", field="limit")

        try:
            with self.store.snapshot() as session:
                if not AccountRepository(session).exists(account_id):
                    raise AccountNotFound(account_id)
                rows = TransactionRepository(session).recent_for_account(account_id, limit)
                return [
                    TransactionRecord(
                        id=row.id,  # type: ignore
                        account_id=row.account_id,  # type: ignore
                        symbol=row.symbol,  # type: ignore
                        side=TradeSide(row.side),
                        shares=row.shares,  # type: ignore
                        price_per_share=row.price_per_share,  # type: ignore
                        gross_amount=row.gross_amount,  # type: ignore
                        commission=row.commission,  # type: ignore
                        timestamp=row.timestamp,  # type: ignore
                    )
                    for row in rows
                ]
        except SQLAlchemyError as e:
            self.logger.error(f"Failed to read transactions: {e}")
            raise StorageFailure("get_transactions", str(e)) from e
