"""Trade execution logic for buy and sell operations."""

import time
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import Any

from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...config.logging import get_logger, log_audit_event, log_performance
from ...core.errors import (
    AccountNotFound,
    ConcurrencyConflict,
    InsufficientFunds,
    InsufficientShares,
    InvalidOrder,
    NoPosition,
    StorageFailure,
    TradingError,
)
from ...core.money import COST_BASIS_QUANTUM, MAX_AMOUNT, PRICE_QUANTUM
from ...ormdb.database import LedgerStore
from ...ormdb.models import Account, Transaction
from ...ormdb.repositories import (
    AccountRepository,
    HoldingRepository,
    TransactionRepository,
)
from .models import (
    HoldingSnapshot,
    TradeRequest,
    TradeResult,
    TradeSide,
)

logger = get_logger(__name__)

# SQLSTATEs for serialization failure and deadlock
_RETRYABLE_SQLSTATES = {"40001", "40P01"}
_RETRYABLE_MESSAGES = ("database is locked", "database is busy", "deadlock")


def weighted_average_cost(
    held_shares: int, held_avg_cost: Decimal, bought_shares: int, price: Decimal
) -> Decimal:
    """
    Re-average the cost basis of a position after buying more shares.

    Returns:
        (held_shares * held_avg_cost + bought_shares * price) / total shares,
        rounded half-even to the cost basis precision
    """
    total_cost = held_shares * held_avg_cost + bought_shares * price
    total_shares = held_shares + bought_shares
    return (total_cost / total_shares).quantize(COST_BASIS_QUANTUM, rounding=ROUND_HALF_EVEN)


def _parse_price(value: Any) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise InvalidOrder("Price per share is required", field="price_per_share")
    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidOrder(f"Invalid price: {value!r}", field="price_per_share")

    if not price.is_finite() or price <= 0:
        raise InvalidOrder("Price per share must be positive", field="price_per_share")
    if price > MAX_AMOUNT:
        raise InvalidOrder(
            f"Price per share cannot exceed {MAX_AMOUNT}", field="price_per_share"
        )
    if price != price.quantize(PRICE_QUANTUM):
        raise InvalidOrder(
            "Price per share supports at most 4 decimal places", field="price_per_share"
        )
    return price.quantize(PRICE_QUANTUM)


def validate_order(
    account_id: str, symbol: Any, side: Any, shares: Any, price_per_share: Any
) -> TradeRequest:
    """
    Check and normalise a raw order.

    Raises:
        InvalidOrder: If the symbol, side, share count or price is malformed
    """
    if not isinstance(symbol, str) or not symbol.strip():
        raise InvalidOrder("Symbol is required", field="symbol")

    if isinstance(side, TradeSide):
        trade_side = side
    elif isinstance(side, str) and side.strip().lower() in ("buy", "sell"):
        trade_side = TradeSide(side.strip().lower())
    else:
        raise InvalidOrder(f"Invalid side: {side!r}", field="side")

    if isinstance(shares, bool) or not isinstance(shares, int):
        raise InvalidOrder("Shares must be a whole number", field="shares")
    if shares <= 0:
        raise InvalidOrder("Shares must be positive", field="shares")

    price = _parse_price(price_per_share)
    if shares * price > MAX_AMOUNT:
        raise InvalidOrder(f"Trade amount cannot exceed {MAX_AMOUNT}", field="shares")

    return TradeRequest(
        account_id=account_id,
        symbol=symbol.strip().upper(),
        side=trade_side,
        shares=shares,
        price_per_share=price,
    )


def _is_write_conflict(exc: DBAPIError) -> bool:
    """Whether a driver error means another writer got there first."""
    orig = exc.orig
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate in _RETRYABLE_SQLSTATES:
        return True
    message = str(orig).lower()
    return any(fragment in message for fragment in _RETRYABLE_MESSAGES)


class TradeExecutor:
    """Executes market orders as single all-or-nothing units of work."""

    def __init__(
        self,
        store: LedgerStore,
        commission: Decimal,
        max_retries: int = 5,
        retry_backoff_ms: int = 25,
    ):
        self.logger = logger.bind(component="trade_executor")
        self.store = store
        self.commission = Decimal(commission).quantize(PRICE_QUANTUM)
        self.max_retries = max_retries
        self.retry_backoff_ms = retry_backoff_ms

    def execute_trade(
        self,
        account_id: str,
        symbol: Any,
        side: Any,
        shares: Any,
        price_per_share: Any,
    ) -> TradeResult:
        """
        Execute a buy or sell at the caller-supplied price.

        Cash, the holding and the transaction ledger are updated in one
        transaction. If this method raises, nothing was persisted; if it
        returns, everything was.

        Args:
            account_id: Authenticated account identifier
            symbol: Ticker symbol
            side: "buy" or "sell"
            shares: Positive whole number of shares
            price_per_share: Positive execution price

        Returns:
            TradeResult with execution details

        Raises:
            InvalidOrder, AccountNotFound, InsufficientFunds, NoPosition,
            InsufficientShares, ConcurrencyConflict, StorageFailure
        """
        request = validate_order(account_id, symbol, side, shares, price_per_share)
        started = time.perf_counter()
        attempt = 0

        while True:
            attempt += 1
            try:
                result = self._execute_once(request)
                break
            except TradingError as e:
                self.logger.info(
                    "Trade rejected",
                    account_id=request.account_id,
                    symbol=request.symbol,
                    side=request.side.value,
                    shares=request.shares,
                    reason=e.code,
                )
                raise
            except DBAPIError as e:
                if not _is_write_conflict(e):
                    self.logger.error("Trade storage failure", error=str(e), exc_info=True)
                    raise StorageFailure("trade", str(e.orig)) from e
                if attempt > self.max_retries:
                    self.logger.warning(
                        "Trade conflict retries exhausted",
                        account_id=request.account_id,
                        attempts=attempt,
                    )
                    raise ConcurrencyConflict(attempt) from e

                self.logger.debug(
                    "Retrying conflicting trade",
                    account_id=request.account_id,
                    attempt=attempt,
                )
                time.sleep(self.retry_backoff_ms * attempt / 1000)
            except SQLAlchemyError as e:
                self.logger.error("Trade storage failure", error=str(e), exc_info=True)
                raise StorageFailure("trade", str(e)) from e

        self.logger.info(
            "Executed trade",
            account_id=result.account_id,
            symbol=result.symbol,
            side=result.side.value,
            shares=result.shares,
            price=str(result.price_per_share),
            transaction_id=result.transaction_id,
        )
        log_audit_event(
            "trade_executed",
            account_id=result.account_id,
            transaction_id=result.transaction_id,
            side=result.side.value,
            symbol=result.symbol,
            shares=result.shares,
            gross_amount=str(result.gross_amount),
            commission=str(result.commission),
        )
        log_performance(
            "execute_trade",
            (time.perf_counter() - started) * 1000,
            attempts=attempt,
        )
        return result

    def _execute_once(self, request: TradeRequest) -> TradeResult:
        """Run one attempt inside its own unit of work."""
        with self.store.unit_of_work() as session:
            account = AccountRepository(session).get(request.account_id, for_update=True)
            if account is None:
                raise AccountNotFound(request.account_id)

            if request.side is TradeSide.BUY:
                return self._apply_buy(session, account, request)
            return self._apply_sell(session, account, request)

    def _apply_buy(
        self, session: Session, account: Account, request: TradeRequest
    ) -> TradeResult:
        """Debit cash, open or re-average the holding, record the trade."""
        gross_amount = request.shares * request.price_per_share
        total_cost = gross_amount + self.commission

        if account.cash_balance < total_cost:
            raise InsufficientFunds(required=total_cost, available=account.cash_balance)

        account.cash_balance = account.cash_balance - total_cost

        holdings = HoldingRepository(session)
        holding = holdings.get(account.id, request.symbol, for_update=True)
        if holding is None:
            holding = holdings.add(
                account.id, request.symbol, request.shares, request.price_per_share
            )
        else:
            holding.avg_cost = weighted_average_cost(
                holding.shares, holding.avg_cost, request.shares, request.price_per_share
            )
            holding.shares = holding.shares + request.shares

        transaction = TransactionRepository(session).append(
            account_id=account.id,
            symbol=request.symbol,
            side=TradeSide.BUY.value,
            shares=request.shares,
            price_per_share=request.price_per_share,
            gross_amount=gross_amount,
            commission=self.commission,
        )

        snapshot = HoldingSnapshot(
            symbol=holding.symbol, shares=holding.shares, avg_cost=holding.avg_cost
        )
        return self._build_result(transaction, account, request, snapshot)

    def _apply_sell(
        self, session: Session, account: Account, request: TradeRequest
    ) -> TradeResult:
        """Credit net proceeds, shrink or close the holding, record the trade."""
        holdings = HoldingRepository(session)
        holding = holdings.get(account.id, request.symbol, for_update=True)

        if holding is None:
            raise NoPosition(request.symbol)
        if holding.shares < request.shares:
            raise InsufficientShares(request.symbol, holding.shares, request.shares)

        gross_amount = request.shares * request.price_per_share
        # Commission comes out of the proceeds on a sell
        net_proceeds = gross_amount - self.commission

        # A sale worth less than the commission must still leave cash >= 0
        if account.cash_balance + net_proceeds < 0:
            raise InsufficientFunds(
                required=self.commission - gross_amount, available=account.cash_balance
            )

        if account.cash_balance + net_proceeds > MAX_AMOUNT:
            raise InvalidOrder(
                f"Cash balance cannot exceed {MAX_AMOUNT}", field="shares"
            )

        account.cash_balance = account.cash_balance + net_proceeds

        if holding.shares == request.shares:
            holdings.delete(holding)
            snapshot = None
        else:
            holding.shares = holding.shares - request.shares
            snapshot = HoldingSnapshot(
                symbol=holding.symbol, shares=holding.shares, avg_cost=holding.avg_cost
            )

        transaction = TransactionRepository(session).append(
            account_id=account.id,
            symbol=request.symbol,
            side=TradeSide.SELL.value,
            shares=request.shares,
            price_per_share=request.price_per_share,
            gross_amount=gross_amount,
            commission=self.commission,
        )

        return self._build_result(transaction, account, request, snapshot)

    def _build_result(
        self,
        transaction: Transaction,
        account: Account,
        request: TradeRequest,
        holding: HoldingSnapshot | None,
    ) -> TradeResult:
        return TradeResult(
            transaction_id=transaction.id,  # type: ignore
            account_id=account.id,  # type: ignore
            symbol=request.symbol,
            side=request.side,
            shares=request.shares,
            price_per_share=request.price_per_share,
            gross_amount=transaction.gross_amount,  # type: ignore
            commission=transaction.commission,  # type: ignore
            cash_balance=account.cash_balance,  # type: ignore
            holding=holding,
        )
