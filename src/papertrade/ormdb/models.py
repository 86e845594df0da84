"""SQLAlchemy ORM models for the trading ledger."""

import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from ..core.money import (
    COST_BASIS_PRECISION,
    COST_BASIS_SCALE,
    MONEY_PRECISION,
    MONEY_SCALE,
)
from .database import Base
from .types import ExactDecimal

MONEY = ExactDecimal(MONEY_PRECISION, MONEY_SCALE)
PRICE = ExactDecimal(MONEY_PRECISION, MONEY_SCALE)
COST_BASIS = ExactDecimal(COST_BASIS_PRECISION, COST_BASIS_SCALE)


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


class Account(Base):
    """Trading account holding cash for one authenticated user."""

    __tablename__ = "accounts"

    id = Column(String, primary_key=True, index=True)
    cash_balance = Column(MONEY, nullable=False)
    starting_balance = Column(MONEY, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    holdings = relationship(
        "Holding",
        back_populates="account",
        cascade="all, delete-orphan",
        order_by="Holding.symbol",
    )
    transactions = relationship(
        "Transaction", back_populates="account", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Account(id='{self.id}', cash={self.cash_balance})>"


class Holding(Base):
    """Open position in one symbol. Rows with zero shares are deleted."""

    __tablename__ = "holdings"
    __table_args__ = (CheckConstraint("shares > 0", name="ck_holdings_shares_positive"),)

    account_id = Column(String, ForeignKey("accounts.id"), primary_key=True)
    symbol = Column(String, primary_key=True)
    shares = Column(Integer, nullable=False)
    avg_cost = Column(COST_BASIS, nullable=False)  # Average price paid per share

    account = relationship("Account", back_populates="holdings")

    def __repr__(self):
        return f"<Holding(account_id='{self.account_id}', symbol='{self.symbol}', shares={self.shares})>"


class Transaction(Base):
    """Append-only record of one executed trade."""

    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("shares > 0", name="ck_transactions_shares_positive"),
        CheckConstraint("side IN ('buy', 'sell')", name="ck_transactions_side"),
    )

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(String, ForeignKey("accounts.id"), nullable=False, index=True)
    symbol = Column(String, nullable=False, index=True)
    side = Column(String(4), nullable=False)  # "buy" or "sell"
    shares = Column(Integer, nullable=False)
    price_per_share = Column(PRICE, nullable=False)
    gross_amount = Column(MONEY, nullable=False)  # shares * price_per_share
    commission = Column(MONEY, nullable=False)
    timestamp = Column(DateTime, default=_utcnow, nullable=False, index=True)

    account = relationship("Account", back_populates="transactions")

    def __repr__(self):
        return f"<Transaction(id={self.id}, account_id='{self.account_id}', side='{self.side}', symbol='{self.symbol}')>"
