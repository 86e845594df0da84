"""Ledger store module for SQLAlchemy ORM integration."""

from .database import Base, LedgerStore, create_ledger_engine
from .models import Account, Holding, Transaction
from .repositories import (
    AccountRepository,
    HoldingRepository,
    TransactionRepository,
)

__all__ = [
    # Store components
    "Base",
    "LedgerStore",
    "create_ledger_engine",
    # Models
    "Account",
    "Holding",
    "Transaction",
    # Repositories
    "AccountRepository",
    "HoldingRepository",
    "TransactionRepository",
]
