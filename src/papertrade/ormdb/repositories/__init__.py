"""Repository classes for ledger operations using SQLAlchemy ORM."""

from .account import AccountRepository
from .base import BaseRepository
from .holding import HoldingRepository
from .transaction import TransactionRepository

__all__ = [
    "BaseRepository",
    "AccountRepository",
    "HoldingRepository",
    "TransactionRepository",
]
