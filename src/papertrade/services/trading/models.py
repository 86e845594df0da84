"""Data models for trade execution and portfolio accounting."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from ...core.money import PERCENT_QUANTUM


class TradeSide(str, Enum):
    """Direction of a market order."""

    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class TradeRequest:
    """A validated, normalised market order."""

    account_id: str
    symbol: str
    side: TradeSide
    shares: int
    price_per_share: Decimal


@dataclass(frozen=True)
class HoldingSnapshot:
    """Point-in-time copy of a holding row."""

    symbol: str
    shares: int
    avg_cost: Decimal

    @property
    def cost_basis(self) -> Decimal:
        return self.shares * self.avg_cost


@dataclass(frozen=True)
class TradeResult:
    """Result of an executed (committed) trade."""

    transaction_id: int
    account_id: str
    symbol: str
    side: TradeSide
    shares: int
    price_per_share: Decimal
    gross_amount: Decimal
    commission: Decimal
    cash_balance: Decimal
    holding: Optional[HoldingSnapshot]  # None once the position is closed

    @property
    def message(self) -> str:
        verb = "bought" if self.side is TradeSide.BUY else "sold"
        return f"Successfully {verb} {self.shares} shares of {self.symbol}"


@dataclass(frozen=True)
class AccountProfile:
    """Account balances without holdings."""

    account_id: str
    cash_balance: Decimal
    starting_balance: Decimal
    created_at: datetime


@dataclass(frozen=True)
class TransactionRecord:
    """Read-side copy of a transaction ledger row."""

    id: int
    account_id: str
    symbol: str
    side: TradeSide
    shares: int
    price_per_share: Decimal
    gross_amount: Decimal
    commission: Decimal
    timestamp: datetime


@dataclass(frozen=True)
class PortfolioSummary:
    """Cash, holdings value and return for one account."""

    account_id: str
    cash_balance: Decimal
    invested: Decimal
    current_value: Decimal  # Cost basis, not marked to market
    total_value: Decimal
    return_percent: Decimal
    starting_balance: Decimal
    num_positions: int


@dataclass(frozen=True)
class RankedEntry:
    """Leaderboard row."""

    rank: int
    account_id: str
    total_value: Decimal
    cash_balance: Decimal
    invested_value: Decimal
    return_percent: Decimal
    trade_count: int
    member_since: datetime


def return_percent(total_value: Decimal, starting_balance: Decimal) -> Decimal:
    """Percentage gain of total_value over starting_balance, to 2 places."""
    if not starting_balance:
        return Decimal("0.00")
    pct = (total_value - starting_balance) / starting_balance * 100
    return pct.quantize(PERCENT_QUANTUM)
