"""Response models for the Papertrade API."""

from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from ...services.trading.models import (
    AccountProfile,
    HoldingSnapshot,
    PortfolioSummary,
    RankedEntry,
    TradeResult,
    TransactionRecord,
)

# Generic type for data responses
T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseResponse(BaseModel):
    """Base response model for all API responses."""

    success: bool = Field(..., description="Whether the request was successful")
    timestamp: datetime = Field(default_factory=_utcnow, description="Response timestamp")
    request_id: Optional[str] = Field(
        None, description="Unique request identifier for tracking"
    )

    model_config = ConfigDict(
        use_enum_values=True,
        arbitrary_types_allowed=True,
    )

    @field_serializer("timestamp")
    def serialize_timestamp(self, dt: datetime) -> str:
        """Serialize datetime to ISO format with Z suffix."""
        return dt.replace(tzinfo=None).isoformat() + "Z"


class SuccessResponse(BaseResponse, Generic[T]):
    """Generic success response with typed data."""

    success: bool = Field(True, description="Always true for success responses")
    data: T = Field(..., description="Response data")
    message: Optional[str] = Field(None, description="Optional success message")


class ErrorResponse(BaseResponse):
    """Error response model."""

    success: bool = Field(False, description="Always false for error responses")
    error: Dict[str, Any] = Field(..., description="Error details")


class StatusResponse(SuccessResponse[Dict[str, Any]]):
    """Generic status response."""

    data: Dict[str, Any] = Field(..., description="Status data")

    @classmethod
    def create(
        cls,
        data: Dict[str, Any],
        message: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> "StatusResponse":
        """Create a status response."""
        return cls(success=True, data=data, message=message, request_id=request_id)


class HealthStatus(BaseModel):
    """Health status model."""

    status: str = Field(
        ..., description="Overall health status: healthy, degraded, unhealthy"
    )
    services: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict, description="Individual service statuses"
    )
    uptime_seconds: float = Field(..., description="Application uptime in seconds")
    version: Optional[str] = Field(None, description="Application version")


class HealthResponse(BaseResponse):
    """Health check response."""

    success: bool = Field(True, description="Always true for health responses")
    health: HealthStatus = Field(..., description="Detailed health information")


# Payloads placed under StatusResponse.data, serialised with camelCase keys


class CamelModel(BaseModel):
    """Base for payloads whose JSON keys are camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_data(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class AccountData(CamelModel):
    account_id: str
    cash_balance: float
    starting_balance: float
    created_at: datetime

    @classmethod
    def from_profile(cls, profile: AccountProfile) -> "AccountData":
        return cls(
            account_id=profile.account_id,
            cash_balance=float(profile.cash_balance),
            starting_balance=float(profile.starting_balance),
            created_at=profile.created_at,
        )


class HoldingData(CamelModel):
    symbol: str
    shares: int
    avg_cost: float
    cost_basis: float

    @classmethod
    def from_snapshot(cls, holding: HoldingSnapshot) -> "HoldingData":
        return cls(
            symbol=holding.symbol,
            shares=holding.shares,
            avg_cost=float(holding.avg_cost),
            cost_basis=float(holding.cost_basis),
        )


class TradeConfirmation(CamelModel):
    """Confirmation of an executed trade."""

    side: str
    shares: int
    symbol: str
    transaction_id: int
    price_per_share: float
    gross_amount: float
    commission: float
    cash_balance: float
    holding: Optional[HoldingData]
    message: str

    @classmethod
    def from_result(cls, result: TradeResult) -> "TradeConfirmation":
        return cls(
            side=result.side.value,
            shares=result.shares,
            symbol=result.symbol,
            transaction_id=result.transaction_id,
            price_per_share=float(result.price_per_share),
            gross_amount=float(result.gross_amount),
            commission=float(result.commission),
            cash_balance=float(result.cash_balance),
            holding=HoldingData.from_snapshot(result.holding) if result.holding else None,
            message=result.message,
        )


class PortfolioSummaryData(CamelModel):
    cash_balance: float
    invested: float
    current_value: float
    total_portfolio_value: float
    total_return: float
    starting_balance: float
    num_positions: int

    @classmethod
    def from_summary(cls, summary: PortfolioSummary) -> "PortfolioSummaryData":
        return cls(
            cash_balance=float(summary.cash_balance),
            invested=float(summary.invested),
            current_value=float(summary.current_value),
            total_portfolio_value=float(summary.total_value),
            total_return=float(summary.return_percent),
            starting_balance=float(summary.starting_balance),
            num_positions=summary.num_positions,
        )


class TransactionData(CamelModel):
    id: int
    symbol: str
    side: str
    shares: int
    price_per_share: float
    gross_amount: float
    commission: float
    timestamp: datetime

    @classmethod
    def from_record(cls, record: TransactionRecord) -> "TransactionData":
        return cls(
            id=record.id,
            symbol=record.symbol,
            side=record.side.value,
            shares=record.shares,
            price_per_share=float(record.price_per_share),
            gross_amount=float(record.gross_amount),
            commission=float(record.commission),
            timestamp=record.timestamp,
        )


class LeaderboardEntryData(CamelModel):
    rank: int
    account_id: str
    total_value: float
    return_percent: float
    trade_count: int
    member_since: datetime

    @classmethod
    def from_entry(cls, entry: RankedEntry) -> "LeaderboardEntryData":
        return cls(
            rank=entry.rank,
            account_id=entry.account_id,
            total_value=float(entry.total_value),
            return_percent=float(entry.return_percent),
            trade_count=entry.trade_count,
            member_since=entry.member_since,
        )


def to_data_list(items: List[CamelModel]) -> List[Dict[str, Any]]:
    return [item.to_data() for item in items]
