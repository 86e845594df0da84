"""API request and response models."""

from .requests import AccountCreateRequest, TradeOrderRequest
from .responses import (
    AccountData,
    BaseResponse,
    ErrorResponse,
    HealthResponse,
    HealthStatus,
    HoldingData,
    LeaderboardEntryData,
    PortfolioSummaryData,
    StatusResponse,
    SuccessResponse,
    TradeConfirmation,
    TransactionData,
)

__all__ = [
    # Requests
    "AccountCreateRequest",
    "TradeOrderRequest",
    # Envelopes
    "BaseResponse",
    "SuccessResponse",
    "ErrorResponse",
    "StatusResponse",
    "HealthResponse",
    "HealthStatus",
    # Payloads
    "AccountData",
    "HoldingData",
    "LeaderboardEntryData",
    "PortfolioSummaryData",
    "TradeConfirmation",
    "TransactionData",
]
