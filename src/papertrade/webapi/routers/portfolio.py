"""Portfolio viewing endpoints."""

from fastapi import APIRouter, Depends, Request

from ...config.logging import get_logger
from ...services.trading import TradingService
from ..dependencies import get_trading_service
from ..models.responses import (
    HoldingData,
    PortfolioSummaryData,
    StatusResponse,
    to_data_list,
)

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/{account_id}/portfolio",
    response_model=StatusResponse,
    summary="Get Portfolio",
    description="Get the account's holdings ordered by symbol",
)
def get_portfolio(
    request: Request,
    account_id: str,
    service: TradingService = Depends(get_trading_service),
):
    request_id = getattr(request.state, "request_id", None)

    holdings = to_data_list([HoldingData.from_snapshot(h) for h in service.get_portfolio(account_id)])

    return StatusResponse.create(
        data={"holdings": holdings, "count": len(holdings)},
        request_id=request_id,
    )


@router.get(
    "/{account_id}/portfolio/summary",
    response_model=StatusResponse,
    summary="Get Portfolio Summary",
    description="Get cash, invested value and total return at cost basis",
)
def get_portfolio_summary(
    request: Request,
    account_id: str,
    service: TradingService = Depends(get_trading_service),
):
    """
    Get the account's portfolio summary.

    Holdings are valued at average cost, so currentValue equals invested.
    """
    request_id = getattr(request.state, "request_id", None)

    logger.info("Portfolio summary requested", account_id=account_id, request_id=request_id)

    summary = service.get_portfolio_summary(account_id)

    return StatusResponse.create(
        data=PortfolioSummaryData.from_summary(summary).to_data(),
        request_id=request_id,
    )
