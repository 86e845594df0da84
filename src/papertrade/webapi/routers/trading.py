"""Trade execution and transaction history endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from ...config.logging import get_logger
from ...services.trading import TradingService
from ..dependencies import get_trading_service
from ..models.requests import TradeOrderRequest
from ..models.responses import (
    StatusResponse,
    TradeConfirmation,
    TransactionData,
    to_data_list,
)

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/{account_id}/trades",
    response_model=StatusResponse,
    summary="Execute Trade",
    description="Buy or sell shares at the supplied price, filled immediately",
)
def execute_trade(
    request: Request,
    account_id: str,
    order: TradeOrderRequest,
    service: TradingService = Depends(get_trading_service),
):
    """
    Execute a market order.

    The cash debit or credit, the holding update and the transaction record
    are committed together; an error response means nothing changed.
    """
    request_id = getattr(request.state, "request_id", None)

    logger.info(
        "Trade requested",
        account_id=account_id,
        symbol=order.symbol,
        side=order.side,
        shares=order.shares,
        request_id=request_id,
    )

    result = service.execute_trade(
        account_id, order.symbol, order.side, order.shares, order.price_per_share
    )

    return StatusResponse.create(
        data=TradeConfirmation.from_result(result).to_data(),
        message=result.message,
        request_id=request_id,
    )


@router.get(
    "/{account_id}/transactions",
    response_model=StatusResponse,
    summary="Get Transactions",
    description="Get the most recent transactions, newest first",
)
def get_transactions(
    request: Request,
    account_id: str,
    limit: Optional[int] = Query(None, ge=0, le=500, description="Maximum rows"),
    service: TradingService = Depends(get_trading_service),
):
    request_id = getattr(request.state, "request_id", None)

    records = service.get_transactions(account_id, limit)
    transactions = to_data_list([TransactionData.from_record(r) for r in records])

    return StatusResponse.create(
        data={"transactions": transactions, "count": len(transactions)},
        request_id=request_id,
    )
