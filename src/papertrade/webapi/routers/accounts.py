"""Account opening and profile endpoints."""

from fastapi import APIRouter, Depends, Request

from ...config.logging import get_logger
from ...services.trading import TradingService
from ..dependencies import get_trading_service
from ..models.requests import AccountCreateRequest
from ..models.responses import AccountData, StatusResponse

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=StatusResponse,
    status_code=201,
    summary="Open Account",
    description="Open a trading account funded with its starting balance",
)
def open_account(
    request: Request,
    body: AccountCreateRequest,
    service: TradingService = Depends(get_trading_service),
):
    """Open a new trading account for an authenticated user."""
    request_id = getattr(request.state, "request_id", None)

    logger.info("Account opening requested", account_id=body.account_id, request_id=request_id)

    profile = service.open_account(body.account_id, body.starting_balance)

    return StatusResponse.create(
        data=AccountData.from_profile(profile).to_data(),
        message="Account opened",
        request_id=request_id,
    )


@router.get(
    "/{account_id}",
    response_model=StatusResponse,
    summary="Get Account",
    description="Get cash and starting balance for an account",
)
def get_account(
    request: Request,
    account_id: str,
    service: TradingService = Depends(get_trading_service),
):
    request_id = getattr(request.state, "request_id", None)

    profile = service.get_account(account_id)

    return StatusResponse.create(
        data=AccountData.from_profile(profile).to_data(), request_id=request_id
    )
