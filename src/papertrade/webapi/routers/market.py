"""Reference quote endpoint."""

from fastapi import APIRouter, Depends, Request

from ...config.logging import get_logger
from ...core.price_oracle import PriceOracle
from ..dependencies import get_price_oracle
from ..models.responses import StatusResponse

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/quote/{symbol}",
    response_model=StatusResponse,
    summary="Get Quote",
    description="Get a reference price to submit with an order",
)
def get_quote(
    request: Request,
    symbol: str,
    oracle: PriceOracle = Depends(get_price_oracle),
):
    request_id = getattr(request.state, "request_id", None)

    logger.info("Quote requested", symbol=symbol, request_id=request_id)

    quote = oracle.get_quote(symbol)

    return StatusResponse.create(
        data={
            "symbol": quote.symbol,
            "price": float(quote.price),
            "previousClose": (
                float(quote.previous_close) if quote.previous_close is not None else None
            ),
        },
        request_id=request_id,
    )
