"""Leaderboard endpoint."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from ...services.trading import TradingService
from ..dependencies import get_trading_service
from ..models.responses import LeaderboardEntryData, StatusResponse, to_data_list

router = APIRouter()


@router.get(
    "",
    response_model=StatusResponse,
    summary="Get Leaderboard",
    description="Rank all accounts by total value at cost basis",
)
def get_leaderboard(
    request: Request,
    limit: Optional[int] = Query(None, ge=0, le=500, description="Maximum entries"),
    service: TradingService = Depends(get_trading_service),
):
    request_id = getattr(request.state, "request_id", None)

    entries = to_data_list(
        [LeaderboardEntryData.from_entry(e) for e in service.get_leaderboard(limit)]
    )

    return StatusResponse.create(
        data={"leaderboard": entries, "count": len(entries)},
        request_id=request_id,
    )
