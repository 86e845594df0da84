"""
API routers for the Papertrade service.

- accounts: account opening and profile
- trading: trade execution and transaction history
- portfolio: holdings and cost-basis summary
- leaderboard: accounts ranked by total value
- market: reference quotes
"""

from fastapi import APIRouter

from . import accounts, leaderboard, market, portfolio, trading

router = APIRouter()

# Account endpoints: /accounts, /accounts/{account_id}
router.include_router(accounts.router, prefix="/accounts", tags=["Accounts"])

# Trading endpoints: /accounts/{account_id}/trades, /accounts/{account_id}/transactions
router.include_router(trading.router, prefix="/accounts", tags=["Trading"])

# Portfolio endpoints: /accounts/{account_id}/portfolio, .../portfolio/summary
router.include_router(portfolio.router, prefix="/accounts", tags=["Portfolio"])

# Leaderboard endpoint: /leaderboard
router.include_router(leaderboard.router, prefix="/leaderboard", tags=["Leaderboard"])

# Market endpoints: /market/quote/{symbol}
router.include_router(market.router, prefix="/market", tags=["Market Data"])

__all__ = ["router"]
