"""FastAPI application wiring the trading service to HTTP."""

import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config.logging import get_logger
from ..config.settings import Settings, get_settings
from ..core.price_oracle import PriceOracle
from ..ormdb.database import LedgerStore
from ..services.trading import TradingService
from .dependencies import verify_auth_token
from .exceptions import setup_exception_handlers
from .health import router as health_router
from .models.responses import StatusResponse
from .routers import router as api_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting Papertrade API")

    yield

    logger.info("Shutting down Papertrade API")
    if app.state.owns_store:
        app.state.store.dispose()
        logger.info("Ledger store connections released")


async def add_request_id_middleware(request: Request, call_next):
    """Add unique request ID to each request for tracking."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    logger.info(
        "Request started",
        request_id=request_id,
        method=request.method,
        path=request.url.path,
        query_params=str(request.query_params),
        remote_addr=request.client.host if request.client else None,
    )

    response = await call_next(request)

    response.headers["X-Request-ID"] = request_id

    logger.info(
        "Request completed",
        request_id=request_id,
        status_code=response.status_code,
        method=request.method,
        path=request.url.path,
    )

    return response


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[LedgerStore] = None,
    price_oracle: Optional[PriceOracle] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Application settings (defaults to the cached settings)
        store: Ledger store to serve; built from settings when omitted
        price_oracle: Quote source for the market endpoint

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Papertrade API",
        description="""
        Simulated stock trading against a virtual cash balance.

        ## Features

        * **Trading**: Immediate-fill market orders at the submitted price
        * **Portfolio**: Holdings with weighted average cost basis
        * **History**: Append-only transaction ledger
        * **Leaderboard**: Accounts ranked by total value
        """,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.state.settings = settings
    app.state.owns_store = store is None
    app.state.store = store or LedgerStore.from_settings(settings)
    app.state.store.create_tables()
    app.state.trading_service = TradingService(app.state.store, settings)
    app.state.price_oracle = price_oracle or PriceOracle()

    # Add middleware for request tracking
    app.middleware("http")(add_request_id_middleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    # Health checks stay open for probes
    app.include_router(health_router, prefix="/api/v1", tags=["Health & Status"])

    app.include_router(
        api_router, prefix="/api/v1", dependencies=[Depends(verify_auth_token)]
    )

    @app.get(
        "/api/v1/status",
        response_model=StatusResponse,
        summary="API Status",
        description="Trading configuration and endpoint map",
    )
    def api_status(
        request: Request, token: str = Depends(verify_auth_token)
    ) -> StatusResponse:
        """Report the active trading configuration."""
        return StatusResponse.create(
            data={
                "api_version": __version__,
                "status": "operational",
                "trading": {
                    "commission_per_trade": float(settings.commission_per_trade),
                    "default_starting_balance": float(settings.default_starting_balance),
                    "order_types": ["market"],
                },
                "endpoints": {
                    "health": "/api/v1/health",
                    "accounts": "/api/v1/accounts",
                    "leaderboard": "/api/v1/leaderboard",
                    "market": "/api/v1/market/quote/{symbol}",
                    "docs": "/docs",
                },
            },
            request_id=request.state.request_id,
        )

    logger.info("FastAPI application created")
    return app
