"""Shared FastAPI dependencies."""

from fastapi import HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..config.logging import get_logger
from ..core.price_oracle import PriceOracle
from ..services.trading import TradingService

logger = get_logger(__name__)

# Security scheme for Bearer token authentication
security = HTTPBearer()


def verify_auth_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Security(security),
) -> str:
    """
    Verify the API bearer token.

    Args:
        request: The incoming request
        credentials: The HTTP authorization credentials

    Returns:
        The token if valid

    Raises:
        HTTPException: If the token is missing from config or does not match
    """
    expected_token = request.app.state.settings.endpoint_auth_token
    if not expected_token:
        logger.error("Endpoint auth token not configured")
        raise HTTPException(status_code=500, detail="ENDPOINT_AUTH_TOKEN not configured")

    if credentials.credentials != expected_token:
        logger.warning(
            "Invalid authentication attempt",
            provided_token_length=len(credentials.credentials),
        )
        raise HTTPException(status_code=401, detail="Invalid authentication token")

    return credentials.credentials


def get_trading_service(request: Request) -> TradingService:
    """Dependency to get the application's trading service."""
    return request.app.state.trading_service


def get_price_oracle(request: Request) -> PriceOracle:
    """Dependency to get the application's price oracle."""
    return request.app.state.price_oracle
