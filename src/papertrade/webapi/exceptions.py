"""Exception handlers mapping trading errors onto HTTP responses."""

from typing import Dict, Type

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..config.logging import get_logger
from ..core.errors import (
    AccountExists,
    AccountNotFound,
    ConcurrencyConflict,
    InsufficientFunds,
    InsufficientShares,
    InvalidOrder,
    NoPosition,
    QuoteUnavailable,
    StorageFailure,
    TradingError,
)
from .models.responses import ErrorResponse

logger = get_logger(__name__)

STATUS_CODES: Dict[Type[TradingError], int] = {
    InvalidOrder: 400,
    InsufficientFunds: 400,
    NoPosition: 400,
    InsufficientShares: 400,
    AccountNotFound: 404,
    AccountExists: 409,
    ConcurrencyConflict: 409,
    QuoteUnavailable: 502,
    StorageFailure: 503,
}


def status_code_for(exc: TradingError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in STATUS_CODES:
            return STATUS_CODES[error_type]
    return 500


async def trading_exception_handler(request: Request, exc: TradingError) -> JSONResponse:
    """Handle trading engine errors."""
    request_id = getattr(request.state, "request_id", None)
    status_code = status_code_for(exc)

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "Trading error occurred",
        exception_type=type(exc).__name__,
        code=exc.code,
        message=exc.message,
        status_code=status_code,
        details=exc.details,
        request_id=request_id,
        path=request.url.path,
        method=request.method,
    )

    error_response = ErrorResponse(
        success=False,
        error={
            "type": type(exc).__name__,
            "code": exc.code,
            "message": exc.message,
            "details": exc.details,
            "status_code": status_code,
        },
        request_id=request_id,
    )

    return JSONResponse(status_code=status_code, content=error_response.model_dump())


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request body and parameter validation errors."""
    request_id = getattr(request.state, "request_id", None)

    field_errors = {}
    for error in exc.errors():
        field_path = ".".join(str(loc) for loc in error["loc"])
        field_errors[field_path] = error["msg"]

    logger.warning(
        "Validation error occurred",
        field_errors=field_errors,
        request_id=request_id,
        path=request.url.path,
        method=request.method,
    )

    error_response = ErrorResponse(
        success=False,
        error={
            "type": "ValidationError",
            "message": "Request validation failed",
            "details": {"field_errors": field_errors},
            "status_code": 422,
        },
        request_id=request_id,
    )

    return JSONResponse(status_code=422, content=error_response.model_dump())


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Handle HTTP exceptions raised by routes and security dependencies."""
    request_id = getattr(request.state, "request_id", None)

    logger.warning(
        "HTTP exception occurred",
        status_code=exc.status_code,
        detail=exc.detail,
        request_id=request_id,
        path=request.url.path,
        method=request.method,
    )

    error_response = ErrorResponse(
        success=False,
        error={
            "type": "HTTPException",
            "message": str(exc.detail),
            "status_code": exc.status_code,
        },
        request_id=request_id,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response.model_dump(),
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    request_id = getattr(request.state, "request_id", None)

    logger.error(
        "Unexpected exception occurred",
        exception_type=type(exc).__name__,
        message=str(exc),
        request_id=request_id,
        path=request.url.path,
        method=request.method,
        exc_info=True,
    )

    # Don't expose internal error details
    error_response = ErrorResponse(
        success=False,
        error={
            "type": "InternalServerError",
            "message": "An unexpected error occurred",
            "status_code": 500,
        },
        request_id=request_id,
    )

    return JSONResponse(status_code=500, content=error_response.model_dump())


def setup_exception_handlers(app):
    """Register exception handlers with FastAPI app."""
    app.add_exception_handler(TradingError, trading_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info("Exception handlers registered")
