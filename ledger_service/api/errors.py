"""
Exception handlers translating ledger failures into the response envelope
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..ledger import (
    LedgerError, InvalidAmountError, InsufficientFundsError,
    InvalidArgumentError, TransactionNotFoundError
)
from ..logging_config import get_logger, log_action


logger = get_logger("ledger.api")

LEDGER_ERROR_STATUS = {
    InvalidAmountError: status.HTTP_400_BAD_REQUEST,
    InsufficientFundsError: status.HTTP_400_BAD_REQUEST,
    InvalidArgumentError: status.HTTP_400_BAD_REQUEST,
    TransactionNotFoundError: status.HTTP_404_NOT_FOUND,
}


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message}
    )


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    status_code = LEDGER_ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    log_action(
        logger, "info", f"{request.method} {request.url.path} rejected: {exc}",
        action="request_rejected", resource=request.url.path,
        extra={"status": status_code, "error_type": type(exc).__name__}
    )
    return error_response(status_code, str(exc))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [".".join(str(part) for part in error["loc"]) for error in exc.errors()]
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        f"Invalid request: {', '.join(fields)}" if fields else "Invalid request"
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Unknown routes and unsupported methods both read as a missing endpoint
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        return error_response(status.HTTP_404_NOT_FOUND, "Endpoint not found")
    return error_response(exc.status_code, str(exc.detail))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LedgerError, ledger_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
