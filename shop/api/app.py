"""
FastAPI application exposing the user and order services over HTTP.

The routers call the domain services directly. Domain failures are mapped
to HTTP responses by the exception handlers registered here, all sharing the
``ErrorResponse`` body:

- InvalidArgumentError, request and model validation errors -> 400
  VALIDATION_ERROR
- NotFoundError -> 404 NOT_FOUND
- ConflictError -> 409 CONFLICT
- InvalidStateTransitionError -> 409 INVALID_STATE_TRANSITION
"""

import logging
import os
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from shop.api.responses import ErrorResponse
from shop.api.routers import orders, system, users
from shop.exceptions import (
    ConflictError,
    InvalidArgumentError,
    InvalidStateTransitionError,
    NotFoundError,
)


def setup_logging() -> None:
    """Configure logging based on environment variables"""
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    log_format = os.environ.get(
        "LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Validate log level
    numeric_level = getattr(logging, log_level, None)
    if not isinstance(numeric_level, int):
        print(f"Invalid log level: {log_level}, defaulting to INFO")
        numeric_level = logging.INFO

    logging.basicConfig(
        level=numeric_level,
        format=log_format,
        force=True,  # Override any existing configuration
    )


# Setup logging when module is imported
setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Shop API",
    description="Users and orders with an order status state machine",
    version=system.API_VERSION,
)

app.include_router(system.router, tags=["System"])
app.include_router(users.router, prefix="/users", tags=["Users"])
app.include_router(orders.router, prefix="/orders", tags=["Orders"])


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    body = ErrorResponse(
        code=code, message=message, timestamp=datetime.now(timezone.utc)
    )
    return JSONResponse(
        status_code=status_code, content=body.model_dump(mode="json")
    )


@app.exception_handler(InvalidArgumentError)
async def invalid_argument_handler(
    request: Request, exc: InvalidArgumentError
) -> JSONResponse:
    logger.info(
        "Rejected invalid request",
        extra={"path": request.url.path, "error": str(exc)},
    )
    return _error_response(400, "VALIDATION_ERROR", str(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = [
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    ]
    logger.info(
        "Rejected malformed request",
        extra={"path": request.url.path, "errors": messages},
    )
    return _error_response(400, "VALIDATION_ERROR", "; ".join(messages))


@app.exception_handler(ValidationError)
async def model_validation_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    messages = [
        str(err["msg"]).removeprefix("Value error, ") for err in exc.errors()
    ]
    logger.warning(
        "Rejected invalid model data",
        extra={"path": request.url.path, "errors": messages},
    )
    return _error_response(400, "VALIDATION_ERROR", "; ".join(messages))


@app.exception_handler(NotFoundError)
async def not_found_handler(
    request: Request, exc: NotFoundError
) -> JSONResponse:
    return _error_response(404, "NOT_FOUND", str(exc))


@app.exception_handler(ConflictError)
async def conflict_handler(
    request: Request, exc: ConflictError
) -> JSONResponse:
    return _error_response(409, "CONFLICT", str(exc))


@app.exception_handler(InvalidStateTransitionError)
async def invalid_state_transition_handler(
    request: Request, exc: InvalidStateTransitionError
) -> JSONResponse:
    return _error_response(409, "INVALID_STATE_TRANSITION", str(exc))
