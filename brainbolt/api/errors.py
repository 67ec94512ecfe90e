"""
Exception handlers for the HTTP API.

Domain errors are mapped to status codes by their base class. Every error
body has the shape ``{"error": <kind>, "message": <text>}``; unexpected
failures get a generic message so no internal detail reaches the client.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from brainbolt.common.exceptions import (
    BaseError,
    ConflictError,
    ExhaustionError,
    ExpiredError,
    NotFoundError,
    ValidationError
)
from brainbolt.common.logger import app_logger

logger = app_logger.getChild("api.errors")

# Checked in order; the first matching base class wins
STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (ExpiredError, status.HTTP_410_GONE),
    (ExhaustionError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
)


def status_for(exc: BaseError) -> int:
    for error_class, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(kind: str, message: str) -> dict:
    return {"error": kind, "message": message}


async def domain_exception_handler(request: Request, exc: BaseError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code == status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(status_code=status_code, content=error_body("internal", "Internal server error"))

    if status_code == status.HTTP_503_SERVICE_UNAVAILABLE:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=status_code, content=error_body(exc.kind, exc.message))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle request validation errors and return a standardized response.

    Args:
        request: The incoming request
        exc: The validation exception

    Returns:
        A JSON response naming the offending fields
    """
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query"))
        problems.append(f"{location}: {error.get('msg', 'invalid value')}")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body(ValidationError.kind, "; ".join(problems) or "Invalid request")
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    kind = "not_found" if exc.status_code == status.HTTP_404_NOT_FOUND else "http_error"
    return JSONResponse(status_code=exc.status_code, content=error_body(kind, str(exc.detail)))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("internal", "Internal server error")
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BaseError, domain_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
