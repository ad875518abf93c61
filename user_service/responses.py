"""Centralized responder: every outcome leaves through this module.

Success bodies are built with ``ok``; failures are raised as ``ServiceError``
anywhere in the request pipeline and turned into ``ErrorEnvelope`` responses
by the exception handlers registered in ``register_exception_handlers``.
"""

from typing import Any, TypeVar

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from user_service.config import settings
from user_service.logger import get_logger, log_exception
from user_service.schemas.base import Envelope, ErrorEnvelope
from user_service.utils.exceptions import ErrorKind, ServiceError

logger = get_logger(__name__)

T = TypeVar("T")

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.AUTH_FAILED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.UNKNOWN: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_KIND_BY_STATUS: dict[int, ErrorKind] = {
    400: ErrorKind.VALIDATION_FAILED,
    422: ErrorKind.VALIDATION_FAILED,
    401: ErrorKind.AUTH_FAILED,
    403: ErrorKind.AUTH_FAILED,
    404: ErrorKind.NOT_FOUND,
    405: ErrorKind.NOT_FOUND,
    409: ErrorKind.CONFLICT,
}

ROUTE_NOT_FOUND = "Route not found"
GENERIC_ERROR = "An internal server error occurred. Please try again later."


def ok(data: T, message: str = "success") -> Envelope[T]:
    return Envelope(code=status.HTTP_200_OK, message=message, data=data)


def error_response(exc: ServiceError) -> JSONResponse:
    """Render a ``ServiceError`` as the uniform failure envelope."""
    status_code = STATUS_BY_KIND[exc.kind]
    body = ErrorEnvelope(code=status_code, message=exc.message, errors=exc.errors)

    headers = None
    if exc.kind is ErrorKind.AUTH_FAILED:
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


def _field_name(loc: tuple[Any, ...]) -> str:
    # ("body", "name") -> "name"; ("query", "order") -> "order"
    parts = [str(part) for part in loc[1:]] if len(loc) > 1 else [str(part) for part in loc]
    return ".".join(parts) or "body"


def validation_errors_from(exc: RequestValidationError) -> dict[str, str]:
    """Collapse framework validation errors to one message per field."""
    errors: dict[str, str] = {}
    for error in exc.errors():
        errors.setdefault(_field_name(tuple(error.get("loc", ()))), str(error.get("msg", "Invalid value")))
    return errors


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    logger.info(
        "Request rejected",
        kind=exc.kind.value,
        reason=exc.reason.value if exc.reason else None,
        fields=sorted(exc.errors) if exc.errors else None,
    )
    return error_response(exc)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = validation_errors_from(exc)
    return await service_error_handler(
        request,
        ServiceError(ErrorKind.VALIDATION_FAILED, "Validation failed", errors=errors),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    kind = _KIND_BY_STATUS.get(exc.status_code, ErrorKind.UNKNOWN)
    if kind is ErrorKind.NOT_FOUND:
        message = ROUTE_NOT_FOUND
    elif kind is ErrorKind.UNKNOWN:
        message = GENERIC_ERROR
    else:
        message = str(exc.detail)
    return await service_error_handler(request, ServiceError(kind, message))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Report anything unexpected as an unknown error without leaking internals."""
    log_exception(logger, exc, "Unhandled error while processing request")

    # Only show exception details in DEBUG mode
    message = str(exc) if settings.debug else GENERIC_ERROR
    response = error_response(ServiceError(ErrorKind.UNKNOWN, message))

    request_id = structlog.contextvars.get_contextvars().get("request_id")
    if request_id:
        response.headers["X-Request-ID"] = request_id
    return response


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
