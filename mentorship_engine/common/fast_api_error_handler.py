from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from mentorship_engine.common.fast_api_response_wrapper import api_error
from mentorship_engine.common.logger import get_logger
from mentorship_engine.common.mentorship_errors import (
    CapacityExceededError,
    ConflictError,
    DuplicateError,
    NotFoundError,
    PreconditionFailedError,
)

logger = get_logger()

GENERIC_SERVER_ERROR = "Internal Server Error. Please contact support."

# First match wins: DuplicateError must precede its PreconditionFailedError base.
_STATUS_BY_ERROR = (
    (NotFoundError, HTTPStatus.NOT_FOUND),
    ((DuplicateError, CapacityExceededError, ConflictError), HTTPStatus.CONFLICT),
    (PreconditionFailedError, HTTPStatus.UNPROCESSABLE_ENTITY),
    ((ValueError, RequestValidationError), HTTPStatus.BAD_REQUEST),
    (RuntimeError, HTTPStatus.SERVICE_UNAVAILABLE),
)


def _resolve_status(exc: Exception) -> HTTPStatus:
    for error_types, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_types):
            return status
    return HTTPStatus.INTERNAL_SERVER_ERROR


def _area_of(path: str) -> str:
    """`/api/mentorship/<area>/...` -> `<area>`."""
    parts = path.strip("/").split("/")
    return parts[2] if len(parts) > 2 else "unknown"


def _client_message(exc: Exception, status: HTTPStatus) -> str:
    if status >= HTTPStatus.INTERNAL_SERVER_ERROR:
        return GENERIC_SERVER_ERROR
    if isinstance(exc, RequestValidationError):
        first_error = exc.errors()[0]
        return (
            f"Validation Error: {first_error.get('loc', [])[-1]} - "
            f"{first_error.get('msg')}"
        )
    # Engine errors name the rule that was violated.
    return str(exc)


async def global_exception_handler(request: Request, exc: Exception):
    """
    Turn any exception escaping a controller into the standard error envelope.

    Client errors are logged as warnings with their message. Server errors are
    logged with the stack trace, and the caller only gets a generic message.
    """
    status = _resolve_status(exc)
    is_server_error = status >= HTTPStatus.INTERNAL_SERVER_ERROR

    log = logger.error if is_server_error else logger.warning
    log(
        "[%s] %s on area [%s]: %s",
        "Server Error" if is_server_error else "Client Error",
        type(exc).__name__,
        _area_of(request.url.path),
        exc,
        exc_info=is_server_error,
    )

    return api_error(message=_client_message(exc, status), status_code=status)


def register_exception_handlers(app: FastAPI):
    """Route every unhandled exception and request validation error to the handler."""
    for exc_cls in (Exception, RequestValidationError):
        app.add_exception_handler(exc_cls, global_exception_handler)
