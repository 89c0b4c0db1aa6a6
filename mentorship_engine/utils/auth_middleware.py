from http import HTTPStatus

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from mentorship_engine.common.fast_api_response_wrapper import api_error

# Paths reachable without identity headers.
PUBLIC_PATHS = frozenset({"/fastapi/health", "/docs", "/redoc", "/openapi.json"})


def _rejection(error: Exception):
    # Malformed headers are the caller's fault; anything else is not explained.
    if isinstance(error, ValueError):
        return api_error(message=str(error), status_code=HTTPStatus.BAD_REQUEST)
    return api_error(message="Authentication failed", status_code=HTTPStatus.FORBIDDEN)


class AuthMiddleware(BaseHTTPMiddleware):
    """
    Resolves the caller of every non-public request into `request.state.user`.

    `auth_service.authenticate_request(headers)` turns the gateway's identity
    headers into a UserContextDto; role checks happen later, in the
    `authenticate` decorator of each endpoint. A ValueError from the service
    is answered with 400 and its message, any other failure with a bare 403.

    Usage:
        app.add_middleware(AuthMiddleware, auth_service=authentication_service)
    """

    def __init__(self, app, auth_service):
        super().__init__(app)
        self.auth_service = auth_service

    async def dispatch(self, request: Request, call_next):
        if request.url.path not in PUBLIC_PATHS:
            try:
                request.state.user = self.auth_service.authenticate_request(
                    request.headers
                )
            except Exception as e:
                return _rejection(e)

        return await call_next(request)
