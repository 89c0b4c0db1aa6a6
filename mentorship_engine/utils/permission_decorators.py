import functools
import inspect
from http import HTTPStatus

from starlette.requests import Request

from mentorship_engine.common.fast_api_response_wrapper import api_error
from mentorship_engine.common.user_role import UserRole

# Endpoint parameters filled from the request instead of by FastAPI.
_INJECTORS = {
    "request": lambda request, user: request,
    "current_user": lambda request, user: user,
    "user_id": lambda request, user: user.user_id,
}


def _has_any_role(user, roles: list[UserRole]) -> bool:
    held = getattr(user, "roles", None) or []
    return any(role in held for role in roles)


def authenticate(roles: list[UserRole] | None = None):
    """
    Guard a controller method with the caller context set by `AuthMiddleware`.

    The wrapped endpoint answers 401 when `request.state.user` is missing and
    403 when `roles` is given and the caller holds none of them. Parameters
    named `request`, `current_user` (UserContextDto) or `user_id` (int) are
    filled in by the decorator and hidden from FastAPI, so they never show up
    in the OpenAPI schema; every other parameter is resolved by FastAPI as usual.

    Args:
        roles: Roles allowed to call the endpoint. None admits any identified user.

    Example:
        self.router.add_api_route(
            MATCH_APPROVE_ENDPOINT,
            endpoint=authenticate()(self.approve_match),
            methods=["POST"],
        )
    """

    def decorator(func):
        sig = inspect.signature(func)
        injected = [name for name in _INJECTORS if name in sig.parameters]

        exposed = [
            param
            for name, param in sig.parameters.items()
            if name not in _INJECTORS
        ]
        exposed.insert(
            0,
            inspect.Parameter(
                "request", inspect.Parameter.POSITIONAL_OR_KEYWORD, annotation=Request
            ),
        )

        @functools.wraps(func)
        async def wrapper(request: Request, *args, **kwargs):
            user = getattr(request.state, "user", None)
            if not user:
                return api_error(
                    message="Unauthorized: User context missing",
                    status_code=HTTPStatus.UNAUTHORIZED,
                )
            if roles is not None and not _has_any_role(user, roles):
                return api_error(
                    message="Forbidden: Insufficient permissions",
                    status_code=HTTPStatus.FORBIDDEN,
                )

            kwargs.pop("request", None)
            for name in injected:
                kwargs[name] = _INJECTORS[name](request, user)
            return await func(*args, **kwargs)

        wrapper.__signature__ = sig.replace(parameters=exposed)
        return wrapper

    return decorator
