"""
Development entry point for the mentorship engine.

Builds the application dependencies, swaps in an authentication service that
accepts requests without identity headers, and runs the app with Uvicorn.
"""

import uvicorn
from starlette.datastructures import Headers

from mentorship_engine.authentication.authentication_service import (
    AuthenticationService,
)
from mentorship_engine.common.user_role import UserRole
from mentorship_engine.dto.user_context_dto import UserContextDto
from mentorship_engine.utils.app_dependency_builder import AppDependencyBuilder

DEV_USER_ID = 1


class DevAuthenticationService(AuthenticationService):
    """
    Authentication service used exclusively in development mode.

    Identity headers are honoured when present; otherwise every request runs as
    a fixed administrator. Never use it in production.
    """

    def authenticate_request(self, headers: Headers) -> UserContextDto:
        try:
            return super().authenticate_request(headers)
        except ValueError:
            return UserContextDto(
                user_id=DEV_USER_ID,
                roles=[UserRole.ADMIN, UserRole.MENTORSHIP],
            )


builder = AppDependencyBuilder()

# Only use this in local development environments.
builder.fast_app_factory.authentication_service = DevAuthenticationService(
    logger=builder.logger
)

app = builder.fast_app_factory.create_app()

if __name__ == "__main__":
    uvicorn.run(
        "mentorship_engine.fast_app_dev_runner:app",
        host="0.0.0.0",
        port=5001,
        reload=True,
    )
