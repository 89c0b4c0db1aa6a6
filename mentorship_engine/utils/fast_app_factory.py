import contextlib

from fastapi import FastAPI

from mentorship_engine.common.fast_api_error_handler import register_exception_handlers
from mentorship_engine.utils.auth_middleware import AuthMiddleware

API_PREFIX = "/api"
HEALTH_PATH = "/fastapi/health"


class FastAppFactory:
    """
    Assembles the FastAPI application of the mentorship engine.

    Controllers only need a `router` attribute; every router is mounted under
    `/api`. Shutdown hooks (async callables taking no argument) run when the
    server stops, e.g. `Database.close`.
    """

    def __init__(self, authentication_service, *controllers, shutdown_hooks=()):
        self.authentication_service = authentication_service
        self.controllers = controllers
        self.shutdown_hooks = tuple(shutdown_hooks)

    @contextlib.asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        yield
        for hook in self.shutdown_hooks:
            await hook()

    def create_app(self, is_prod: bool = False) -> FastAPI:
        """
        Build a new application.

        Args:
            is_prod (bool): Hide Swagger UI, ReDoc and the OpenAPI schema.

        Returns:
            FastAPI: The application with the error handlers, the authentication
                middleware, every controller router and an unauthenticated
                health check at `/fastapi/health`.
        """
        app = FastAPI(
            title="Mentorship Engine",
            docs_url=None if is_prod else "/docs",
            redoc_url=None if is_prod else "/redoc",
            openapi_url=None if is_prod else "/openapi.json",
            lifespan=self._lifespan,
        )
        register_exception_handlers(app)
        app.add_middleware(AuthMiddleware, auth_service=self.authentication_service)

        for controller in self.controllers:
            app.include_router(controller.router, prefix=API_PREFIX)

        @app.get(HEALTH_PATH)
        def health_check():
            return {"status": "ok"}

        return app
