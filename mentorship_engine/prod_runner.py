"""
ASGI entry point for the mentorship engine.

Builds every dependency via AppDependencyBuilder and exposes the FastAPI
application with API docs disabled.

Example usage:
    uvicorn mentorship_engine.prod_runner:asgi_app --host 0.0.0.0 --port 5001
"""

from mentorship_engine.utils.app_dependency_builder import AppDependencyBuilder

builder = AppDependencyBuilder()

asgi_app = builder.fast_app_factory.create_app(is_prod=True)
