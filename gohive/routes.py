"""
Application factories for the gateway and the three backing services.

Every app gets the same error envelope and the same interceptor chain;
the gateway additionally rate limits and guards JSON bodies.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from gohive import __version__
from gohive.api.gateway_routes import router as gateway_router
from gohive.api.mentor_routes import router as mentor_router
from gohive.api.post_routes import router as post_router
from gohive.api.system_routes import build_health_router
from gohive.api.user_routes import router as user_router
from gohive.errors import register_error_handlers
from gohive.logging_config import logger
from gohive.middleware import build_middleware_stack
from gohive.redis_client import close_redis_client
from gohive.routing.mapper import RouteTable, build_default_routes
from gohive.services.conversation_store import ConversationStore
from gohive.settings import Settings, settings


@asynccontextmanager
async def _redis_lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("%s starting", app.title)
    try:
        yield
    finally:
        await close_redis_client()
        logger.info("%s stopped", app.title)


def _base_app(
    title: str,
    service_name: str,
    app_settings: Settings,
    *,
    rate_limit: bool = False,
    json_guard: bool = False,
) -> FastAPI:
    app = FastAPI(
        title=title,
        version=__version__,
        lifespan=_redis_lifespan,
        middleware=build_middleware_stack(
            app_settings, rate_limit=rate_limit, json_guard=json_guard
        ),
    )
    register_error_handlers(app)
    app.include_router(build_health_router(service_name))
    return app


def create_gateway_app(
    app_settings: Optional[Settings] = None,
    *,
    route_table: Optional[RouteTable] = None,
) -> FastAPI:
    app_settings = app_settings or settings
    app = _base_app(
        "GoHive Gateway", "gateway", app_settings, rate_limit=True, json_guard=True
    )
    app.state.route_table = route_table or build_default_routes(app_settings)
    # The catch-all route has to come after /health.
    app.include_router(gateway_router)
    return app


def create_user_app(app_settings: Optional[Settings] = None) -> FastAPI:
    app = _base_app("GoHive User Service", "users", app_settings or settings)
    app.include_router(user_router)
    return app


def create_post_app(app_settings: Optional[Settings] = None) -> FastAPI:
    app = _base_app("GoHive Post Service", "posts", app_settings or settings)
    app.include_router(post_router)
    return app


def create_mentor_app(app_settings: Optional[Settings] = None) -> FastAPI:
    app = _base_app("GoHive Mentor Service", "mentor", app_settings or settings)
    app.state.conversation_store = ConversationStore()
    app.include_router(mentor_router)
    return app


APP_FACTORIES = {
    "gateway": create_gateway_app,
    "users": create_user_app,
    "posts": create_post_app,
    "mentor": create_mentor_app,
}


__all__ = [
    "APP_FACTORIES",
    "create_gateway_app",
    "create_mentor_app",
    "create_post_app",
    "create_user_app",
]
