"""Main FastAPI application."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from users_api.config import Settings, get_settings
from users_api.middleware import setup_exception_handlers, setup_middleware
from users_api.routes import api_router
from users_api.services import open_user_repository
from users_common.config.store_config import StoreConfig
from users_common.services.user_repository import UserRepository

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    repository: UserRepository | None = None,
    store_config: StoreConfig | None = None,
) -> FastAPI:
    """Assemble the application.

    Args:
        settings: Application settings. If None, loaded from environment.
        repository: Repository to serve from. The caller keeps ownership and
            it is not closed on shutdown. If None, one is opened at startup
            according to ``settings.storage_backend`` and closed at shutdown.
        store_config: Cosmos DB settings used when opening a repository.

    Returns:
        FastAPI application
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Handle application lifespan events."""
        logger.info(f"{settings.app_name} v{settings.app_version} started")
        logger.info(f"Environment: {settings.environment}")

        if repository is not None:
            app.state.user_repository = repository
            yield
        else:
            logger.info("Connecting to %s user store...", settings.storage_backend)
            with open_user_repository(settings, store_config) as opened:
                app.state.user_repository = opened
                logger.info("User store connected")
                yield

        logger.info(f"{settings.app_name} shutting down")

    app = FastAPI(
        title=settings.app_name,
        description="Users API - CRUD over user documents",
        version=settings.app_version,
        lifespan=lifespan,
        redirect_slashes=False,
    )
    app.state.settings = settings

    setup_middleware(app, cors_origin=settings.cors_origin, environment=settings.environment)
    setup_exception_handlers(app, cors_origin=settings.cors_origin, environment=settings.environment)

    app.include_router(api_router)
    return app


settings = get_settings()

logging.basicConfig(level=settings.log_level.upper())

app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "users_api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower(),
    )
