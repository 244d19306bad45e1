"""Repository construction and dependency injection."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import Request

from users_api.config import Settings
from users_common.config.store_config import StoreConfig, get_store_config
from users_common.infra.cosmos.cosmos_user_client import CosmosUserClient
from users_common.services.memory_user_repository import InMemoryUserRepository
from users_common.services.user_repository import CosmosUserRepository, UserRepository

logger = logging.getLogger(__name__)


def build_user_repository(settings: Settings, store_config: StoreConfig | None = None) -> UserRepository:
    """Create the repository selected by ``settings.storage_backend``.

    Args:
        settings: Application settings
        store_config: Cosmos DB settings. If None, loaded from environment.

    Returns:
        UserRepository instance
    """
    if settings.storage_backend == "memory":
        logger.info("Using in-memory user repository")
        return InMemoryUserRepository()

    if store_config is None:
        store_config = get_store_config()
    # The app environment picks the database
    store_config = store_config.model_copy(update={"environment": settings.environment})
    logger.info("Using Cosmos DB user repository (database '%s')", store_config.database_name)
    return CosmosUserRepository(CosmosUserClient(config=store_config))


@contextmanager
def open_user_repository(settings: Settings, store_config: StoreConfig | None = None) -> Iterator[UserRepository]:
    """Open a repository for the lifetime of the block and close it afterwards."""
    try:
        repository = build_user_repository(settings, store_config)
    except Exception:
        logger.error("Failed to connect to the user store", exc_info=True)
        raise
    try:
        yield repository
    finally:
        repository.close()
        logger.info("User store connection closed")


def get_user_repository(request: Request) -> UserRepository:
    """FastAPI dependency returning the repository owned by the application."""
    return request.app.state.user_repository
