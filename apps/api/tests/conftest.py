"""Pytest configuration and fixtures."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from users_api.config import Settings
from users_api.main import create_app
from users_common.models.user import UserCreate
from users_common.services.memory_user_repository import InMemoryUserRepository


@pytest.fixture
def settings() -> Settings:
    """Settings for a test run against the in-memory store."""
    return Settings(environment="test", storage_backend="memory")


@pytest.fixture
def repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def client(settings: Settings, repository: InMemoryUserRepository) -> Iterator[TestClient]:
    """Create a FastAPI test client with the lifespan running."""
    app = create_app(settings, repository=repository)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(repository: InMemoryUserRepository):
    """Store a user directly through the repository."""

    def _make_user(name: str, email: str, country: str):
        return repository.create_user(UserCreate(name=name, email=email, country=country))

    return _make_user
