"""Pytest configuration for common-py tests."""

from unittest.mock import MagicMock

import pytest

from users_common.config.store_config import StoreConfig
from users_common.infra.cosmos.cosmos_user_client import CosmosUserClient
from users_common.services.user_repository import CosmosUserRepository


@pytest.fixture
def store_config() -> StoreConfig:
    return StoreConfig(
        azure_cosmosdb_endpoint="https://example.documents.azure.com:443/",
        azure_cosmosdb_key="secret",
        environment="test",
    )


@pytest.fixture
def cosmos_client() -> MagicMock:
    """Stand-in for azure.cosmos.CosmosClient."""
    return MagicMock(name="CosmosClient")


@pytest.fixture
def database(cosmos_client: MagicMock) -> MagicMock:
    return cosmos_client.create_database_if_not_exists.return_value


@pytest.fixture
def container(database: MagicMock) -> MagicMock:
    return database.get_container_client.return_value


@pytest.fixture
def cosmos_repository(cosmos_client: MagicMock, store_config: StoreConfig) -> CosmosUserRepository:
    return CosmosUserRepository(CosmosUserClient(config=store_config, cosmos_client=cosmos_client))
