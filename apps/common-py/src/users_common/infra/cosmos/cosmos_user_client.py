"""Cosmos DB client for user documents."""

import logging

from azure.cosmos import CosmosClient
from pydantic import Field

from users_common.config.store_config import StoreConfig
from users_common.infra.cosmos.cosmos_base import BaseCosmosClient
from users_common.models.user import User

logger = logging.getLogger(__name__)

# Every user shares one logical partition so the /email unique key is global.
USER_PARTITION_KEY = "user"


class UserDocument(User):
    """User as stored in Cosmos DB."""

    pk: str = Field(default=USER_PARTITION_KEY, description="Partition key")

    def to_user(self) -> User:
        return User.model_validate(self.model_dump(exclude={"pk"}))


class CosmosUserClient(BaseCosmosClient[UserDocument]):
    """Infrastructure layer: Cosmos DB client for user documents."""

    def __init__(
        self,
        config: StoreConfig | None = None,
        container_name: str | None = None,
        cosmos_client: CosmosClient | None = None,
    ) -> None:
        """Initialize Cosmos user client.

        Args:
            config: Store configuration. If None, will load from environment.
            container_name: Container name. If None, uses config.cosmos_users_container.
            cosmos_client: Pre-built SDK client, mainly for tests.
        """
        if config is None:
            from users_common.config.store_config import get_store_config

            config = get_store_config()

        super().__init__(
            container_name=container_name or config.cosmos_users_container,
            partition_key_path="/pk",
            config=config,
            unique_key_paths=["/email"],
            cosmos_client=cosmos_client,
        )

    def _get_partition_key(self) -> str:
        return USER_PARTITION_KEY
