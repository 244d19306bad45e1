"""Generic base class for Cosmos DB client operations."""

import logging
from contextlib import ExitStack
from typing import Any, Generic, TypeVar

from azure.cosmos import CosmosClient, PartitionKey
from azure.cosmos.exceptions import CosmosResourceNotFoundError
from azure.identity import DefaultAzureCredential
from pydantic import BaseModel

from users_common.config.store_config import StoreConfig

logger = logging.getLogger(__name__)

COSMOS_SYSTEM_FIELDS = frozenset({"_rid", "_self", "_etag", "_attachments", "_ts"})

T = TypeVar("T", bound=BaseModel)


class BaseCosmosClient(Generic[T]):
    """Infrastructure layer: Generic base class for Cosmos DB client operations."""

    @staticmethod
    def _strip_system_fields(item: dict[str, Any]) -> dict[str, Any]:
        """Remove Cosmos DB system fields that aren't part of the model."""
        return {k: v for k, v in item.items() if k not in COSMOS_SYSTEM_FIELDS}

    def __init__(
        self,
        container_name: str,
        partition_key_path: str = "/id",
        config: StoreConfig | None = None,
        unique_key_paths: list[str] | None = None,
        cosmos_client: CosmosClient | None = None,
    ) -> None:
        """Initialize Cosmos DB client.

        Args:
            container_name: Container name
            partition_key_path: Partition key path (default: "/id")
            config: Store configuration. If None, will load from environment.
            unique_key_paths: Paths that must be unique within a logical partition
            cosmos_client: Pre-built SDK client owned by the caller. If None, one is
                created from config and closed by close().
        """
        if config is None:
            from users_common.config.store_config import get_store_config

            config = get_store_config()

        self.config = config
        self.container_name = container_name
        self.partition_key_path = partition_key_path
        self.unique_key_paths = unique_key_paths or []

        self._exit_stack = ExitStack()
        if cosmos_client is not None:
            self.client = cosmos_client
        else:
            if not config.azure_cosmosdb_endpoint:
                raise ValueError("AZURE_COSMOSDB_ENDPOINT is required")

            logger.info("Connecting to Cosmos DB at %s", config.azure_cosmosdb_endpoint)
            if config.azure_cosmosdb_key:
                # Use key-based authentication
                self.client = self._exit_stack.enter_context(
                    CosmosClient(url=config.azure_cosmosdb_endpoint, credential=config.azure_cosmosdb_key)
                )
            else:
                # Use managed identity
                credential = DefaultAzureCredential()
                self.client = self._exit_stack.enter_context(
                    CosmosClient(url=config.azure_cosmosdb_endpoint, credential=credential)
                )

        self.database = self.client.create_database_if_not_exists(id=config.database_name)
        self._ensure_container_exists()
        self.container = self.database.get_container_client(container_name)
        logger.info("Connected to Cosmos DB database '%s', container '%s'", config.database_name, container_name)

    def _ensure_container_exists(self) -> None:
        """Create the container with its partition key and unique keys if it doesn't exist."""
        options: dict[str, Any] = {
            "id": self.container_name,
            "partition_key": PartitionKey(path=self.partition_key_path),
        }
        if self.unique_key_paths:
            options["unique_key_policy"] = {"uniqueKeys": [{"paths": self.unique_key_paths}]}
        # Emulator requires provisioned throughput
        if self.config.is_emulator:
            options["offer_throughput"] = 400

        self.database.create_container_if_not_exists(**options)
        logger.info(
            "Container '%s' initialized with partition key '%s'",
            self.container_name,
            self.partition_key_path,
        )

    def create_item(self, item: T) -> dict:
        """Create an item in Cosmos DB.

        Args:
            item: Pydantic model instance to create. Must carry its partition key field.

        Returns:
            Created item as dictionary (with Cosmos system fields removed)
        """
        item_dict = item.model_dump(mode="json", by_alias=True)
        created = self.container.create_item(body=item_dict)
        logger.info("Created item %s in container %s", created["id"], self.container_name)
        return self._strip_system_fields(created)

    def read_item(self, item_id: str, partition_key: str) -> dict | None:
        """Read an item from Cosmos DB.

        Args:
            item_id: Item ID
            partition_key: Partition key value

        Returns:
            Item as dictionary (with Cosmos system fields removed), or None if not found
        """
        try:
            item = self.container.read_item(item=item_id, partition_key=partition_key)
        except CosmosResourceNotFoundError:
            logger.debug("Item %s not found in container %s", item_id, self.container_name)
            return None
        logger.debug("Read item %s from container %s", item_id, self.container_name)
        return self._strip_system_fields(item)

    def replace_item(self, item: T) -> dict:
        """Replace an item in Cosmos DB (full replace).

        Args:
            item: Pydantic model instance to replace

        Returns:
            Replaced item as dictionary (with Cosmos system fields removed)
        """
        item_dict = item.model_dump(mode="json", by_alias=True)
        replaced = self.container.replace_item(item=item_dict["id"], body=item_dict)
        logger.info("Replaced item %s in container %s", item_dict["id"], self.container_name)
        return self._strip_system_fields(replaced)

    def query_items(
        self,
        query: str,
        parameters: list[dict[str, Any]] | None = None,
        partition_key: str | None = None,
    ) -> list[dict]:
        """Query items from Cosmos DB.

        Args:
            query: SQL query string
            parameters: Query parameters
            partition_key: Optional partition key; cross-partition when omitted

        Returns:
            List of items as dictionaries
        """
        if partition_key:
            items = self.container.query_items(query=query, parameters=parameters, partition_key=partition_key)
        else:
            items = self.container.query_items(query=query, parameters=parameters, enable_cross_partition_query=True)
        results = [self._strip_system_fields(item) for item in items]
        logger.debug("Queried %d items from container %s", len(results), self.container_name)
        return results

    def delete_item(self, item_id: str, partition_key: str) -> None:
        """Delete an item from Cosmos DB.

        Raises:
            CosmosResourceNotFoundError: If the item does not exist
        """
        self.container.delete_item(item=item_id, partition_key=partition_key)
        logger.info("Deleted item %s from container %s", item_id, self.container_name)

    def close(self) -> None:
        """Close the SDK client if this instance created it."""
        self._exit_stack.close()
        logger.info("Disconnected from Cosmos DB container %s", self.container_name)
