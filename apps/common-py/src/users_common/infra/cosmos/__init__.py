"""Cosmos DB infrastructure."""

from users_common.infra.cosmos.cosmos_base import BaseCosmosClient
from users_common.infra.cosmos.cosmos_user_client import CosmosUserClient, UserDocument

__all__ = ["BaseCosmosClient", "CosmosUserClient", "UserDocument"]
