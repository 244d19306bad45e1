"""Infrastructure layer for external communication."""

from users_common.infra.cosmos import BaseCosmosClient, CosmosUserClient

__all__ = [
    "BaseCosmosClient",
    "CosmosUserClient",
]
