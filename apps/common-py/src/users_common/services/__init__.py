"""Common services package."""

from users_common.services.memory_user_repository import InMemoryUserRepository
from users_common.services.user_repository import CosmosUserRepository, UserRepository

__all__ = [
    "CosmosUserRepository",
    "InMemoryUserRepository",
    "UserRepository",
]
