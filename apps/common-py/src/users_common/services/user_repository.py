"""User repository with Cosmos DB implementation."""

import logging
from abc import ABC, abstractmethod

from azure.cosmos.exceptions import CosmosResourceExistsError, CosmosResourceNotFoundError

from users_common.errors import DuplicateEmailError, UserNotFoundError
from users_common.infra.cosmos.cosmos_user_client import CosmosUserClient, UserDocument
from users_common.models.user import User, UserCreate, UserUpdate, ensure_valid_user_id, new_user_id

logger = logging.getLogger(__name__)


class UserRepository(ABC):
    """Abstract interface for user persistence.

    Every method that takes an id raises MalformedUserIdError when the id is
    not a 24 character hex string, before touching the store.
    """

    @abstractmethod
    def list_users(self) -> list[User]:
        """List all users, ordered by id."""
        pass

    @abstractmethod
    def get_user(self, user_id: str) -> User:
        """Get a user by ID.

        Raises:
            MalformedUserIdError: If the id is not well-formed
            UserNotFoundError: If no user has this id
        """
        pass

    @abstractmethod
    def create_user(self, candidate: UserCreate) -> User:
        """Store a new user under a freshly generated id.

        Raises:
            DuplicateEmailError: If the email is already taken
        """
        pass

    @abstractmethod
    def update_user(self, user_id: str, patch: UserUpdate) -> User:
        """Replace the fields present in ``patch`` and return the stored user.

        Raises:
            MalformedUserIdError: If the id is not well-formed
            UserNotFoundError: If no user has this id
            DuplicateEmailError: If the new email belongs to another user
        """
        pass

    @abstractmethod
    def delete_user(self, user_id: str) -> None:
        """Delete a user.

        Raises:
            MalformedUserIdError: If the id is not well-formed
            UserNotFoundError: If no user has this id
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Delete every user."""
        pass

    @abstractmethod
    def ping(self) -> None:
        """Raise if the backing store is unreachable."""
        pass

    def close(self) -> None:
        """Release the store connection."""


class CosmosUserRepository(UserRepository):
    """Cosmos DB implementation of UserRepository."""

    def __init__(self, client: CosmosUserClient | None = None) -> None:
        """Initialize Cosmos DB user repository.

        Args:
            client: Cosmos user client. If None, creates a new one from environment config.
        """
        self.client = client or CosmosUserClient()

    def list_users(self) -> list[User]:
        query = "SELECT * FROM c WHERE c.pk = @pk ORDER BY c.id"
        parameters = [{"name": "@pk", "value": self.client._get_partition_key()}]
        items = self.client.query_items(query, parameters=parameters, partition_key=self.client._get_partition_key())
        return [UserDocument.model_validate(item).to_user() for item in items]

    def get_user(self, user_id: str) -> User:
        ensure_valid_user_id(user_id)
        item = self.client.read_item(item_id=user_id, partition_key=self.client._get_partition_key())
        if item is None:
            raise UserNotFoundError(user_id)
        return UserDocument.model_validate(item).to_user()

    def create_user(self, candidate: UserCreate) -> User:
        document = UserDocument(id=new_user_id(), **candidate.model_dump())
        try:
            created = self.client.create_item(document)
        except CosmosResourceExistsError:
            # Unique key violation on /email (id collisions are not expected)
            logger.info("Rejected user with duplicate email %s", candidate.email)
            raise DuplicateEmailError(candidate.email) from None
        return UserDocument.model_validate(created).to_user()

    def update_user(self, user_id: str, patch: UserUpdate) -> User:
        ensure_valid_user_id(user_id)
        existing = self.client.read_item(item_id=user_id, partition_key=self.client._get_partition_key())
        if existing is None:
            raise UserNotFoundError(user_id)

        document = UserDocument.model_validate({**existing, **patch.changes()})
        try:
            replaced = self.client.replace_item(document)
        except CosmosResourceNotFoundError:
            # Deleted between the read and the replace
            raise UserNotFoundError(user_id) from None
        except CosmosResourceExistsError:
            logger.info("Rejected update of user %s to duplicate email %s", user_id, document.email)
            raise DuplicateEmailError(document.email) from None
        return UserDocument.model_validate(replaced).to_user()

    def delete_user(self, user_id: str) -> None:
        ensure_valid_user_id(user_id)
        try:
            self.client.delete_item(item_id=user_id, partition_key=self.client._get_partition_key())
        except CosmosResourceNotFoundError:
            raise UserNotFoundError(user_id) from None

    def clear(self) -> None:
        partition_key = self.client._get_partition_key()
        items = self.client.query_items(
            "SELECT c.id FROM c WHERE c.pk = @pk",
            parameters=[{"name": "@pk", "value": partition_key}],
            partition_key=partition_key,
        )
        for item in items:
            self.client.delete_item(item_id=item["id"], partition_key=partition_key)
        logger.info("Removed %d users", len(items))

    def ping(self) -> None:
        self.client.container.read()

    def close(self) -> None:
        self.client.close()
