"""In-memory user repository for tests and local development."""

import logging
import threading

from users_common.errors import DuplicateEmailError, UserNotFoundError
from users_common.models.user import User, UserCreate, UserUpdate, ensure_valid_user_id, new_user_id
from users_common.services.user_repository import UserRepository

logger = logging.getLogger(__name__)


class InMemoryUserRepository(UserRepository):
    """Repository keeping users in a dict, with an email -> id index for uniqueness.

    Route handlers are plain functions run on FastAPI's thread pool, so writes
    hold a lock to keep each single-user operation atomic.
    """

    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._ids_by_email: dict[str, str] = {}
        self._lock = threading.Lock()

    def list_users(self) -> list[User]:
        with self._lock:
            return [self._users[user_id] for user_id in sorted(self._users)]

    def get_user(self, user_id: str) -> User:
        ensure_valid_user_id(user_id)
        user = self._users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def create_user(self, candidate: UserCreate) -> User:
        with self._lock:
            if candidate.email in self._ids_by_email:
                raise DuplicateEmailError(candidate.email)
            user = User(id=new_user_id(), **candidate.model_dump())
            # ids embed a second-resolution timestamp; regenerate on the rare clash
            while user.id in self._users:
                user = user.model_copy(update={"id": new_user_id()})
            self._users[user.id] = user
            self._ids_by_email[user.email] = user.id
        logger.info("Created user %s", user.id)
        return user

    def update_user(self, user_id: str, patch: UserUpdate) -> User:
        ensure_valid_user_id(user_id)
        with self._lock:
            existing = self._users.get(user_id)
            if existing is None:
                raise UserNotFoundError(user_id)
            updated = User.model_validate({**existing.model_dump(), **patch.changes()})
            if self._ids_by_email.get(updated.email, user_id) != user_id:
                raise DuplicateEmailError(updated.email)
            del self._ids_by_email[existing.email]
            self._ids_by_email[updated.email] = user_id
            self._users[user_id] = updated
        logger.info("Updated user %s", user_id)
        return updated

    def delete_user(self, user_id: str) -> None:
        ensure_valid_user_id(user_id)
        with self._lock:
            removed = self._users.pop(user_id, None)
            if removed is None:
                raise UserNotFoundError(user_id)
            del self._ids_by_email[removed.email]
        logger.info("Deleted user %s", user_id)

    def clear(self) -> None:
        with self._lock:
            self._users.clear()
            self._ids_by_email.clear()

    def ping(self) -> None:
        return None
