"""Error taxonomy for user persistence operations."""


class UserStoreError(Exception):
    """Base class for errors the user store can classify.

    Each subclass carries the HTTP status the API answers with.
    """

    status_code: int = 500
    default_message: str = "User store error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class MalformedUserIdError(UserStoreError):
    """Identifier does not match the document id format."""

    status_code = 400
    default_message = "Malformed user id"

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"Malformed user id: {user_id!r}")


class UserNotFoundError(UserStoreError):
    """Well-formed identifier with no matching record."""

    status_code = 404
    default_message = "User not found"

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


class DuplicateEmailError(UserStoreError):
    """Email already belongs to another user."""

    status_code = 400
    default_message = "Email already in use"

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"A user with email {email!r} already exists")


class InvalidPayloadError(UserStoreError):
    """Request body could not be read as a flat object."""

    status_code = 400
    default_message = "Request body must be a JSON object"
