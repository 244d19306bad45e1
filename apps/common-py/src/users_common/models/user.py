"""User models and identifier helpers."""

import re
import secrets
import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from users_common.errors import MalformedUserIdError

USER_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 50
EMAIL_MIN_LENGTH = 5
EMAIL_MAX_LENGTH = 255


def is_valid_user_id(value: str) -> bool:
    """Return True if ``value`` is a 24 character hexadecimal document id."""
    return isinstance(value, str) and USER_ID_PATTERN.fullmatch(value) is not None


def ensure_valid_user_id(value: str) -> str:
    """Return ``value`` unchanged or raise MalformedUserIdError."""
    if not is_valid_user_id(value):
        raise MalformedUserIdError(value)
    return value


def new_user_id() -> str:
    """Generate a fresh user id.

    The first 8 hex digits are the creation time in seconds, so ids sort
    roughly by creation order. The remaining 16 are random.
    """
    return f"{int(time.time()) & 0xFFFFFFFF:08x}{secrets.token_hex(8)}"


class UserCreate(BaseModel):
    """Payload accepted when creating a user."""

    name: str = Field(..., min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH, description="Display name")
    email: str = Field(
        ..., min_length=EMAIL_MIN_LENGTH, max_length=EMAIL_MAX_LENGTH, description="Email address, unique per user"
    )
    country: str = Field(..., min_length=1, description="Country of residence")

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "name": "esteve",
                "email": "esteve@gmail.com",
                "country": "spain",
            }
        },
    )


class UserUpdate(BaseModel):
    """Payload accepted when updating a user. Absent fields are left untouched."""

    name: str | None = Field(None, min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    email: str | None = Field(None, min_length=EMAIL_MIN_LENGTH, max_length=EMAIL_MAX_LENGTH)
    country: str | None = Field(None, min_length=1)

    model_config = ConfigDict(extra="ignore")

    def changes(self) -> dict[str, Any]:
        """Fields supplied by the caller, excluding explicit nulls."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class User(UserCreate):
    """User entity model."""

    id: str = Field(..., description="Document id assigned on creation")

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "id": "5f43ef20c1d4a133e4628181",
                "name": "esteve",
                "email": "esteve@gmail.com",
                "country": "spain",
            }
        },
    )
