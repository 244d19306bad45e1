"""User API routes."""

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from users_api.services import get_user_repository
from users_common.errors import InvalidPayloadError
from users_common.models.user import User, UserCreate, UserUpdate
from users_common.services.user_repository import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"], redirect_slashes=False)

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_payload(request: Request) -> dict[str, Any]:
    """Read a JSON or URL-encoded request body as a flat dict.

    An empty body reads as an empty dict.

    Raises:
        InvalidPayloadError: If the body is not a JSON object
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}

    body = await request.body()
    if not body.strip():
        return {}
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidPayloadError(f"Request body is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise InvalidPayloadError()
    return payload


@router.get("", response_model=list[User])
@router.get("/", response_model=list[User], include_in_schema=False)
def list_users(repository: UserRepository = Depends(get_user_repository)) -> list[User]:
    return repository.list_users()


@router.post("", response_model=User)
@router.post("/", response_model=User, include_in_schema=False)
def create_user(
    payload: dict[str, Any] = Depends(read_payload),
    repository: UserRepository = Depends(get_user_repository),
) -> User:
    """Create a user and return it with its assigned id."""
    candidate = UserCreate.model_validate(payload)
    return repository.create_user(candidate)


@router.get("/{user_id}", response_model=User)
def get_user(user_id: str, repository: UserRepository = Depends(get_user_repository)) -> User:
    return repository.get_user(user_id)


@router.put("/{user_id}", response_model=User)
def update_user(
    user_id: str,
    payload: dict[str, Any] = Depends(read_payload),
    repository: UserRepository = Depends(get_user_repository),
) -> User:
    """Replace the supplied fields of an existing user."""
    patch = UserUpdate.model_validate(payload)
    return repository.update_user(user_id, patch)


@router.delete("/{user_id}", response_class=PlainTextResponse)
def delete_user(user_id: str, repository: UserRepository = Depends(get_user_repository)) -> str:
    repository.delete_user(user_id)
    return f"User {user_id} deleted"
