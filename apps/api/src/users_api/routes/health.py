"""Health check routes."""

import logging

from fastapi import APIRouter, Depends, Request

from users_api.models.health import HealthCheckResponse
from users_api.services import get_user_repository
from users_common.services.user_repository import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthCheckResponse)
def health_check(
    request: Request,
    repository: UserRepository = Depends(get_user_repository),
) -> HealthCheckResponse:
    """Health check endpoint.

    Returns:
        HealthCheckResponse with version information and store reachability
    """
    settings = request.app.state.settings
    try:
        repository.ping()
        reachable = True
    except Exception as e:
        logger.warning("User store health check failed: %s", e)
        reachable = False

    return HealthCheckResponse(
        status="ok" if reachable else "degraded",
        version=settings.app_version,
        environment=settings.environment,
        storage_backend=settings.storage_backend,
        storage_reachable=reachable,
        message="API is healthy" if reachable else "User store is unreachable",
    )
