"""API response models."""

from users_api.models.health import HealthCheckResponse

__all__ = ["HealthCheckResponse"]
