"""Configuration management for the user document store."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_env_file_path() -> str:
    """Get the path to the .env file.

    Checks for ENV_FILE environment variable first, then defaults to
    .env in the common-py project directory (apps/common-py/.env).

    Returns:
        Path to the .env file
    """
    env_file = os.getenv("ENV_FILE")
    if env_file:
        return env_file

    # This file is in apps/common-py/src/users_common/config/store_config.py
    common_py_dir = Path(__file__).parent.parent.parent.parent
    return str(common_py_dir / ".env")


class StoreConfig(BaseSettings):
    """Document store settings from environment variables."""

    # Cosmos DB
    azure_cosmosdb_endpoint: str | None = None
    azure_cosmosdb_key: str | None = None

    # One database per runtime environment
    environment: str = "development"
    cosmos_db_development: str = "users-development"
    cosmos_db_test: str = "users-test"
    cosmos_db_production: str = "users"
    cosmos_users_container: str = "users"

    model_config = SettingsConfigDict(
        env_file=_get_env_file_path(),
        case_sensitive=False,
        env_file_encoding="utf-8",
        env_prefix="",
        extra="ignore",
    )

    @property
    def database_name(self) -> str:
        """Database selected by the current environment.

        Raises:
            ValueError: If the environment has no configured database
        """
        databases = {
            "development": self.cosmos_db_development,
            "test": self.cosmos_db_test,
            "production": self.cosmos_db_production,
        }
        try:
            return databases[self.environment.lower()]
        except KeyError:
            raise ValueError(f"Unknown environment {self.environment!r}; expected one of {sorted(databases)}") from None

    @property
    def is_emulator(self) -> bool:
        """True when pointed at a local Cosmos emulator."""
        return bool(self.azure_cosmosdb_endpoint) and "localhost" in self.azure_cosmosdb_endpoint.lower()


def get_store_config() -> StoreConfig:
    """Get document store configuration.

    Returns:
        StoreConfig instance
    """
    return StoreConfig()
