"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Storage
    storage_backend: str = "memory"  # "memory" or "database"
    database_url: str = "postgresql+asyncpg://shoestore:shoestore_dev_password@db:5432/shoestore"

    # Inventory
    low_stock_threshold: int = 5
    admin_low_stock_threshold: int = 10

    # Listing
    default_page_size: int = 20
    max_page_size: int = 100

    # Operators (role names accepted from the upstream auth layer)
    operator_roles: list[str] = ["admin", "seller"]

    # Attribute index cache
    cache_enabled: bool = True

    # Logging
    log_level: str = "INFO"

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
