"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Database
    database_url: str = "postgresql+asyncpg://storefront:storefront_dev_password@db:5432/storefront"

    # Authentication
    admin_api_key: str = "dev-admin-key-change-in-production"

    # Object storage
    storage_backend: str = "local"  # local | s3
    storage_path: str = "./media"
    storage_bucket: str = "product-images"
    storage_prefix: str = "products"
    storage_public_base_url: str = "http://localhost:8000/media"
    s3_endpoint_url: str | None = None
    s3_region: str = "us-east-1"
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None

    # Uploads
    max_image_bytes: int = 10 * 1024 * 1024
    allowed_image_extensions: str = "jpg,jpeg,png,webp,gif"

    # Remove stored images once no product references them
    purge_orphaned_images: bool = True

    # Logging
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def image_extensions(self) -> frozenset[str]:
        """Allowed upload extensions, lowercased and without dots."""
        return frozenset(
            ext.strip().lstrip(".").lower()
            for ext in self.allowed_image_extensions.split(",")
            if ext.strip()
        )


settings = Settings()
