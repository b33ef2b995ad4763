"""Tests for application settings."""

import pytest

from storefront.infrastructure.config import Settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self) -> None:
        """Defaults match the local development setup."""
        settings = Settings(_env_file=None)
        assert settings.storage_backend == "local"
        assert settings.storage_bucket == "product-images"
        assert settings.storage_prefix == "products"
        assert settings.purge_orphaned_images is True

    def test_image_extensions_normalized(self) -> None:
        """Extensions are lowercased, stripped of dots and blanks."""
        settings = Settings(_env_file=None, allowed_image_extensions=" JPG, .png ,,webp")
        assert settings.image_extensions == frozenset({"jpg", "png", "webp"})

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Environment variables override defaults."""
        monkeypatch.setenv("STORAGE_BACKEND", "s3")
        monkeypatch.setenv("MAX_IMAGE_BYTES", "2048")
        monkeypatch.setenv("PURGE_ORPHANED_IMAGES", "false")

        settings = Settings(_env_file=None)

        assert settings.storage_backend == "s3"
        assert settings.max_image_bytes == 2048
        assert settings.purge_orphaned_images is False
