"""Asset store gateway.

Uploads product images to the object store and hands back public
locators; removes stored images by locator. Locators have the shape
``<public_base_url>/<bucket>/<prefix>/<key>`` and the storage path is
recovered from the part after ``/<bucket>/``.
"""

import time
from uuid import uuid4

import structlog

from storefront.domain.entities import ImageUpload
from storefront.domain.exceptions import StorageError, UploadError, ValidationError
from storefront.infrastructure.config import settings
from storefront.infrastructure.object_store import ObjectStore, build_object_store

logger = structlog.get_logger()


class AssetStoreGateway:
    """Gateway between the catalog and the object store.

    The gateway owns the raw bytes; products only hold locators.
    """

    def __init__(
        self,
        store: ObjectStore,
        public_base_url: str | None = None,
        prefix: str | None = None,
        allowed_extensions: frozenset[str] | None = None,
        max_bytes: int | None = None,
    ) -> None:
        """Initialize gateway.

        Args:
            store: Object store holding the bytes.
            public_base_url: Base URL under which the bucket is served.
            prefix: Folder inside the bucket for product images.
            allowed_extensions: Accepted file extensions, lowercased.
            max_bytes: Largest accepted upload.
        """
        self.store = store
        self.public_base_url = (public_base_url or settings.storage_public_base_url).rstrip("/")
        self.prefix = (prefix if prefix is not None else settings.storage_prefix).strip("/")
        self.allowed_extensions = allowed_extensions or settings.image_extensions
        self.max_bytes = max_bytes or settings.max_image_bytes
        self._marker = f"/{store.bucket}/"

    def generate_key(self, filename: str) -> str:
        """Build a storage key for an uploaded file.

        Keys look like ``<millisecond-timestamp>-<random-token>.<ext>``;
        unique in practice, not cryptographically.

        Args:
            filename: Original file name.

        Returns:
            Storage key (without the prefix folder).
        """
        extension = ImageUpload(filename=filename, content=b"").extension
        token = uuid4().hex[:12]
        key = f"{int(time.time() * 1000)}-{token}"
        return f"{key}.{extension}" if extension else key

    def locator_for(self, path: str) -> str:
        """Public URL for a bucket-relative storage path."""
        return f"{self.public_base_url}/{self.store.bucket}/{path}"

    def path_from_locator(self, locator: str) -> str | None:
        """Recover the storage path from a locator.

        Args:
            locator: Public URL previously returned by ``upload``.

        Returns:
            Bucket-relative path, or None if the locator has another shape.
        """
        _, marker, path = (locator or "").partition(self._marker)
        path = path.split("?", 1)[0].split("#", 1)[0]
        if not marker or not path or ".." in path.split("/"):
            return None
        return path

    def check(self, upload: ImageUpload) -> None:
        """Reject files that may not be stored.

        Raises:
            ValidationError: If the extension is not allowed or the size is
                zero or above the limit.
        """
        if upload.extension not in self.allowed_extensions:
            raise ValidationError(
                "images",
                f"'{upload.filename}' is not an allowed image type "
                f"({', '.join(sorted(self.allowed_extensions))})",
            )
        self.check_size(upload.filename, upload.size)

    def check_size(self, filename: str, size: int) -> None:
        """Reject empty files and files above the size limit."""
        if size == 0:
            raise ValidationError("images", f"'{filename}' is empty")
        if size > self.max_bytes:
            raise ValidationError(
                "images",
                f"'{filename}' is larger than {self.max_bytes} bytes",
            )

    async def upload(self, upload: ImageUpload) -> str:
        """Store an image and return its public locator.

        Args:
            upload: File name and raw bytes, stored as-is.

        Returns:
            Stable public locator.

        Raises:
            ValidationError: If the file is rejected by ``check``.
            UploadError: On transport or storage failure.
        """
        self.check(upload)
        key = self.generate_key(upload.filename)
        path = f"{self.prefix}/{key}" if self.prefix else key

        try:
            await self.store.put(path, upload.content, upload.content_type)
        except StorageError as e:
            logger.warning("Image upload failed", filename=upload.filename, error=e.message)
            raise UploadError(upload.filename, e.details.get("reason", e.message)) from e

        locator = self.locator_for(path)
        logger.info("Image uploaded", path=path, size=upload.size)
        return locator

    async def remove(self, locator: str) -> bool:
        """Remove a stored image by locator.

        A locator that does not have the expected shape (malformed or
        hosted elsewhere) is skipped without error so it never blocks a
        delete flow.

        Args:
            locator: Public URL of the image.

        Returns:
            True if a removal was issued, False if the locator was skipped.

        Raises:
            StorageError: If the object store fails to remove the object.
        """
        path = self.path_from_locator(locator)
        if path is None:
            logger.debug("Skipping removal of foreign locator", locator=locator)
            return False

        await self.store.delete(path)
        logger.info("Image removed", path=path)
        return True


# Global gateway instance
_gateway: AssetStoreGateway | None = None


def get_asset_gateway() -> AssetStoreGateway:
    """Get asset store gateway singleton."""
    global _gateway
    if _gateway is None:
        _gateway = AssetStoreGateway(build_object_store())
    return _gateway
