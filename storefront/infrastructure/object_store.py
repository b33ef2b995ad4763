"""Object store providers.

Stores raw bytes by path inside a bucket. Two providers share one
interface: a local filesystem store for development and an S3-compatible
store (AWS S3, MinIO) for deployments. Both raise StorageError on any
transport failure instead of returning status flags.
"""

import asyncio
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from storefront.domain.exceptions import StorageError
from storefront.infrastructure.config import settings


class ObjectStore(ABC):
    """Abstract byte store keyed by bucket-relative path."""

    def __init__(self, bucket: str) -> None:
        """Initialize store.

        Args:
            bucket: Bucket (or top-level directory) holding the objects.
        """
        self.bucket = bucket

    @abstractmethod
    async def put(self, path: str, content: bytes, content_type: str | None = None) -> None:
        """Store content at path, replacing any existing object."""

    @abstractmethod
    async def delete(self, path: str) -> None:
        """Remove the object at path. Missing objects are not an error."""

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check whether an object is stored at path."""


class LocalObjectStore(ObjectStore):
    """Filesystem-backed store rooted at ``<base_path>/<bucket>``."""

    def __init__(self, bucket: str, base_path: str | Path | None = None) -> None:
        super().__init__(bucket)
        self.root = Path(base_path or settings.storage_path) / bucket

    def _resolve(self, path: str) -> Path:
        full_path = (self.root / path).resolve()
        if not full_path.is_relative_to(self.root.resolve()):
            raise StorageError("resolve", f"path escapes bucket: {path}")
        return full_path

    async def put(self, path: str, content: bytes, content_type: str | None = None) -> None:
        full_path = self._resolve(path)
        try:
            await asyncio.to_thread(_write_file, full_path, content)
        except OSError as e:
            raise StorageError("put", str(e)) from e

    async def delete(self, path: str) -> None:
        full_path = self._resolve(path)
        try:
            await asyncio.to_thread(full_path.unlink, missing_ok=True)
        except OSError as e:
            raise StorageError("delete", str(e)) from e

    async def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()


def _write_file(full_path: Path, content: bytes) -> None:
    full_path.parent.mkdir(parents=True, exist_ok=True)
    full_path.write_bytes(content)


class S3ObjectStore(ObjectStore):
    """S3-compatible store (AWS S3, MinIO) using boto3.

    boto3 is blocking, so every call runs in a worker thread.
    """

    def __init__(self, bucket: str, client: Any | None = None) -> None:
        """Initialize store.

        Args:
            bucket: S3 bucket name.
            client: Preconfigured boto3 S3 client; built from settings if omitted.
        """
        super().__init__(bucket)
        self.client = client or boto3.client(
            "s3",
            region_name=settings.s3_region,
            endpoint_url=settings.s3_endpoint_url,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            config=Config(
                signature_version="s3v4",
                s3={"addressing_style": "path"},
            ),
        )

    async def put(self, path: str, content: bytes, content_type: str | None = None) -> None:
        extra_args: dict[str, Any] = {"ContentLength": len(content)}
        if content_type:
            extra_args["ContentType"] = content_type
        try:
            await asyncio.to_thread(
                self.client.put_object,
                Bucket=self.bucket,
                Key=path,
                Body=content,
                **extra_args,
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError("put", str(e)) from e

    async def delete(self, path: str) -> None:
        try:
            await asyncio.to_thread(self.client.delete_object, Bucket=self.bucket, Key=path)
        except (BotoCoreError, ClientError) as e:
            raise StorageError("delete", str(e)) from e

    async def exists(self, path: str) -> bool:
        try:
            await asyncio.to_thread(self.client.head_object, Bucket=self.bucket, Key=path)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise StorageError("head", str(e)) from e
        except BotoCoreError as e:
            raise StorageError("head", str(e)) from e
        return True


def build_object_store() -> ObjectStore:
    """Create the object store selected by ``settings.storage_backend``.

    Returns:
        Configured ObjectStore.

    Raises:
        ValueError: If the backend name is unknown.
    """
    backend = settings.storage_backend.lower()
    if backend == "local":
        return LocalObjectStore(settings.storage_bucket)
    if backend == "s3":
        return S3ObjectStore(settings.storage_bucket)
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")
