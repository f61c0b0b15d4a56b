from __future__ import annotations

import asyncio
import logging
from io import BytesIO

from minio import Minio
from minio.error import MinioException
from urllib3.exceptions import HTTPError as TransportError

from ..config import Settings
from ..errors import ConfigurationError, StorageWriteError
from .base import ObjectStore, public_reference

logger = logging.getLogger(__name__)


class MinioObjectStore(ObjectStore):
    """S3-compatible object store backed by the MinIO client."""

    def __init__(
        self,
        client: Minio,
        bucket: str,
        public_url_prefix: str = "",
        uri_scheme: str = "gs",
    ) -> None:
        if not bucket:
            raise ConfigurationError("Storage bucket is not configured")
        self._client = client
        self._bucket = bucket
        self._prefix = public_url_prefix
        self._scheme = uri_scheme

    @classmethod
    def from_settings(cls, settings: Settings) -> "MinioObjectStore":
        try:
            client = Minio(
                settings.storage_endpoint,
                access_key=settings.storage_access_key,
                secret_key=settings.storage_secret_key,
                secure=settings.storage_secure,
            )
        except ValueError as exc:
            raise ConfigurationError(f"Invalid storage configuration: {exc}") from exc
        store = cls(
            client,
            settings.storage_bucket,
            public_url_prefix=settings.public_url_prefix,
            uri_scheme=settings.storage_uri_scheme,
        )
        logger.info("Service configured to use storage bucket %s", settings.storage_bucket)
        return store

    def public_url(self, path: str) -> str:
        return public_reference(self._prefix, self._scheme, self._bucket, path)

    async def put(self, path: str, data: bytes, content_type: str) -> str:
        try:
            await asyncio.to_thread(self._put_sync, path, data, content_type)
        except (MinioException, TransportError, OSError) as exc:
            raise StorageWriteError(f"Failed to upload {path}: {exc}") from exc
        logger.info("Uploaded artifact", extra={"path": path, "bytes": len(data)})
        return self.public_url(path)

    def _put_sync(self, path: str, data: bytes, content_type: str) -> None:
        self._client.put_object(
            self._bucket,
            path,
            BytesIO(data),
            length=len(data),
            content_type=content_type,
        )
