from __future__ import annotations

from .base import ObjectStore, public_reference
from .minio_store import MinioObjectStore

__all__ = ["MinioObjectStore", "ObjectStore", "public_reference"]
