from __future__ import annotations

import abc
from urllib.parse import quote


class ObjectStore(abc.ABC):
    """Append-only artifact storage returning public references."""

    @abc.abstractmethod
    async def put(self, path: str, data: bytes, content_type: str) -> str:
        """Store ``data`` under ``path`` and return its public URL."""


def public_reference(prefix: str, scheme: str, bucket: str, path: str) -> str:
    return f"{prefix}{quote(f'{scheme}://{bucket}/{path}', safe='')}"
