"""
Purpose: Raw uploaded file storage addressed by the returned URL
(in-memory; a cloud bucket implements the same BlobStore protocol).
"""

from __future__ import annotations
import uuid
from typing import Optional

from ..errors import StorageError


class InMemoryBlobStore:
    scheme = "memory://"

    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}

    def put(self, data: bytes, *, folder: str, file_name: str) -> str:
        if not data:
            raise StorageError("File upload incomplete: no data received.")
        url = f"{self.scheme}{folder.strip('/')}/{uuid.uuid4().hex}-{file_name}"
        self._blobs[url] = bytes(data)
        return url

    def get(self, url: str) -> Optional[bytes]:
        return self._blobs.get(url)

    def delete(self, url: str) -> None:
        if url not in self._blobs:
            raise StorageError(f"No stored file at {url}")
        del self._blobs[url]

    def __len__(self) -> int:
        return len(self._blobs)
