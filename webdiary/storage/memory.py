"""Process-local blob storage used by tests and local development."""

from __future__ import annotations

import threading
from typing import Dict, Set

from webdiary.storage.base import BlobStorage, StorageError, StoredBlob


class InMemoryBlobStorage(BlobStorage):
    """Keeps blobs in a dict; uploads of names in ``failing_names`` raise."""

    def __init__(self, key_prefix: str = "uploads", public_url: str = "") -> None:
        super().__init__(key_prefix=key_prefix, public_url=public_url)
        self.blobs: Dict[str, bytes] = {}
        self.failing_names: Set[str] = set()
        self.failing_deletes: Set[str] = set()
        self._lock = threading.Lock()

    def upload(self, data: bytes, original_name: str, mime_type: str) -> StoredBlob:
        if original_name in self.failing_names:
            raise StorageError(f"Failed to upload file: {original_name} rejected")
        key = self.make_key(original_name)
        with self._lock:
            self.blobs[key] = bytes(data)
        return StoredBlob(external_ref=key, public_url=f"{self.public_url}/{key}" if self.public_url else key)

    def delete(self, external_ref: str) -> None:
        if external_ref in self.failing_deletes:
            raise StorageError(f"Failed to delete file: {external_ref}")
        with self._lock:
            self.blobs.pop(external_ref, None)
