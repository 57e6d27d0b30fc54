"""Blob storage interface for entry attachments."""

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass


class StorageError(Exception):
    """A single upload or delete failed."""


@dataclass(frozen=True)
class StoredBlob:
    external_ref: str
    public_url: str

    @property
    def stored_name(self) -> str:
        return self.external_ref.rsplit("/", 1)[-1]


class BlobStorage:
    """Upload/delete of attachment bytes; implementations raise ``StorageError``."""

    def __init__(self, key_prefix: str = "uploads", public_url: str = "") -> None:
        self.key_prefix = key_prefix.strip("/")
        self.public_url = public_url.rstrip("/")

    def make_key(self, original_name: str) -> str:
        _, ext = os.path.splitext(original_name or "")
        name = f"{uuid.uuid4().hex}{ext.lower()}"
        return f"{self.key_prefix}/{name}" if self.key_prefix else name

    def upload(self, data: bytes, original_name: str, mime_type: str) -> StoredBlob:
        raise NotImplementedError

    def delete(self, external_ref: str) -> None:
        raise NotImplementedError
