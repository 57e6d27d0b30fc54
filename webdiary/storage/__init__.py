"""Blob storage collaborator, constructed once per app and kept in ``app.extensions``."""

from __future__ import annotations

from flask import Flask, current_app

from webdiary.storage.base import BlobStorage, StorageError, StoredBlob
from webdiary.storage.memory import InMemoryBlobStorage

EXTENSION_KEY = "blob_storage"


def build_blob_storage(app: Flask) -> BlobStorage:
    backend = (app.config.get("STORAGE_BACKEND") or "s3").lower()
    prefix = app.config.get("STORAGE_KEY_PREFIX", "uploads")
    public_url = app.config.get("STORAGE_PUBLIC_URL", "")
    if backend == "memory":
        return InMemoryBlobStorage(key_prefix=prefix, public_url=public_url)
    if backend == "s3":
        from webdiary.storage.s3 import S3BlobStorage

        if not app.config.get("STORAGE_BUCKET"):
            app.logger.warning("STORAGE_BUCKET is not set; attachment uploads will fail")
        return S3BlobStorage(
            app.config.get("STORAGE_BUCKET", ""),
            region=app.config.get("STORAGE_REGION", "us-east-1"),
            endpoint=app.config.get("STORAGE_ENDPOINT") or None,
            access_key_id=app.config.get("STORAGE_ACCESS_KEY_ID") or None,
            secret_access_key=app.config.get("STORAGE_SECRET_ACCESS_KEY") or None,
            public_url=public_url,
            key_prefix=prefix,
        )
    raise ValueError(f"Unknown STORAGE_BACKEND: {backend}")


def init_blob_storage(app: Flask, storage: BlobStorage | None = None) -> BlobStorage:
    storage = storage or build_blob_storage(app)
    app.extensions[EXTENSION_KEY] = storage
    return storage


def get_blob_storage(app: Flask | None = None) -> BlobStorage:
    app = app or current_app
    return app.extensions[EXTENSION_KEY]


__all__ = [
    "BlobStorage",
    "InMemoryBlobStorage",
    "StorageError",
    "StoredBlob",
    "build_blob_storage",
    "get_blob_storage",
    "init_blob_storage",
]
