"""S3-compatible blob storage (AWS S3, Cloudflare R2, Spaces, MinIO)."""

from __future__ import annotations

import logging
from typing import Optional

import boto3.session
from botocore.client import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from webdiary.storage.base import BlobStorage, StorageError, StoredBlob

logger = logging.getLogger(__name__)


class S3BlobStorage(BlobStorage):
    def __init__(
        self,
        bucket: str,
        *,
        region: str = "us-east-1",
        endpoint: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        public_url: str = "",
        key_prefix: str = "uploads",
        client=None,
    ) -> None:
        super().__init__(key_prefix=key_prefix, public_url=public_url)
        self.bucket = bucket
        self.region = region
        self.endpoint = endpoint or None
        if client is None:
            session = boto3.session.Session()
            client = session.client(
                "s3",
                region_name=region,
                endpoint_url=self.endpoint,
                aws_access_key_id=access_key_id or None,
                aws_secret_access_key=secret_access_key or None,
                config=BotoConfig(
                    signature_version="s3v4",
                    s3={"addressing_style": "path" if self.endpoint else "auto"},
                ),
            )
        self._client = client

    def url_for(self, key: str) -> str:
        if self.public_url:
            return f"{self.public_url}/{key}"
        if self.endpoint:
            host = self.endpoint.split("://", 1)[-1].rstrip("/")
            return f"https://{host}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def upload(self, data: bytes, original_name: str, mime_type: str) -> StoredBlob:
        if not self.bucket:
            raise StorageError("storage bucket not configured")
        key = self.make_key(original_name)
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=mime_type or "application/octet-stream",
                ACL="public-read",
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("S3 upload of %s failed: %s", original_name, exc)
            raise StorageError(f"Failed to upload file: {exc}") from exc
        return StoredBlob(external_ref=key, public_url=self.url_for(key))

    def delete(self, external_ref: str) -> None:
        if not self.bucket:
            raise StorageError("storage bucket not configured")
        try:
            self._client.delete_object(Bucket=self.bucket, Key=external_ref)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to delete file: {exc}") from exc
