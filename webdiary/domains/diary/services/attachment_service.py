"""Attachment validation, parallel upload and bookkeeping."""

from __future__ import annotations

import logging
import mimetypes
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from webdiary.core.errors import NotFoundError, ValidationError
from webdiary.domains.diary.models.diary_entry import (
    ATTACHMENT_DOCUMENT,
    ATTACHMENT_PHOTO,
    Attachment,
    DiaryEntry,
)
from webdiary.extensions import db
from webdiary.storage import BlobStorage, StorageError, StoredBlob

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_EXTENSIONS = frozenset({"jpeg", "jpg", "png", "gif", "webp", "pdf", "txt", "doc", "docx"})
DEFAULT_ALLOWED_MIME_TYPES = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
        "application/pdf",
        "text/plain",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    }
)


@dataclass(frozen=True)
class IncomingFile:
    """A file received with an entry write, already read into memory."""

    filename: str
    data: bytes
    mime_type: str = ""
    display_name: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def content_type(self) -> str:
        if self.mime_type:
            return self.mime_type
        guessed, _ = mimetypes.guess_type(self.filename)
        return guessed or "application/octet-stream"


@dataclass(frozen=True)
class UploadFailure:
    filename: str
    error: str

    def to_dict(self) -> dict:
        return {"filename": self.filename, "error": self.error}


@dataclass(frozen=True)
class UploadPolicy:
    max_files: int = 10
    max_file_bytes: int = 10 * 1024 * 1024
    allowed_extensions: frozenset = DEFAULT_ALLOWED_EXTENSIONS
    allowed_mime_types: frozenset = DEFAULT_ALLOWED_MIME_TYPES
    workers: int = 4

    @classmethod
    def from_config(cls, config) -> "UploadPolicy":
        return cls(
            max_files=int(config.get("UPLOAD_MAX_FILES", 10)),
            max_file_bytes=int(config.get("UPLOAD_MAX_FILE_BYTES", 10 * 1024 * 1024)),
            allowed_extensions=frozenset(e.strip().lower() for e in config.get("UPLOAD_ALLOWED_EXTENSIONS", DEFAULT_ALLOWED_EXTENSIONS)),
            allowed_mime_types=frozenset(config.get("UPLOAD_ALLOWED_MIME_TYPES", DEFAULT_ALLOWED_MIME_TYPES)),
            workers=max(1, int(config.get("UPLOAD_WORKERS", 4))),
        )


def attachment_kind(mime_type: Optional[str]) -> str:
    return ATTACHMENT_PHOTO if (mime_type or "").startswith("image/") else ATTACHMENT_DOCUMENT


def is_allowed(file: IncomingFile, policy: UploadPolicy) -> bool:
    ext = os.path.splitext(file.filename)[1].lower().lstrip(".")
    return ext in policy.allowed_extensions or file.content_type in policy.allowed_mime_types


def validate_files(files: Sequence[IncomingFile], policy: UploadPolicy) -> None:
    """Reject the whole request before any mutation when a file is not acceptable."""
    if len(files) > policy.max_files:
        raise ValidationError(f"At most {policy.max_files} files per request", field="attachments")
    for file in files:
        if not file.filename:
            raise ValidationError("Attachment is missing a filename", field="attachments")
        if not is_allowed(file, policy):
            raise ValidationError(
                f"Invalid file type: {file.filename}. Only images, PDFs, and documents are allowed.",
                field="attachments",
            )
        if file.size > policy.max_file_bytes:
            raise ValidationError(f"File too large: {file.filename}", field="attachments")


def _upload_one(storage: BlobStorage, file: IncomingFile) -> StoredBlob:
    return storage.upload(file.data, file.filename, file.content_type)


def upload_files(
    storage: BlobStorage, files: Sequence[IncomingFile], workers: int = 4
) -> Tuple[List[Tuple[IncomingFile, StoredBlob]], List[UploadFailure]]:
    """Upload in parallel; each file succeeds or fails on its own.

    Results keep the order of ``files``.
    """
    if not files:
        return [], []
    uploaded: List[Tuple[IncomingFile, StoredBlob]] = []
    failures: List[UploadFailure] = []
    with ThreadPoolExecutor(max_workers=min(workers, len(files))) as pool:
        futures = [(file, pool.submit(_upload_one, storage, file)) for file in files]
        for file, future in futures:
            try:
                uploaded.append((file, future.result()))
            except StorageError as exc:
                logger.error("Upload of %s failed: %s", file.filename, exc)
                failures.append(UploadFailure(filename=file.filename, error=str(exc) or "Unknown upload error"))
    return uploaded, failures


def record_attachments(entry: DiaryEntry, uploaded: Iterable[Tuple[IncomingFile, StoredBlob]]) -> List[Attachment]:
    rows = []
    for file, blob in uploaded:
        row = Attachment(
            kind=attachment_kind(file.content_type),
            stored_name=blob.stored_name,
            display_name=(file.display_name or "").strip() or file.filename,
            external_ref=blob.external_ref,
            public_url=blob.public_url,
            mime_type=file.content_type,
            size_bytes=file.size,
        )
        entry.attachments.append(row)
        rows.append(row)
    return rows


def delete_blobs(storage: BlobStorage, external_refs: Iterable[str]) -> List[str]:
    """Best-effort blob removal; returns the refs that could not be deleted."""
    failed = []
    for ref in external_refs:
        if not ref:
            continue
        try:
            storage.delete(ref)
        except StorageError as exc:
            logger.warning("Could not delete blob %s: %s", ref, exc)
            failed.append(ref)
    return failed


def get_attachment(entry: DiaryEntry, attachment_id: int) -> Attachment:
    for row in entry.attachments:
        if row.id == attachment_id:
            return row
    raise NotFoundError("Attachment not found", field="attachment_id")


def rename_attachment(entry: DiaryEntry, attachment_id: int, display_name: str) -> Attachment:
    name = (display_name or "").strip()
    if not name:
        raise ValidationError("display_name is required", field="display_name")
    row = get_attachment(entry, attachment_id)
    row.display_name = name
    return row


def detach_attachments(entry: DiaryEntry, attachment_ids: Iterable[int]) -> List[str]:
    """Drop rows of ``entry`` with the given ids; unknown ids are ignored.

    Returns the blob refs to delete once the transaction has committed.
    """
    wanted = {int(i) for i in attachment_ids}
    doomed = [row for row in entry.attachments if row.id in wanted]
    for row in doomed:
        entry.attachments.remove(row)
    db.session.flush()
    return [row.external_ref for row in doomed]
