"""Entry store: owner-scoped writes of diary entries and their attachments.

Entry content and its search index are committed together; attachment blobs
are uploaded after that commit, so a failed upload never rolls the entry back
and is reported in the returned ``EntryWriteResult`` instead.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import sqlalchemy as sa

from webdiary.core.errors import NotFoundError, ValidationError
from webdiary.domains.diary.models import Attachment, Category, DiaryEntry
from webdiary.domains.diary.models.diary_entry import (
    VISIBILITY_PRIVATE,
    VISIBILITIES,
)
from webdiary.domains.diary.schemas.diary_schemas import EntryPayload, EntryUpdatePayload
from webdiary.domains.diary.search import indexer
from webdiary.domains.diary.search.text import derive_body_text, normalize_tags
from webdiary.domains.diary.services import attachment_service
from webdiary.domains.diary.services.attachment_service import IncomingFile, UploadFailure, UploadPolicy
from webdiary.domains.tasks.models import Task
from webdiary.extensions import db
from webdiary.storage import BlobStorage

logger = logging.getLogger(__name__)


@dataclass
class EntryWriteResult:
    entry: DiaryEntry
    uploaded: List[Attachment] = field(default_factory=list)
    failures: List[UploadFailure] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.failures)


def new_share_token() -> str:
    return secrets.token_hex(16)


def apply_visibility(entry: DiaryEntry, visibility: Optional[str]) -> None:
    """Keep ``share_token`` present exactly when the entry is not private."""
    if visibility is None:
        return
    if visibility not in VISIBILITIES:
        raise ValidationError(f"Unknown visibility: {visibility}", field="visibility")
    entry.visibility = visibility
    if visibility == VISIBILITY_PRIVATE:
        entry.share_token = None
    elif not entry.share_token:
        entry.share_token = new_share_token()


def get_entry(owner_id: int, entry_id: int) -> DiaryEntry:
    entry = DiaryEntry.query.filter_by(id=entry_id, user_id=owner_id).first()
    if entry is None:
        raise NotFoundError("Diary entry not found", field="id")
    return entry


def get_shared_entry(share_token: str) -> DiaryEntry:
    """Unauthenticated lookup; only unlisted/public entries are reachable."""
    entry = None
    if share_token:
        entry = (
            DiaryEntry.query.filter(DiaryEntry.share_token == share_token)
            .filter(DiaryEntry.visibility != VISIBILITY_PRIVATE)
            .first()
        )
    if entry is None:
        raise NotFoundError("Shared entry not found or no longer available")
    return entry


def _owned_category(owner_id: int, category_id: Optional[int]) -> Optional[Category]:
    if category_id is None:
        return None
    category = Category.query.filter_by(id=category_id, user_id=owner_id).first()
    if category is None:
        raise NotFoundError("Category not found", field="category_id")
    return category


def _require_date(payload: EntryPayload) -> None:
    if payload.entry_date is None:
        raise ValidationError("Date is required", field="date")


def _assign_content(entry: DiaryEntry, payload: EntryPayload, category: Optional[Category]) -> None:
    entry.entry_date = payload.entry_date
    entry.title = payload.title
    entry.body_html = payload.body_html
    entry.body_text = derive_body_text(payload.body_html, payload.content)
    entry.mood = payload.mood
    entry.weather = payload.weather
    entry.tags = normalize_tags(payload.tags)
    entry.category = category


def _attach_uploads(
    entry: DiaryEntry, files: Sequence[IncomingFile], storage: BlobStorage, policy: UploadPolicy
) -> EntryWriteResult:
    uploaded, failures = attachment_service.upload_files(storage, files, workers=policy.workers)
    rows = attachment_service.record_attachments(entry, uploaded)
    if rows:
        db.session.commit()
    if failures:
        logger.warning(
            "Entry %s saved with %s of %s attachment uploads failed", entry.id, len(failures), len(files)
        )
    return EntryWriteResult(entry=entry, uploaded=rows, failures=failures)


def create_entry(
    owner_id: int,
    payload: EntryPayload,
    *,
    storage: BlobStorage,
    files: Sequence[IncomingFile] = (),
    policy: Optional[UploadPolicy] = None,
) -> EntryWriteResult:
    policy = policy or UploadPolicy()
    _require_date(payload)
    category = _owned_category(owner_id, payload.category_id)
    attachment_service.validate_files(files, policy)

    entry = DiaryEntry(user_id=owner_id, is_favorite=bool(payload.is_favorite), visibility=VISIBILITY_PRIVATE)
    _assign_content(entry, payload, category)
    apply_visibility(entry, payload.visibility)
    db.session.add(entry)
    db.session.flush()
    indexer.index_entry(entry)
    db.session.commit()

    return _attach_uploads(entry, files, storage, policy)


def update_entry(
    owner_id: int,
    entry_id: int,
    payload: EntryUpdatePayload,
    *,
    storage: BlobStorage,
    files: Sequence[IncomingFile] = (),
    policy: Optional[UploadPolicy] = None,
) -> EntryWriteResult:
    """Full replace of the content fields; visibility and favorite only when given."""
    policy = policy or UploadPolicy()
    entry = get_entry(owner_id, entry_id)
    _require_date(payload)
    category = _owned_category(owner_id, payload.category_id)
    attachment_service.validate_files(files, policy)
    for rename in payload.renamed_attachments:
        attachment_service.get_attachment(entry, rename.id)

    _assign_content(entry, payload, category)
    apply_visibility(entry, payload.visibility)
    if payload.is_favorite is not None:
        entry.is_favorite = payload.is_favorite
    for rename in payload.renamed_attachments:
        attachment_service.rename_attachment(entry, rename.id, rename.display_name)
    removed_refs = attachment_service.detach_attachments(entry, payload.deleted_attachments)
    db.session.flush()
    indexer.index_entry(entry)
    db.session.commit()

    attachment_service.delete_blobs(storage, removed_refs)
    return _attach_uploads(entry, files, storage, policy)


def delete_entry(owner_id: int, entry_id: int, *, storage: BlobStorage) -> None:
    """Delete the entry with its attachments; blob removal is best-effort."""
    entry = get_entry(owner_id, entry_id)
    refs = [row.external_ref for row in entry.attachments]
    Task.query.filter_by(user_id=owner_id, diary_entry_id=entry.id).update({Task.diary_entry_id: None})
    indexer.remove_entry(entry.id)
    db.session.delete(entry)
    db.session.commit()
    failed = attachment_service.delete_blobs(storage, refs)
    if failed:
        logger.warning("Entry %s deleted; %s blob(s) left in storage", entry_id, len(failed))


def toggle_favorite(owner_id: int, entry_id: int) -> DiaryEntry:
    """Flip ``is_favorite`` only; ``updated_at`` and content stay untouched."""
    entry = get_entry(owner_id, entry_id)
    db.session.execute(
        sa.update(DiaryEntry)
        .where(DiaryEntry.id == entry.id, DiaryEntry.user_id == owner_id)
        .values(is_favorite=sa.not_(DiaryEntry.is_favorite), updated_at=DiaryEntry.updated_at)
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    db.session.refresh(entry)
    return entry


def rename_entry_attachment(owner_id: int, entry_id: int, attachment_id: int, display_name: str) -> Attachment:
    entry = get_entry(owner_id, entry_id)
    row = attachment_service.rename_attachment(entry, attachment_id, display_name)
    db.session.commit()
    return row


def delete_entry_attachment(owner_id: int, entry_id: int, attachment_id: int, *, storage: BlobStorage) -> None:
    entry = get_entry(owner_id, entry_id)
    attachment_service.get_attachment(entry, attachment_id)
    refs = attachment_service.detach_attachments(entry, [attachment_id])
    db.session.commit()
    attachment_service.delete_blobs(storage, refs)
