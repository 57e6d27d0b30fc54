"""Entry store: validation, share tokens, favorites, attachments, deletes."""

from __future__ import annotations

from datetime import date

import pytest
import sqlalchemy as sa

pytestmark = pytest.mark.integration

from webdiary.core.errors import NotFoundError, ValidationError
from webdiary.domains.diary.models import Attachment, DiaryEntry
from webdiary.domains.diary.schemas.diary_schemas import (
    AttachmentRename,
    EntryPayload,
    EntryUpdatePayload,
)
from webdiary.domains.diary.services import category_service, entry_service
from webdiary.domains.diary.services.attachment_service import IncomingFile, UploadPolicy
from webdiary.domains.tasks.models import Task
from webdiary.domains.tasks.services import task_service
from webdiary.extensions import db


def _files(*names):
    mime = {"jpg": "image/jpeg", "pdf": "application/pdf", "txt": "text/plain"}
    return [IncomingFile(filename=n, data=b"data-" + n.encode(), mime_type=mime[n.rsplit(".", 1)[1]]) for n in names]


def _update(entry, **fields):
    fields.setdefault("date", entry.entry_date)
    return EntryUpdatePayload(**fields)


# ==================== Create ====================


def test_create_requires_date(app, user, storage):
    with pytest.raises(ValidationError) as exc:
        entry_service.create_entry(user.id, EntryPayload(title="no date"), storage=storage)
    assert exc.value.field == "date"
    assert DiaryEntry.query.count() == 0


def test_create_derives_body_text_from_html(app, user, make_entry):
    entry = make_entry(user, title="t", body_html="<p>Hello <em>there</em></p>", content="ignored")
    assert entry.body_text == "Hello there"
    assert entry.body_html == "<p>Hello <em>there</em></p>"


def test_create_uses_legacy_content_without_html(app, user, make_entry):
    entry = make_entry(user, content="plain words", mood="happy", weather="sunny", tags=["a", "b"])
    assert entry.body_text == "plain words"
    assert entry.tags == "a, b"
    assert entry.mood == "happy"
    assert entry.weather == "sunny"
    assert entry.visibility == "private"
    assert entry.share_token is None


def test_create_rejects_foreign_category(app, user, other_user, storage):
    foreign = category_service.create_category(other_user.id, "Work")
    with pytest.raises(NotFoundError):
        entry_service.create_entry(
            user.id, EntryPayload(date=date(2024, 1, 1), category_id=foreign.id), storage=storage
        )
    assert DiaryEntry.query.count() == 0


def test_create_with_owned_category(app, user, make_entry):
    category = category_service.create_category(user.id, "Travel")
    entry = make_entry(user, category_id=category.id)
    assert entry.category_id == category.id
    assert entry.category.name == "Travel"


# ==================== Share tokens ====================


def test_public_create_generates_share_token(app, user, make_entry):
    entry = make_entry(user, visibility="public")
    assert entry.share_token and len(entry.share_token) == 32


def test_share_token_lifecycle(app, user, storage, make_entry):
    entry = make_entry(user, title="shared")

    entry_service.update_entry(user.id, entry.id, _update(entry, title="shared", visibility="unlisted"), storage=storage)
    token = entry.share_token
    assert token

    entry_service.update_entry(user.id, entry.id, _update(entry, title="edited", visibility="public"), storage=storage)
    assert entry.share_token == token

    entry_service.update_entry(user.id, entry.id, _update(entry, title="no visibility"), storage=storage)
    assert entry.visibility == "public"
    assert entry.share_token == token

    entry_service.update_entry(user.id, entry.id, _update(entry, visibility="private"), storage=storage)
    assert entry.share_token is None
    with pytest.raises(NotFoundError):
        entry_service.get_shared_entry(token)

    entry_service.update_entry(user.id, entry.id, _update(entry, visibility="unlisted"), storage=storage)
    assert entry.share_token and entry.share_token != token


def test_get_shared_entry_bypasses_owner(app, user, make_entry):
    entry = make_entry(user, title="hello world", visibility="unlisted")
    assert entry_service.get_shared_entry(entry.share_token).id == entry.id
    with pytest.raises(NotFoundError):
        entry_service.get_shared_entry("nope")


# ==================== Update / ownership ====================


def test_update_is_full_replace_of_content(app, user, storage, make_entry):
    entry = make_entry(user, title="t", content="body", mood="sad", weather="rainy", tags="x")
    entry_service.update_entry(user.id, entry.id, _update(entry, title="new"), storage=storage)
    assert entry.title == "new"
    assert entry.body_text == ""
    assert entry.mood is None
    assert entry.weather is None
    assert entry.tags is None


def test_update_of_foreign_entry_is_not_found(app, user, other_user, storage, make_entry):
    entry = make_entry(user, title="mine")
    with pytest.raises(NotFoundError):
        entry_service.update_entry(other_user.id, entry.id, _update(entry, title="stolen"), storage=storage)
    assert entry_service.get_entry(user.id, entry.id).title == "mine"


def test_get_entry_is_owner_scoped(app, user, other_user, make_entry):
    entry = make_entry(user)
    with pytest.raises(NotFoundError):
        entry_service.get_entry(other_user.id, entry.id)


# ==================== Favorite ====================


def test_toggle_favorite_round_trip_leaves_other_fields(app, user, make_entry):
    entry = make_entry(user, title="fav", content="body", mood="calm", tags="t", visibility="public")
    snapshot = {
        col: getattr(entry, col)
        for col in ("title", "body_text", "mood", "tags", "visibility", "share_token", "entry_date", "updated_at")
    }

    first = entry_service.toggle_favorite(user.id, entry.id)
    assert first.is_favorite is True
    second = entry_service.toggle_favorite(user.id, entry.id)
    assert second.is_favorite is False

    db.session.expire_all()
    reloaded = entry_service.get_entry(user.id, entry.id)
    assert reloaded.is_favorite is False
    for col, value in snapshot.items():
        assert getattr(reloaded, col) == value


def test_toggle_favorite_flips_stored_value(app, user, make_entry):
    entry = make_entry(user)
    # another request marks it favorite; this session still holds False
    db.session.execute(
        sa.update(DiaryEntry)
        .where(DiaryEntry.id == entry.id)
        .values(is_favorite=True)
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    assert entry.is_favorite is False

    toggled = entry_service.toggle_favorite(user.id, entry.id)
    assert toggled.is_favorite is False


def test_toggle_favorite_of_foreign_entry(app, user, other_user, make_entry):
    entry = make_entry(user)
    with pytest.raises(NotFoundError):
        entry_service.toggle_favorite(other_user.id, entry.id)


# ==================== Attachments ====================


def test_partial_upload_failure_keeps_entry_and_successes(app, user, storage):
    storage.failing_names = {"broken.pdf"}
    files = _files("one.jpg", "broken.pdf", "two.txt")

    result = entry_service.create_entry(
        user.id, EntryPayload(date=date(2024, 2, 1), title="with files"), storage=storage, files=files
    )

    assert result.partial
    assert [f.filename for f in result.failures] == ["broken.pdf"]
    assert len(result.uploaded) == 2

    db.session.expire_all()
    entry = entry_service.get_entry(user.id, result.entry.id)
    assert sorted(a.display_name for a in entry.attachments) == ["one.jpg", "two.txt"]
    assert len(storage.blobs) == 2


def test_attachment_rows_record_kind_and_blob(app, user, storage):
    files = [IncomingFile(filename="pic.jpg", data=b"123", mime_type="image/jpeg", display_name="Holiday")]
    result = entry_service.create_entry(
        user.id, EntryPayload(date=date(2024, 2, 1)), storage=storage, files=files
    )
    row = result.uploaded[0]
    assert row.kind == "photo"
    assert row.display_name == "Holiday"
    assert row.size_bytes == 3
    assert row.external_ref in storage.blobs
    assert row.external_ref.startswith("uploads/")
    assert row.stored_name.endswith(".jpg")
    assert row.public_url == f"https://files.test/{row.external_ref}"


def test_disallowed_file_rejects_before_any_write(app, user, storage):
    bad = IncomingFile(filename="run.exe", data=b"MZ", mime_type="application/x-msdownload")
    with pytest.raises(ValidationError):
        entry_service.create_entry(
            user.id, EntryPayload(date=date(2024, 2, 1)), storage=storage, files=_files("ok.jpg") + [bad]
        )
    assert DiaryEntry.query.count() == 0
    assert storage.blobs == {}


def test_too_many_files_rejected(app, user, storage):
    policy = UploadPolicy(max_files=2)
    with pytest.raises(ValidationError):
        entry_service.create_entry(
            user.id,
            EntryPayload(date=date(2024, 2, 1)),
            storage=storage,
            files=_files("a.jpg", "b.jpg", "c.jpg"),
            policy=policy,
        )


def test_update_renames_deletes_and_adds_attachments(app, user, storage):
    created = entry_service.create_entry(
        user.id, EntryPayload(date=date(2024, 2, 1)), storage=storage, files=_files("a.jpg", "b.pdf")
    )
    entry = created.entry
    a, b = entry.attachments
    b_ref = b.external_ref

    payload = _update(
        entry,
        renamed_attachments=[AttachmentRename(id=a.id, display_name="Renamed")],
        deleted_attachments=[b.id],
    )
    result = entry_service.update_entry(user.id, entry.id, payload, storage=storage, files=_files("c.txt"))

    names = sorted(att.display_name for att in result.entry.attachments)
    assert names == ["Renamed", "c.txt"]
    assert b_ref not in storage.blobs
    assert a.stored_name != "Renamed"


def test_rename_unknown_attachment_is_not_found(app, user, storage, make_entry):
    entry = make_entry(user)
    payload = _update(entry, renamed_attachments=[AttachmentRename(id=999, display_name="x")])
    with pytest.raises(NotFoundError):
        entry_service.update_entry(user.id, entry.id, payload, storage=storage)


def test_delete_single_attachment_tolerates_blob_failure(app, user, storage):
    created = entry_service.create_entry(
        user.id, EntryPayload(date=date(2024, 2, 1)), storage=storage, files=_files("a.jpg")
    )
    row = created.uploaded[0]
    storage.failing_deletes = {row.external_ref}

    entry_service.delete_entry_attachment(user.id, created.entry.id, row.id, storage=storage)

    assert Attachment.query.filter_by(id=row.id).first() is None


def test_rename_entry_attachment(app, user, storage):
    created = entry_service.create_entry(
        user.id, EntryPayload(date=date(2024, 2, 1)), storage=storage, files=_files("a.jpg")
    )
    row = entry_service.rename_entry_attachment(user.id, created.entry.id, created.uploaded[0].id, "  Cover  ")
    assert row.display_name == "Cover"
    with pytest.raises(ValidationError):
        entry_service.rename_entry_attachment(user.id, created.entry.id, row.id, "   ")


# ==================== Delete ====================


def test_delete_entry_cascades_and_unlinks_tasks(app, user, storage):
    created = entry_service.create_entry(
        user.id, EntryPayload(date=date(2024, 2, 1), title="gone"), storage=storage, files=_files("a.jpg", "b.pdf")
    )
    entry_id = created.entry.id
    task = task_service.create_task(user.id, title="follow up", diary_entry_id=entry_id)
    storage.failing_deletes = {created.uploaded[0].external_ref}

    entry_service.delete_entry(user.id, entry_id, storage=storage)

    assert DiaryEntry.query.filter_by(id=entry_id).first() is None
    assert Attachment.query.filter_by(entry_id=entry_id).count() == 0
    db.session.expire_all()
    assert db.session.get(Task, task.id).diary_entry_id is None
    # the failing blob is left behind, the other one is removed
    assert list(storage.blobs) == [created.uploaded[0].external_ref]


def test_delete_foreign_entry_is_not_found(app, user, other_user, storage, make_entry):
    entry = make_entry(user)
    with pytest.raises(NotFoundError):
        entry_service.delete_entry(other_user.id, entry.id, storage=storage)
    assert DiaryEntry.query.count() == 1
