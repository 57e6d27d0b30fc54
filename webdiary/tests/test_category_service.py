from datetime import date

import pytest

pytestmark = pytest.mark.integration

from webdiary.core.errors import ConflictError, NotFoundError, ValidationError
from webdiary.domains.diary.models import DiaryEntry
from webdiary.domains.diary.services import category_service
from webdiary.extensions import db


def test_create_and_list_sorted(app, user):
    category_service.create_category(user.id, "  Work ")
    category_service.create_category(user.id, "Family")
    names = [c.name for c in category_service.list_categories(user.id)]
    assert names == ["Family", "Work"]


def test_names_unique_per_owner_case_insensitive(app, user, other_user):
    category_service.create_category(user.id, "Travel")
    with pytest.raises(ConflictError):
        category_service.create_category(user.id, "travel")
    # another owner may reuse it
    category_service.create_category(other_user.id, "Travel")


def test_uniqueness_folds_non_ascii_case(app, user):
    category_service.create_category(user.id, "Été")
    with pytest.raises(ConflictError):
        category_service.create_category(user.id, "été")
    with pytest.raises(ConflictError):
        category_service.create_category(user.id, "ÉTÉ")


def test_blank_name_rejected(app, user):
    with pytest.raises(ValidationError) as exc:
        category_service.create_category(user.id, "   ")
    assert exc.value.field == "name"


def test_rename(app, user):
    work = category_service.create_category(user.id, "Work")
    category_service.create_category(user.id, "Home")
    assert category_service.rename_category(user.id, work.id, "WORK").name == "WORK"
    with pytest.raises(ConflictError):
        category_service.rename_category(user.id, work.id, "home")


def test_foreign_category_is_not_found(app, user, other_user):
    theirs = category_service.create_category(other_user.id, "Secret")
    with pytest.raises(NotFoundError):
        category_service.get_category(user.id, theirs.id)
    with pytest.raises(NotFoundError):
        category_service.delete_category(user.id, theirs.id)


def test_delete_keeps_entries(app, user, make_entry):
    work = category_service.create_category(user.id, "Work")
    entry = make_entry(user, date(2024, 1, 1), title="standup", category_id=work.id)
    assert entry.category_id == work.id

    category_service.delete_category(user.id, work.id)

    kept = db.session.get(DiaryEntry, entry.id)
    assert kept is not None
    assert kept.category_id is None
    assert category_service.list_categories(user.id) == []
