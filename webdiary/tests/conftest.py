import sys
from datetime import date
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from webdiary import create_app
from webdiary.core.auth.auth_service import hash_password, issue_token
from webdiary.core.users.models import User
from webdiary.domains.diary.schemas.diary_schemas import EntryPayload
from webdiary.domains.diary.services import entry_service
from webdiary.extensions import db
from webdiary.storage import get_blob_storage


# ==================== Pytest Markers ====================
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (database, API)")


@pytest.fixture()
def app():
    """Per-test app backed by a fresh in-memory database."""
    app = create_app("testing")
    ctx = app.app_context()
    ctx.push()
    db.create_all()
    try:
        yield app
    finally:
        db.session.remove()
        db.drop_all()
        ctx.pop()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def storage(app):
    """The in-memory blob storage wired into the app."""
    return get_blob_storage(app)


def _make_user(username: str) -> User:
    user = User(username=username, email=f"{username}@example.com", password_hash=hash_password("secret123"))
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture()
def user(app):
    return _make_user("alice")


@pytest.fixture()
def other_user(app):
    return _make_user("bob")


@pytest.fixture()
def auth_headers(user):
    return {"Authorization": f"Bearer {issue_token(user)}"}


@pytest.fixture()
def other_auth_headers(other_user):
    return {"Authorization": f"Bearer {issue_token(other_user)}"}


@pytest.fixture()
def make_entry(storage):
    """Create an entry through the service layer; keyword args feed ``EntryPayload``."""

    def _make(owner, entry_date=date(2024, 1, 15), **fields):
        payload = EntryPayload(date=entry_date, **fields)
        return entry_service.create_entry(owner.id, payload, storage=storage).entry

    return _make
