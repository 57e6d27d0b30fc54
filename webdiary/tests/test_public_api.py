import pytest

pytestmark = pytest.mark.integration


def _create(client, headers, **fields):
    fields.setdefault("date", "2024-05-01")
    return client.post("/api/diary", json=fields, headers=headers).get_json()["entry"]


def test_shared_entry_hides_owner(client, auth_headers):
    entry = _create(client, auth_headers, title="Open letter", content="hello", visibility="public")
    resp = client.get(f"/api/public/share/{entry['share_token']}")
    assert resp.status_code == 200
    shared = resp.get_json()["entry"]
    assert shared["title"] == "Open letter"
    assert shared["body_text"] == "hello"
    for key in ("user_id", "owner_id", "share_token", "visibility", "category"):
        assert key not in shared


def test_private_entry_is_not_shared(client, auth_headers):
    entry = _create(client, auth_headers, visibility="unlisted")
    token = entry["share_token"]
    client.put(f"/api/diary/{entry['id']}", json={"date": "2024-05-01", "visibility": "private"}, headers=auth_headers)
    resp = client.get(f"/api/public/share/{token}")
    assert resp.status_code == 404
    assert resp.get_json()["ok"] is False


def test_unknown_token(client):
    assert client.get("/api/public/share/deadbeef").status_code == 404
