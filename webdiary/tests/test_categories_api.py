import pytest

pytestmark = pytest.mark.integration


def test_category_crud(client, auth_headers):
    created = client.post("/api/categories", json={"name": " Work "}, headers=auth_headers)
    assert created.status_code == 201
    category = created.get_json()["category"]
    assert category["name"] == "Work"

    dup = client.post("/api/categories", json={"name": "work"}, headers=auth_headers)
    assert dup.status_code == 409

    renamed = client.patch(f"/api/categories/{category['id']}", json={"name": "Job"}, headers=auth_headers)
    assert renamed.get_json()["category"]["name"] == "Job"

    listing = client.get("/api/categories", headers=auth_headers).get_json()
    assert [c["name"] for c in listing["categories"]] == ["Job"]

    assert client.delete(f"/api/categories/{category['id']}", headers=auth_headers).status_code == 200
    assert client.get("/api/categories", headers=auth_headers).get_json()["categories"] == []


def test_entry_category_ref(client, auth_headers):
    category = client.post("/api/categories", json={"name": "Travel"}, headers=auth_headers).get_json()["category"]
    entry = client.post(
        "/api/diary", json={"date": "2024-01-01", "category_id": category["id"]}, headers=auth_headers
    ).get_json()["entry"]
    assert entry["category"] == {"id": category["id"], "name": "Travel"}

    client.delete(f"/api/categories/{category['id']}", headers=auth_headers)
    fetched = client.get(f"/api/diary/{entry['id']}", headers=auth_headers).get_json()["entry"]
    assert fetched["category"] is None


def test_categories_are_private(client, auth_headers, other_auth_headers):
    category = client.post("/api/categories", json={"name": "Mine"}, headers=auth_headers).get_json()["category"]
    resp = client.patch(f"/api/categories/{category['id']}", json={"name": "Ours"}, headers=other_auth_headers)
    assert resp.status_code == 404
    assert client.get("/api/categories", headers=other_auth_headers).get_json()["categories"] == []
    blank = client.post("/api/categories", json={"name": "  "}, headers=auth_headers)
    assert blank.status_code == 400
