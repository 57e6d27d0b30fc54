import pytest

pytestmark = pytest.mark.integration


def test_task_lifecycle(client, auth_headers):
    created = client.post("/api/tasks", json={"title": "Call mom", "due_date": "2024-02-01"}, headers=auth_headers)
    assert created.status_code == 201
    task = created.get_json()["task"]
    assert (task["priority"], task["completed"], task["due_date"]) == ("medium", False, "2024-02-01")

    toggled = client.patch(f"/api/tasks/{task['id']}/toggle", headers=auth_headers).get_json()["task"]
    assert toggled["completed"] is True

    updated = client.put(
        f"/api/tasks/{task['id']}", json={"title": "Call dad", "priority": "high"}, headers=auth_headers
    ).get_json()["task"]
    assert (updated["title"], updated["priority"]) == ("Call dad", "high")

    listing = client.get("/api/tasks?completed=true", headers=auth_headers).get_json()["tasks"]
    assert [t["id"] for t in listing] == [task["id"]]

    assert client.delete(f"/api/tasks/{task['id']}", headers=auth_headers).status_code == 200
    assert client.get(f"/api/tasks/{task['id']}", headers=auth_headers).status_code == 404


def test_task_validation(client, auth_headers):
    assert client.post("/api/tasks", json={"title": "x", "priority": "urgent"}, headers=auth_headers).status_code == 400
    assert client.post("/api/tasks", json={"title": ""}, headers=auth_headers).status_code == 400


def test_task_link_to_entry(client, auth_headers, other_auth_headers):
    entry = client.post("/api/diary", json={"date": "2024-01-01"}, headers=auth_headers).get_json()["entry"]
    foreign = client.post(
        "/api/tasks", json={"title": "sneak", "diary_entry_id": entry["id"]}, headers=other_auth_headers
    )
    assert foreign.status_code == 404

    linked = client.post("/api/tasks", json={"title": "follow up", "diary_entry_id": entry["id"]}, headers=auth_headers)
    task = linked.get_json()["task"]
    listing = client.get(f"/api/tasks?diary_entry_id={entry['id']}", headers=auth_headers).get_json()["tasks"]
    assert [t["id"] for t in listing] == [task["id"]]

    client.delete(f"/api/diary/{entry['id']}", headers=auth_headers)
    after = client.get(f"/api/tasks/{task['id']}", headers=auth_headers).get_json()["task"]
    assert after["diary_entry_id"] is None
