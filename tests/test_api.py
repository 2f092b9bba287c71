# tests/test_api.py

from __future__ import annotations

from fastapi.testclient import TestClient


TASK = {
    "subject": "Physics",
    "topic": "Kinematics",
    "activity_type": "Practice Questions",
    "scheduled_at": "2025-07-15T09:00:00",
    "duration_minutes": 45,
}


def login(client: TestClient, name: str) -> None:
    resp = client.post(
        "/auth/login", json={"email": f"{name.lower()}@example.com", "password": "secret123"}
    )
    assert resp.status_code == 200, resp.text


def test_health(client: TestClient) -> None:
    assert client.get("/health").json()["status"] == "ok"


def test_requires_session_cookie(client: TestClient) -> None:
    for path in ("/tasks", "/tests", "/syllabus", "/dashboard", "/auth/me"):
        assert client.get(path).status_code == 401, path


def test_register_login_me_logout(client: TestClient, register) -> None:
    user = register("Alice")
    assert user["email"] == "alice@example.com"
    assert user["psid"]

    me = client.get("/auth/me").json()
    assert me["psid"] == user["psid"]

    assert client.post("/auth/logout").status_code == 200
    assert client.get("/auth/me").status_code == 401

    login(client, "Alice")
    assert client.get("/auth/me").json()["id"] == user["id"]


def test_register_rejects_duplicates_and_bad_input(client: TestClient, register) -> None:
    register("Alice")
    dup = client.post(
        "/auth/register", json={"name": "Alice", "email": "ALICE@example.com", "password": "secret123"}
    )
    assert dup.status_code == 409

    short = client.post("/auth/register", json={"name": "Bob", "email": "bob@example.com", "password": "123"})
    assert short.status_code == 400

    wrong = client.post("/auth/login", json={"email": "alice@example.com", "password": "nope-nope"})
    assert wrong.status_code == 401


def test_task_crud_and_toggle(client: TestClient, register) -> None:
    register("Alice")

    created = client.post("/tasks", json=TASK)
    assert created.status_code == 201, created.text
    task = created.json()
    assert task["completed"] is False
    assert task["activity_type"] == "Practice Questions"

    listed = client.get("/tasks").json()
    assert [t["id"] for t in listed] == [task["id"]]

    toggled = client.patch(f"/tasks/{task['id']}/toggle").json()
    assert toggled == {"id": task["id"], "completed": True}

    updated = client.put(
        f"/tasks/{task['id']}", json={**TASK, "topic": "Projectiles", "completed": True}
    ).json()
    assert updated["topic"] == "Projectiles"
    assert updated["completed"] is True

    assert client.delete(f"/tasks/{task['id']}").status_code == 200
    assert client.delete(f"/tasks/{task['id']}").status_code == 200
    assert client.get("/tasks").json() == []

    missing = client.get(f"/tasks/{task['id']}")
    assert missing.status_code == 404
    assert missing.json()["error"] == "NotFoundError"


def test_invalid_task_is_rejected(client: TestClient, register) -> None:
    register("Alice")
    assert client.post("/tasks", json={**TASK, "duration_minutes": 0}).status_code == 422
    assert client.post("/tasks", json={**TASK, "topic": "  "}).status_code == 422
    assert client.get("/tasks").json() == []


def test_owners_are_isolated(client: TestClient, register) -> None:
    register("Alice")
    alice_task = client.post("/tasks", json=TASK).json()

    register("Bob")
    assert client.get("/tasks").json() == []
    assert client.get(f"/tasks/{alice_task['id']}").status_code == 404
    assert client.patch(f"/tasks/{alice_task['id']}/toggle").status_code == 404
    assert client.put(f"/tasks/{alice_task['id']}", json=TASK).status_code == 404

    login(client, "Alice")
    tasks = client.get("/tasks").json()
    assert [t["id"] for t in tasks] == [alice_task["id"]]
    assert tasks[0]["completed"] is False


def test_tests_import_upcoming_and_clear(client: TestClient, register) -> None:
    register("Alice")
    batch = {
        "tests": [
            {"test_name": "Unit Test 1", "start_date": "2025-01-10", "end_date": "2025-01-12"},
            {"test_name": "Finals", "start_date": "2025-12-01", "end_date": "2025-12-10",
             "syllabus": "Physics, Chemistry"},
        ]
    }

    imported = client.post("/tests/import", json=batch)
    assert imported.status_code == 201
    assert imported.json()["count"] == 2
    assert len(client.get("/tests").json()) == 2

    upcoming = client.get("/tests/upcoming", params={"today": "2025-06-01"}).json()
    assert upcoming["test_name"] == "Finals"
    assert upcoming["syllabus_items"] == ["Physics", "Chemistry"]

    assert client.delete("/tests").status_code == 400
    assert len(client.get("/tests").json()) == 2

    cleared = client.delete("/tests", params={"confirm": "true"})
    assert cleared.json()["deleted"] == 2
    assert client.get("/tests").json() == []


def test_test_with_reversed_dates_is_rejected(client: TestClient, register) -> None:
    register("Alice")
    resp = client.post(
        "/tests", json={"test_name": "Quiz", "start_date": "2025-07-10", "end_date": "2025-07-01"}
    )
    assert resp.status_code == 422


def test_syllabus_round_trip(client: TestClient, register) -> None:
    register("Alice")
    assert client.get("/syllabus").json()["topics"] == []

    saved = client.put("/syllabus", json={"topics": ["Optics", " ", "Waves"]}).json()
    assert saved["topics"] == ["Optics", "Waves"]
    assert client.get("/syllabus").json()["topics"] == ["Optics", "Waves"]


def test_planner_and_dashboard(client: TestClient, register) -> None:
    register("Alice")
    first = client.post("/tasks", json=TASK).json()
    client.post("/tasks", json={**TASK, "topic": "Vectors", "scheduled_at": "2025-07-15T18:00:00"})
    client.post("/tasks", json={**TASK, "topic": "Optics", "scheduled_at": "2025-07-16T08:00:00"})
    client.patch(f"/tasks/{first['id']}/toggle")
    client.post("/tests", json={"test_name": "Finals", "start_date": "2025-07-20", "end_date": "2025-07-25"})

    days = client.get("/planner").json()["days"]
    assert {day: len(tasks) for day, tasks in days.items()} == {"2025-07-15": 2, "2025-07-16": 1}

    pending_days = client.get("/planner", params={"include_completed": "false"}).json()["days"]
    assert {day: len(tasks) for day, tasks in pending_days.items()} == {"2025-07-15": 1, "2025-07-16": 1}

    dashboard = client.get("/dashboard", params={"today": "2025-07-15"}).json()
    assert dashboard["pending_count"] == 2
    assert dashboard["completed_count"] == 1
    assert [t["topic"] for t in dashboard["today_tasks"]] == ["Kinematics", "Vectors"]
    assert dashboard["next_test"]["test_name"] == "Finals"

    after = client.get("/dashboard", params={"today": "2025-08-01"}).json()
    assert after["next_test"] is None
    assert len(after["ended_tests"]) == 1
