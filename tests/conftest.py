# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from server.app import create_app
from server.container import Planner
from server.store import DocumentStore

from .fakes import FakeClock


@pytest.fixture()
def db_path(tmp_path: Path) -> str:
    return str(tmp_path / "planner.sqlite3")


@pytest.fixture()
def store(db_path: str) -> DocumentStore:
    return DocumentStore(db_path)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(params=["polling", "live"])
def strategy(request) -> str:
    """Every synchronizer test runs against both refresh strategies."""
    return request.param


@pytest.fixture()
def planner(store: DocumentStore, clock: FakeClock, strategy: str):
    p = Planner(store, cache_ttl_seconds=5, store_timeout_seconds=5, strategy=strategy, clock=clock)
    yield p
    p.close()


@pytest.fixture()
def task_draft() -> dict:
    return {
        "subject": "Physics",
        "topic": "Kinematics",
        "scheduled_at": datetime(2025, 7, 20, 9, 0),
        "duration_minutes": 45,
    }


@pytest.fixture()
def app(db_path: str, clock: FakeClock):
    """App wired to a temp database; real store, polling refresh."""
    application = create_app()
    application.state.planner = Planner(
        DocumentStore(db_path), cache_ttl_seconds=5, store_timeout_seconds=5,
        strategy="polling", clock=clock,
    )
    return application


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def register(client: TestClient):
    """Register + sign in a user; the client's cookie now belongs to them."""

    def _register(name: str) -> dict:
        resp = client.post(
            "/auth/register",
            json={"name": name, "email": f"{name.lower()}@example.com", "password": "secret123"},
        )
        assert resp.status_code == 200, resp.text
        return resp.json()["user"]

    return _register
