"""
Shared fixtures.

The service reads its configuration at import time, so the environment is
pointed at a throwaway SQLite file before anything from ``task_service``
is imported.
"""

import os
import tempfile
from pathlib import Path

import pytest

_DB_DIR = tempfile.mkdtemp(prefix="task-service-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_DB_DIR) / 'test.db'}"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ALLOW_ADMIN_SIGNUP"] = "False"

from fastapi.testclient import TestClient  # noqa: E402

from task_service.database import engine  # noqa: E402
from task_service.main import app  # noqa: E402
from task_service.models import tasks, users  # noqa: E402


@pytest.fixture()
def client():
    with TestClient(app) as c:
        yield c
    with engine.begin() as conn:
        conn.execute(tasks.delete())
        conn.execute(users.delete())


def register(client, email="alice@example.com", password="s3cret-pass"):
    resp = client.post("/api/users/register", json={"email": email, "password": password})
    assert resp.status_code == 201, resp.text
    return resp.json()


def bearer(user) -> dict:
    return {"Authorization": f"Bearer {user['token']}"}


@pytest.fixture()
def alice(client):
    return register(client, "alice@example.com")


@pytest.fixture()
def bob(client):
    return register(client, "bob@example.com")


@pytest.fixture()
def make_task(client):
    def _make(user, title, **fields):
        resp = client.post("/api/tasks", json={"title": title, **fields}, headers=bearer(user))
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make
