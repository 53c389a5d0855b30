"""
Shared fixtures.

Every test runs against MemoryStorage, so no PostgreSQL is needed:
  • storage   — fresh in-memory storage
  • racing_storage — storage where a rival bid lands between read and write
  • settings  — Settings pointing uploads at a tmp dir
  • client    — TestClient with the lifespan started
  • register_and_login(...) — helper returning (user, token) over HTTP
"""

from __future__ import annotations

import os
import sys

import pytest
from fastapi.testclient import TestClient

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from config import Settings  # noqa: E402
from db import MemoryStorage  # noqa: E402
from main import create_app  # noqa: E402

TEST_SECRET = "test-signing-secret"


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


class RacingStorage(MemoryStorage):
    """Lets another writer append a bid right after a job is read."""

    def __init__(self):
        super().__init__()
        self.race_bid = None

    async def get_job(self, job_id):
        job = await super().get_job(job_id)
        if job is not None and self.race_bid is not None:
            rival, self.race_bid = self.race_bid, None
            assert await self.update_job_bids(job_id, job["bids"] + [rival], job["version"])
        return job


@pytest.fixture
def racing_storage() -> RacingStorage:
    return RacingStorage()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        storage_backend="memory",
        jwt_secret=TEST_SECRET,
        stripe_secret_key="sk_test_dummy",
        upload_root=str(tmp_path / "uploads"),
        log_level="WARNING",
    )


@pytest.fixture
def client(settings, storage):
    app = create_app(settings=settings, storage=storage)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def register_and_login(client):
    def _factory(name: str, email: str, password: str = "pw", role: str = "freelancer"):
        resp = client.post(
            "/api/auth/register",
            json={"name": name, "email": email, "password": password, "role": role},
        )
        assert resp.status_code == 201, resp.text
        resp = client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        body = resp.json()
        return body["user"], body["token"]
    return _factory
