from __future__ import annotations

import pytest

from errors import NotFound, ValidationError
from services.credentials import CredentialStore
from services.jobs import JobCatalog


@pytest.mark.asyncio
async def test_create_then_list_includes_job(storage):
    client_id = await CredentialStore(storage).register("Alice", "alice@x.com", "pw", "client")
    catalog = JobCatalog(storage)

    job_id = await catalog.create_job(client_id, "Logo", "Need a logo", 100)
    jobs = await catalog.list_jobs()

    assert len(jobs) == 1
    job = jobs[0]
    assert job["id"] == job_id
    assert job["title"] == "Logo"
    assert job["description"] == "Need a logo"
    assert job["budget"] == 100
    assert job["bids"] == []
    assert job["client"]["name"] == "Alice"
    assert "hashed_password" not in job["client"]


@pytest.mark.asyncio
async def test_list_preserves_creation_order(storage):
    catalog = JobCatalog(storage)
    ids = [await catalog.create_job(1, f"job {i}", "", 10 + i) for i in range(3)]
    assert [job["id"] for job in await catalog.list_jobs()] == ids


@pytest.mark.asyncio
@pytest.mark.parametrize("budget", [0, -5, float("nan"), float("inf"), True, "100", None])
async def test_budget_must_be_positive_number(storage, budget):
    catalog = JobCatalog(storage)
    with pytest.raises(ValidationError):
        await catalog.create_job(1, "Logo", "", budget)
    assert await catalog.list_jobs() == []


@pytest.mark.asyncio
async def test_title_required(storage):
    with pytest.raises(ValidationError):
        await JobCatalog(storage).create_job(1, "   ", "", 100)


@pytest.mark.asyncio
async def test_get_job_unknown(storage):
    with pytest.raises(NotFound):
        await JobCatalog(storage).get_job(404)


@pytest.mark.asyncio
async def test_unknown_client_resolves_to_none(storage):
    catalog = JobCatalog(storage)
    job_id = await catalog.create_job(77, "Orphan", "", 5.5)
    job = await catalog.get_job(job_id)
    assert job["client"] is None
    assert job["budget"] == 5.5
