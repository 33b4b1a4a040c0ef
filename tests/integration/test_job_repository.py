"""
Integration tests for the SQLAlchemy job store against a throwaway SQLite file.
"""
import asyncio
from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio

from mapsearch.domain.entities.search_job import LocationSpec
from mapsearch.domain.enums.job_status import JobStatus
from mapsearch.domain.state_machine.job_state_machine import InvalidStateTransitionError
from mapsearch.infrastructure.database.connection import (
    create_engine,
    create_session_factory,
    init_schema,
)
from mapsearch.infrastructure.database.repositories.job_repository import (
    SqlAlchemyJobRepository,
)

NYC = LocationSpec(latitude=40.7128, longitude=-74.006)


@pytest_asyncio.fixture()
async def repo(tmp_path: Path) -> AsyncIterator[SqlAlchemyJobRepository]:
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'jobs.db'}")
    await init_schema(engine)
    yield SqlAlchemyJobRepository(create_session_factory(engine))
    await engine.dispose()


class TestCreateAndRead:
    @pytest.mark.asyncio
    async def test_create_assigns_increasing_ids(self, repo: SqlAlchemyJobRepository) -> None:
        first = await repo.create(owner_id="u1", query="coffee shop", location=NYC)
        second = await repo.create(owner_id="u1", query="tea", location=NYC)
        assert second > first

    @pytest.mark.asyncio
    async def test_new_job_is_pending(self, repo: SqlAlchemyJobRepository) -> None:
        job_id = await repo.create(
            owner_id="u1", query="salon", location=LocationSpec(place_name="Bhilwara")
        )
        job = await repo.get_for_owner(job_id, "u1")

        assert job is not None
        assert job.status is JobStatus.PENDING
        assert job.location.place_name == "Bhilwara"
        assert job.location.latitude is None
        assert job.result_payload is None
        assert job.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_other_owner_sees_nothing(self, repo: SqlAlchemyJobRepository) -> None:
        job_id = await repo.create(owner_id="u1", query="coffee shop", location=NYC)
        assert await repo.get_for_owner(job_id, "u2") is None
        assert await repo.get_for_owner(job_id + 100, "u1") is None


class TestClaim:
    @pytest.mark.asyncio
    async def test_claims_oldest_first(self, repo: SqlAlchemyJobRepository) -> None:
        ids = [
            await repo.create(owner_id="u1", query=f"q{i}", location=NYC) for i in range(3)
        ]

        claimed = [await repo.claim_one_pending() for _ in range(3)]

        assert [job.id for job in claimed if job is not None] == ids
        assert all(job is not None and job.status is JobStatus.PROCESSING for job in claimed)
        assert await repo.claim_one_pending() is None

    @pytest.mark.asyncio
    async def test_empty_store(self, repo: SqlAlchemyJobRepository) -> None:
        assert await repo.claim_one_pending() is None

    @pytest.mark.asyncio
    async def test_concurrent_claims_never_share_a_job(
        self, repo: SqlAlchemyJobRepository
    ) -> None:
        for i in range(5):
            await repo.create(owner_id="u1", query=f"q{i}", location=NYC)

        claimed = await asyncio.gather(*(repo.claim_one_pending() for _ in range(8)))
        ids = [job.id for job in claimed if job is not None]

        assert len(ids) == 5
        assert len(set(ids)) == 5


class TestComplete:
    @pytest.mark.asyncio
    async def test_completed_job_keeps_payload(self, repo: SqlAlchemyJobRepository) -> None:
        job_id = await repo.create(owner_id="u1", query="coffee shop", location=NYC)
        await repo.claim_one_pending()
        payload = {"query": "coffee shop", "results": [{"name": "A"}], "count": 1}

        assert await repo.complete(job_id, JobStatus.COMPLETED, result=payload, attempts=1)

        job = await repo.get_for_owner(job_id, "u1")
        assert job is not None
        assert job.status is JobStatus.COMPLETED
        assert job.result_payload == payload
        assert job.error_message is None
        assert job.attempts == 1
        # Input columns are untouched by the write-back.
        assert job.query == "coffee shop"
        assert job.location == NYC

    @pytest.mark.asyncio
    async def test_failed_job_keeps_error(self, repo: SqlAlchemyJobRepository) -> None:
        job_id = await repo.create(owner_id="u1", query="coffee shop", location=NYC)
        await repo.claim_one_pending()

        assert await repo.complete(job_id, JobStatus.FAILED, error="boom", attempts=2)

        job = await repo.get_for_owner(job_id, "u1")
        assert job is not None
        assert job.status is JobStatus.FAILED
        assert job.error_message == "boom"
        assert job.result_payload is None

    @pytest.mark.asyncio
    async def test_terminal_job_is_not_overwritten(self, repo: SqlAlchemyJobRepository) -> None:
        job_id = await repo.create(owner_id="u1", query="coffee shop", location=NYC)
        await repo.claim_one_pending()
        await repo.complete(job_id, JobStatus.COMPLETED, result={"count": 0})

        assert not await repo.complete(job_id, JobStatus.FAILED, error="late")

        job = await repo.get_for_owner(job_id, "u1")
        assert job is not None
        assert job.status is JobStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_pending_job_cannot_be_completed(self, repo: SqlAlchemyJobRepository) -> None:
        job_id = await repo.create(owner_id="u1", query="coffee shop", location=NYC)
        assert not await repo.complete(job_id, JobStatus.COMPLETED, result={})

    @pytest.mark.asyncio
    async def test_non_terminal_target_is_rejected(self, repo: SqlAlchemyJobRepository) -> None:
        job_id = await repo.create(owner_id="u1", query="coffee shop", location=NYC)
        await repo.claim_one_pending()
        with pytest.raises(InvalidStateTransitionError):
            await repo.complete(job_id, JobStatus.PENDING)


class TestCountByStatus:
    @pytest.mark.asyncio
    async def test_counts_every_status(self, repo: SqlAlchemyJobRepository) -> None:
        for i in range(3):
            await repo.create(owner_id="u1", query=f"q{i}", location=NYC)
        await repo.claim_one_pending()

        counts = await repo.count_by_status()

        assert counts == {
            JobStatus.PENDING: 2,
            JobStatus.PROCESSING: 1,
            JobStatus.COMPLETED: 0,
            JobStatus.FAILED: 0,
        }
