"""Unit tests for the submission and status use cases: the repository is mocked."""
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from mapsearch.application.use_cases.get_search_job_status import GetSearchJobStatus
from mapsearch.application.use_cases.submit_search_job import (
    SubmitSearchJob,
    SubmitSearchJobInput,
)
from mapsearch.domain.entities.search_job import LocationSpec, SearchJob
from mapsearch.domain.enums.job_status import JobStatus
from mapsearch.domain.errors import JobNotFoundError, NotFoundError, ValidationError


def _make_repo(job: SearchJob | None = None) -> MagicMock:
    repo = MagicMock()
    repo.create = AsyncMock(return_value=1)
    repo.get_for_owner = AsyncMock(return_value=job)
    return repo


def _make_job(status: JobStatus, **overrides) -> SearchJob:  # type: ignore[no-untyped-def]
    job = SearchJob(
        id=7,
        owner_id="u1",
        query="coffee shop",
        location=LocationSpec(latitude=40.7128, longitude=-74.006),
        status=status,
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        updated_at=datetime(2026, 1, 1, 0, 1, tzinfo=timezone.utc),
    )
    for key, value in overrides.items():
        setattr(job, key, value)
    return job


class TestSubmitSearchJob:
    @pytest.mark.asyncio
    async def test_creates_pending_job_for_coordinates(self) -> None:
        repo = _make_repo()
        use_case = SubmitSearchJob(repo)

        job_id = await use_case.execute(
            SubmitSearchJobInput(owner_id="u1", query=" coffee shop ", lat=40.7128, lng=-74.006)
        )

        assert job_id == 1
        repo.create.assert_awaited_once_with(
            owner_id="u1",
            query="coffee shop",
            location=LocationSpec(latitude=40.7128, longitude=-74.006),
        )

    @pytest.mark.asyncio
    async def test_creates_pending_job_for_place_name(self) -> None:
        repo = _make_repo()
        await SubmitSearchJob(repo).execute(
            SubmitSearchJobInput(owner_id="u1", query="salon", location="Bhilwara")
        )
        assert repo.create.await_args.kwargs["location"] == LocationSpec(place_name="Bhilwara")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", [None, "", "  "])
    async def test_empty_query_never_creates_a_job(self, query: str | None) -> None:
        repo = _make_repo()
        with pytest.raises(ValidationError):
            await SubmitSearchJob(repo).execute(
                SubmitSearchJobInput(owner_id="u1", query=query, lat=1.0, lng=1.0)
            )
        repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_location_never_creates_a_job(self) -> None:
        repo = _make_repo()
        with pytest.raises(ValidationError):
            await SubmitSearchJob(repo).execute(SubmitSearchJobInput(owner_id="u1", query="tea"))
        repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_owner(self) -> None:
        repo = _make_repo()
        with pytest.raises(ValidationError):
            await SubmitSearchJob(repo).execute(
                SubmitSearchJobInput(owner_id="", query="tea", lat=1.0, lng=1.0)
            )
        repo.create.assert_not_awaited()


class TestGetSearchJobStatus:
    @pytest.mark.asyncio
    async def test_pending_job_has_no_result(self) -> None:
        repo = _make_repo(_make_job(JobStatus.PENDING))
        view = await GetSearchJobStatus(repo).execute(7, "u1")

        assert view.status is JobStatus.PENDING
        assert view.result is None
        assert view.error is None
        repo.get_for_owner.assert_awaited_once_with(7, "u1")

    @pytest.mark.asyncio
    async def test_completed_job_exposes_result(self) -> None:
        payload = {"query": "coffee shop", "count": 0, "results": []}
        repo = _make_repo(_make_job(JobStatus.COMPLETED, result_payload=payload))
        view = await GetSearchJobStatus(repo).execute(7, "u1")

        assert view.result == payload
        assert view.error is None

    @pytest.mark.asyncio
    async def test_failed_job_exposes_error(self) -> None:
        repo = _make_repo(_make_job(JobStatus.FAILED, error_message="boom"))
        view = await GetSearchJobStatus(repo).execute(7, "u1")

        assert view.result is None
        assert view.error == "boom"

    @pytest.mark.asyncio
    async def test_unknown_or_foreign_job_is_not_found(self) -> None:
        repo = _make_repo(None)
        with pytest.raises(JobNotFoundError) as exc_info:
            await GetSearchJobStatus(repo).execute(7, "intruder")
        assert isinstance(exc_info.value, NotFoundError)
