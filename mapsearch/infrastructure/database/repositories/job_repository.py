from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mapsearch.application.interfaces.job_repository import JobRepository
from mapsearch.domain.entities.search_job import LocationSpec, SearchJob
from mapsearch.domain.enums.job_status import JobStatus
from mapsearch.domain.state_machine.job_state_machine import JobStateMachine
from mapsearch.infrastructure.database.models import SearchJobModel

logger = structlog.get_logger(__name__)

_state_machine = JobStateMachine()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything we write is UTC.
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def _to_domain(model: SearchJobModel) -> SearchJob:
    return SearchJob(
        id=model.id,
        owner_id=model.owner_id,
        query=model.query,
        location=LocationSpec(
            place_name=model.location_name,
            latitude=model.latitude,
            longitude=model.longitude,
        ),
        status=JobStatus(model.status),
        result_payload=model.result_payload,
        error_message=model.error_message,
        attempts=model.attempts,
        created_at=_aware(model.created_at),
        updated_at=_aware(model.updated_at),
    )


def _to_model(job: SearchJob) -> SearchJobModel:
    return SearchJobModel(
        owner_id=job.owner_id,
        query=job.query,
        location_name=job.location.place_name,
        latitude=job.location.latitude,
        longitude=job.location.longitude,
        status=job.status.value,
        attempts=job.attempts,
        created_at=job.created_at,
        updated_at=job.updated_at,
    )


class SqlAlchemyJobRepository(JobRepository):
    """
    SQLAlchemy implementation of the job store.

    Every operation runs in its own short transaction so the claim loop, the
    executors and the status endpoint never share a session.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create(self, *, owner_id: str, query: str, location: LocationSpec) -> int:
        job = SearchJob.create(owner_id=owner_id, query=query, location=location)
        model = _to_model(job)
        async with self._session_factory() as session, session.begin():
            session.add(model)
            await session.flush()
            job_id = model.id
        return job_id

    async def get_for_owner(self, job_id: int, owner_id: str) -> SearchJob | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(SearchJobModel).where(
                    SearchJobModel.id == job_id,
                    SearchJobModel.owner_id == owner_id,
                )
            )
            model = result.scalar_one_or_none()
            return _to_domain(model) if model is not None else None

    async def claim_one_pending(self) -> SearchJob | None:
        # Single conditional UPDATE: the sub-select picks the oldest pending row
        # and the outer status check makes a lost race update zero rows.
        oldest_pending = (
            select(SearchJobModel.id)
            .where(SearchJobModel.status == JobStatus.PENDING.value)
            .order_by(SearchJobModel.created_at.asc(), SearchJobModel.id.asc())
            .limit(1)
            .with_for_update(skip_locked=True)
            .scalar_subquery()
        )
        stmt = (
            update(SearchJobModel)
            .where(
                SearchJobModel.id == oldest_pending,
                SearchJobModel.status == JobStatus.PENDING.value,
            )
            .values(status=JobStatus.PROCESSING.value, updated_at=_utcnow())
            .returning(SearchJobModel)
            .execution_options(synchronize_session=False)
        )
        async with self._session_factory() as session, session.begin():
            result = await session.execute(stmt)
            model = result.scalars().first()
            return _to_domain(model) if model is not None else None

    async def complete(
        self,
        job_id: int,
        status: JobStatus,
        *,
        result: dict[str, Any] | None = None,
        error: str | None = None,
        attempts: int = 0,
    ) -> bool:
        _state_machine.validate_transition(JobStatus.PROCESSING, status)

        values: dict[str, Any] = {
            "status": status.value,
            "attempts": attempts,
            "updated_at": _utcnow(),
        }
        if status is JobStatus.COMPLETED:
            values.update(result_payload=result, error_message=None)
        else:
            values.update(result_payload=None, error_message=error or "Unknown error")

        stmt = (
            update(SearchJobModel)
            .where(
                SearchJobModel.id == job_id,
                SearchJobModel.status == JobStatus.PROCESSING.value,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        async with self._session_factory() as session, session.begin():
            outcome = await session.execute(stmt)
            updated = outcome.rowcount == 1

        if not updated:
            logger.warning("job_complete_ignored", job_id=job_id, status=status.value)
        return updated

    async def count_by_status(self) -> dict[JobStatus, int]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(SearchJobModel.status, func.count()).group_by(SearchJobModel.status)
            )
            counts = {status: 0 for status in JobStatus}
            for status, count in result.all():
                counts[JobStatus(status)] = count
            return counts
