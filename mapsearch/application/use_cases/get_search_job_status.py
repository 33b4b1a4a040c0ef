from dataclasses import dataclass
from datetime import datetime
from typing import Any

from mapsearch.application.interfaces.job_repository import JobRepository
from mapsearch.domain.enums.job_status import JobStatus
from mapsearch.domain.errors import JobNotFoundError


@dataclass
class JobStatusView:
    job_id: int
    status: JobStatus
    result: dict[str, Any] | None
    error: str | None
    created_at: datetime
    updated_at: datetime


class GetSearchJobStatus:
    """Use case: read a job's current state on behalf of its owner."""

    def __init__(self, job_repo: JobRepository) -> None:
        self._job_repo = job_repo

    async def execute(self, job_id: int, owner_id: str) -> JobStatusView:
        job = await self._job_repo.get_for_owner(job_id, owner_id)
        # Unknown id and foreign owner are reported identically.
        if job is None or job.id is None:
            raise JobNotFoundError(job_id)

        return JobStatusView(
            job_id=job.id,
            status=job.status,
            result=job.result_payload if job.is_terminal else None,
            error=job.error_message if job.status is JobStatus.FAILED else None,
            created_at=job.created_at,
            updated_at=job.updated_at,
        )
