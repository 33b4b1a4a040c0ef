from dataclasses import dataclass

import structlog

from mapsearch.application.interfaces.job_repository import JobRepository
from mapsearch.application.search_criteria import DEFAULT_QUERY_MAX_LENGTH, parse_search_criteria
from mapsearch.domain.errors import ValidationError

logger = structlog.get_logger(__name__)


@dataclass
class SubmitSearchJobInput:
    owner_id: str
    query: str | None
    location: str | None = None
    lat: float | None = None
    lng: float | None = None


class SubmitSearchJob:
    """
    Use case: validate a search request and queue it as a pending job.

    Invalid input raises ValidationError and nothing is persisted.
    """

    def __init__(
        self, job_repo: JobRepository, query_max_length: int = DEFAULT_QUERY_MAX_LENGTH
    ) -> None:
        self._job_repo = job_repo
        self._query_max_length = query_max_length

    async def execute(self, input_data: SubmitSearchJobInput) -> int:
        if not input_data.owner_id:
            raise ValidationError("Owner id is required.")

        criteria = parse_search_criteria(
            {
                "q": input_data.query,
                "location": input_data.location,
                "lat": input_data.lat,
                "lng": input_data.lng,
            },
            query_max_length=self._query_max_length,
        )

        job_id = await self._job_repo.create(
            owner_id=input_data.owner_id,
            query=criteria.q,
            location=criteria.to_location_spec(),
        )
        logger.info(
            "search_job_submitted",
            job_id=job_id,
            owner_id=input_data.owner_id,
            query=criteria.q,
        )
        return job_id
