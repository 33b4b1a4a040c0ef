from abc import ABC, abstractmethod
from typing import Any

from mapsearch.domain.entities.search_job import LocationSpec, SearchJob
from mapsearch.domain.enums.job_status import JobStatus


class JobRepository(ABC):
    """Port for persisting search jobs and moving them through their lifecycle."""

    @abstractmethod
    async def create(self, *, owner_id: str, query: str, location: LocationSpec) -> int:
        """Persist a new pending job and return its id."""
        ...

    @abstractmethod
    async def get_for_owner(self, job_id: int, owner_id: str) -> SearchJob | None:
        """Return the job only if it exists and belongs to owner_id."""
        ...

    @abstractmethod
    async def claim_one_pending(self) -> SearchJob | None:
        """Atomically move the oldest pending job to processing and return it."""
        ...

    @abstractmethod
    async def complete(
        self,
        job_id: int,
        status: JobStatus,
        *,
        result: dict[str, Any] | None = None,
        error: str | None = None,
        attempts: int = 0,
    ) -> bool:
        """Move a processing job to a terminal status.

        Returns False (and changes nothing) when the job is not processing.
        """
        ...

    @abstractmethod
    async def count_by_status(self) -> dict[JobStatus, int]:
        ...
