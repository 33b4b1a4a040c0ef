from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from mapsearch.domain.enums.job_status import JobStatus


class SearchRequest(BaseModel):
    """Body of POST /search. Field rules are enforced by the core on submit."""

    q: str | None = Field(default=None, description="Free-text search term.")
    location: str | None = Field(default=None, description="Place name to geocode.")
    lat: float | None = None
    lng: float | None = None


class SearchAcceptedResponse(BaseModel):
    accepted: bool = True
    job_id: int
    status_url: str
    message: str = "Search job accepted. Poll the status endpoint for results."


class JobStatusResponse(BaseModel):
    job_id: int
    status: JobStatus
    result: dict[str, Any] | None = None
    error: str | None = None
    created_at: datetime
    updated_at: datetime


class ErrorResponse(BaseModel):
    detail: str
