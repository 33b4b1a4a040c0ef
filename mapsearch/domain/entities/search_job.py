from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from mapsearch.domain.enums.job_status import JobStatus

CUSTOM_COORDINATES_LABEL = "Custom Coordinates"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class LocationSpec:
    """Where to search: either a free-text place name or a coordinate pair."""

    place_name: str | None = None
    latitude: float | None = None
    longitude: float | None = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def describe(self) -> str:
        if self.has_coordinates:
            return f"{self.latitude},{self.longitude}"
        return self.place_name or ""


@dataclass(frozen=True)
class ResolvedLocation:
    """A location after geocoding: coordinates plus a display label."""

    latitude: float
    longitude: float
    label: str


@dataclass
class SearchJob:
    """
    One submitted search task and its lifecycle state.

    Input (query, location) and output (result_payload / error_message) are
    kept in separate fields; the output never overwrites the input.
    """

    owner_id: str
    query: str
    location: LocationSpec
    id: int | None = None
    status: JobStatus = JobStatus.PENDING
    result_payload: dict[str, Any] | None = None
    error_message: str | None = None
    attempts: int = 0
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def create(cls, *, owner_id: str, query: str, location: LocationSpec) -> "SearchJob":
        now = _utcnow()
        return cls(
            owner_id=owner_id,
            query=query,
            location=location,
            status=JobStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal
