"""
The one validated shape a search request must take before a job exists.

Both the submission path and the executor parse input through
``parse_search_criteria`` so a job can never hold input the executor rejects.
"""
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from mapsearch.domain.entities.search_job import LocationSpec
from mapsearch.domain.errors import ValidationError

DEFAULT_QUERY_MAX_LENGTH = 100
LOCATION_MAX_LENGTH = 100


class SearchCriteria(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True, extra="forbid")

    q: str = Field(min_length=1)
    location: str | None = Field(default=None, max_length=LOCATION_MAX_LENGTH)
    lat: float | None = Field(default=None, ge=-90, le=90, allow_inf_nan=False)
    lng: float | None = Field(default=None, ge=-180, le=180, allow_inf_nan=False)

    @field_validator("q")
    @classmethod
    def _query_length(cls, value: str, info: ValidationInfo) -> str:
        limit = (info.context or {}).get("query_max_length", DEFAULT_QUERY_MAX_LENGTH)
        if len(value) > limit:
            raise ValueError(f"must be at most {limit} characters")
        return value

    @field_validator("location")
    @classmethod
    def _blank_location_is_none(cls, value: str | None) -> str | None:
        return value or None

    @model_validator(mode="after")
    def _location_present(self) -> "SearchCriteria":
        has_pair = self.lat is not None and self.lng is not None
        if (self.lat is None) != (self.lng is None):
            raise ValueError("lat and lng must be provided together")
        if not has_pair and not self.location:
            raise ValueError('either a "location" or "lat" and "lng" coordinates are required')
        return self

    def to_location_spec(self) -> LocationSpec:
        """Coordinates win over a place name when both are given."""
        if self.lat is not None and self.lng is not None:
            return LocationSpec(latitude=self.lat, longitude=self.lng)
        return LocationSpec(place_name=self.location)


def _describe(exc: pydantic.ValidationError) -> str:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid value")
    return f"{field}: {message}" if field else message


def parse_search_criteria(
    data: dict[str, Any], *, query_max_length: int = DEFAULT_QUERY_MAX_LENGTH
) -> SearchCriteria:
    """Validate raw request fields, raising the domain ValidationError on failure."""
    if data.get("q") is None:
        raise ValidationError("Search query (q) is required.")
    try:
        return SearchCriteria.model_validate(
            data, context={"query_max_length": query_max_length}
        )
    except pydantic.ValidationError as exc:
        raise ValidationError(f"Validation Error: {_describe(exc)}") from exc
