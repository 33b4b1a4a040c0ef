from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class GeocodeResult:
    latitude: float
    longitude: float
    formatted_address: str | None = None


class Geocoder(ABC):
    """Port for turning a place name into coordinates."""

    @abstractmethod
    async def geocode(self, place_name: str) -> list[GeocodeResult]:
        """Return matches ordered by relevance; an empty list means no match."""
        ...
