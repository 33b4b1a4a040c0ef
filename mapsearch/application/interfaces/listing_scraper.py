from abc import ABC, abstractmethod
from typing import Any


class ListingScraper(ABC):
    """Port for the (slow) external listing scrape.

    Records are returned raw: {name, rating, reviewCount, address, phone,
    website, latitude, longitude, sourceUrl, imageUrl}.
    """

    @abstractmethod
    async def fetch_listings(
        self, query: str, latitude: float, longitude: float
    ) -> list[dict[str, Any]]:
        ...
