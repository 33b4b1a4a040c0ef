"""HTTP client for the listing scraper service."""
from typing import Any

import httpx
import structlog

from mapsearch.application.interfaces.listing_scraper import ListingScraper
from mapsearch.config import settings

logger = structlog.get_logger(__name__)


class ScraperClientError(Exception):
    pass


class HttpListingScraper(ListingScraper):
    """Thin HTTP wrapper around the scraper service REST API.

    No client-side timeout is set here: the executor bounds every attempt and
    cancels the request when the deadline passes.
    """

    def __init__(
        self,
        base_url: str = settings.scraper_api_url,
        api_key: str = settings.scraper_api_key,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._headers = {"Content-Type": "application/json"}
        if api_key:
            self._headers["x-api-key"] = api_key
        self._transport = transport

    async def fetch_listings(
        self, query: str, latitude: float, longitude: float
    ) -> list[dict[str, Any]]:
        """
        POST /listings → {"results": [{...raw listing...}, ...]}
        """
        payload = {"query": query, "latitude": latitude, "longitude": longitude}

        async with httpx.AsyncClient(timeout=None, transport=self._transport) as client:
            try:
                response = await client.post(
                    f"{self._base_url}/listings",
                    json=payload,
                    headers=self._headers,
                )
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPStatusError as exc:
                logger.error(
                    "scraper_request_failed",
                    status_code=exc.response.status_code,
                    response=exc.response.text,
                )
                raise ScraperClientError(
                    f"Scraper returned {exc.response.status_code}: {exc.response.text}"
                ) from exc
            except httpx.RequestError as exc:
                logger.error("scraper_connection_failed", error=str(exc))
                raise ScraperClientError(f"Failed to reach scraper: {exc}") from exc
            except ValueError as exc:
                raise ScraperClientError("Scraper returned a non-JSON body") from exc

        results = data.get("results", []) if isinstance(data, dict) else data
        if not isinstance(results, list):
            raise ScraperClientError("Scraper response has no result list")

        logger.info("scraper_listings_fetched", query=query, count=len(results))
        return results
