import asyncio
from dataclasses import dataclass
from typing import Any

import structlog

from mapsearch.application.interfaces.geocoder import Geocoder
from mapsearch.application.interfaces.listing_scraper import ListingScraper
from mapsearch.application.interfaces.result_cache import ResultCache
from mapsearch.application.search_criteria import DEFAULT_QUERY_MAX_LENGTH, parse_search_criteria
from mapsearch.domain.entities.search_job import (
    CUSTOM_COORDINATES_LABEL,
    LocationSpec,
    ResolvedLocation,
    SearchJob,
)
from mapsearch.domain.errors import GeocodingError, ScrapeFailure, ScrapeTimeoutError
from mapsearch.domain.services.cache_key import build_cache_key
from mapsearch.domain.services.listing_normalizer import normalize_listings

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ExecutorConfig:
    scrape_timeout_seconds: float = 45.0
    retry_count: int = 1
    retry_backoff_seconds: float = 1.0
    cache_ttl_seconds: float = 600.0
    max_concurrent_scrapes: int = 5
    query_max_length: int = DEFAULT_QUERY_MAX_LENGTH


@dataclass
class SearchOutcome:
    payload: dict[str, Any]
    attempts: int
    from_cache: bool


class SearchExecutor:
    """
    Use case: turn one search job's input into a result payload.

    Validation and geocoding failures are raised immediately; only the scrape
    call is retried. Timed-out attempts are cancelled and count as failures.
    """

    def __init__(
        self,
        geocoder: Geocoder,
        scraper: ListingScraper,
        cache: ResultCache,
        config: ExecutorConfig | None = None,
    ) -> None:
        self._geocoder = geocoder
        self._scraper = scraper
        self._cache = cache
        self._config = config or ExecutorConfig()
        # Caps external calls independently of job concurrency.
        self._scrape_slots = asyncio.Semaphore(self._config.max_concurrent_scrapes)

    async def execute(self, job: SearchJob) -> SearchOutcome:
        criteria = parse_search_criteria(
            {
                "q": job.query,
                "location": job.location.place_name,
                "lat": job.location.latitude,
                "lng": job.location.longitude,
            },
            query_max_length=self._config.query_max_length,
        )
        query = criteria.q
        resolved = await self._resolve_location(criteria.to_location_spec())

        cache_key = build_cache_key(query, resolved.latitude, resolved.longitude)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.info("search_cache_hit", job_id=job.id, cache_key=cache_key)
            return SearchOutcome(payload=cached, attempts=0, from_cache=True)

        raw_items, attempts = await self._scrape_with_retry(
            query, resolved.latitude, resolved.longitude
        )
        results = normalize_listings(raw_items)

        payload = {
            "query": query,
            "location": resolved.label,
            "center": {"lat": resolved.latitude, "lng": resolved.longitude},
            "results": results,
            "count": len(results),
        }
        self._cache.set(cache_key, payload, self._config.cache_ttl_seconds)
        logger.info(
            "search_executed",
            job_id=job.id,
            cache_key=cache_key,
            raw_count=len(raw_items),
            result_count=len(results),
            attempts=attempts,
        )
        return SearchOutcome(payload=payload, attempts=attempts, from_cache=False)

    async def _resolve_location(self, location: LocationSpec) -> ResolvedLocation:
        if location.latitude is not None and location.longitude is not None:
            return ResolvedLocation(
                latitude=location.latitude,
                longitude=location.longitude,
                label=CUSTOM_COORDINATES_LABEL,
            )

        place_name = location.place_name or ""
        logger.info("geocoding_location", place_name=place_name)
        try:
            matches = await self._geocoder.geocode(place_name)
        except Exception as exc:
            logger.error("geocoding_failed", place_name=place_name, error=str(exc))
            raise GeocodingError("Geocoding service failed.") from exc

        if not matches:
            raise GeocodingError(f"Could not geocode location: {place_name}")

        best = matches[0]
        logger.info(
            "geocoded_location",
            place_name=place_name,
            latitude=best.latitude,
            longitude=best.longitude,
        )
        return ResolvedLocation(
            latitude=best.latitude,
            longitude=best.longitude,
            label=best.formatted_address or place_name,
        )

    async def _scrape_with_retry(
        self, query: str, latitude: float, longitude: float
    ) -> tuple[list[dict[str, Any]], int]:
        max_attempts = self._config.retry_count + 1
        attempt = 1

        while True:
            logger.info(
                "scrape_attempt",
                attempt=attempt,
                max_attempts=max_attempts,
                query=query,
                latitude=latitude,
                longitude=longitude,
            )
            try:
                items = await self._scrape_once(query, latitude, longitude)
                return items, attempt
            except Exception as exc:
                logger.warning("scrape_attempt_failed", attempt=attempt, error=str(exc))
                if attempt >= max_attempts:
                    raise ScrapeFailure(attempt, exc) from exc

            if self._config.retry_backoff_seconds > 0:
                await asyncio.sleep(self._config.retry_backoff_seconds)
            attempt += 1

    async def _scrape_once(
        self, query: str, latitude: float, longitude: float
    ) -> list[dict[str, Any]]:
        timeout = self._config.scrape_timeout_seconds
        async with self._scrape_slots:
            try:
                items = await asyncio.wait_for(
                    self._scraper.fetch_listings(query, latitude, longitude),
                    timeout=timeout,
                )
            except asyncio.TimeoutError as exc:
                raise ScrapeTimeoutError(timeout) from exc
        return list(items or [])
